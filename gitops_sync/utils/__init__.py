"""Utility modules for the GitOps credential sync service."""

from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    CorrelationIdFilter,
    configure_logging,
    get_logger,
)
from .repository_credentials import (
    build_repository_entry,
    decode_repository_credentials,
    encode_repository_credentials,
    merge_repository_credential,
)
from .retry import RetryOutcome, retry_on_conflict

__all__ = [
    # Logging utilities
    "AzureQueueHandler",
    "ContextAwareLogger",
    "CorrelationIdFilter",
    "configure_logging",
    "get_logger",
    # Repository credential codec
    "build_repository_entry",
    "decode_repository_credentials",
    "encode_repository_credentials",
    "merge_repository_credential",
    # Retry
    "RetryOutcome",
    "retry_on_conflict",
]
