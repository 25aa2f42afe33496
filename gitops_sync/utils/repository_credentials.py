"""
Codec and merge logic for the `repository.credentials` ConfigMap field.

The field holds a YAML list of repository credential entries. Keys are written
in sorted order and in block style, matching what the GitOps controller's own
tooling produces, so rewriting the list does not reshuffle entries that were
not touched.
"""

from typing import Any, List, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..constants import SecretKey
from ..exceptions import SerializationError
from ..schemas.repository_credentials_schema import RepositoryCredentialEntry, SecretKeyReference


def decode_repository_credentials(text: Optional[str]) -> List[RepositoryCredentialEntry]:
    """
    Parse the field into entries.

    Args:
        text: Raw field value; empty or missing means no entries

    Returns:
        Entries in the order they appear in the field

    Raises:
        SerializationError: If the text is not a YAML list of credential mappings
    """
    if not text or not text.strip():
        return []

    try:
        document: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SerializationError(
            "repository.credentials is not valid YAML",
            cause=e,
        ) from e

    if document is None:
        return []
    if not isinstance(document, list):
        raise SerializationError(
            "repository.credentials must be a list",
            found_type=type(document).__name__,
        )

    entries = []
    for index, item in enumerate(document):
        if not isinstance(item, dict):
            raise SerializationError(
                "repository.credentials entries must be mappings",
                index=index,
                found_type=type(item).__name__,
            )
        try:
            entries.append(RepositoryCredentialEntry.model_validate(item))
        except PydanticValidationError as e:
            raise SerializationError(
                f"Invalid repository credential entry at index {index}",
                index=index,
                cause=e,
            ) from e
    return entries


def encode_repository_credentials(entries: List[RepositoryCredentialEntry]) -> str:
    """Render entries back into the field's YAML form."""
    return yaml.safe_dump(
        [entry.to_document() for entry in entries],
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    )


def build_repository_entry(host: str, username: str, token: str) -> RepositoryCredentialEntry:
    """
    Entry for a host that has none yet.

    The secret references name the raw username and token rather than the
    provisioned secret; existing entries are repointed at the secret instead.
    """
    return RepositoryCredentialEntry(
        url=host,
        username_secret=SecretKeyReference(name=username, key=SecretKey.USERNAME.value),
        password_secret=SecretKeyReference(name=token, key=SecretKey.PASSWORD.value),
    )


def merge_repository_credential(
    entries: List[RepositoryCredentialEntry],
    host: str,
    username: str,
    token: str,
    secret_name: str,
) -> bool:
    """
    Merge one credential into `entries` in place.

    Every entry whose url equals `host` is pointed at `secret_name`; when none
    matches a new entry is appended. Positions of existing entries never change.

    Returns:
        True if an entry for `host` already existed
    """
    found = False
    for entry in entries:
        if entry.url == host:
            entry.point_at_secret(secret_name)
            found = True

    if not found:
        entries.append(build_repository_entry(host, username, token))

    return found
