"""
SQLAlchemy models and database configuration.
"""

from .db_base import AuditMixin, utc_now
from .db_config import Base, DatabaseManager, import_all_models, initialize_db
from .db_gitops_config_models import GitOpsConfigRecord

__all__ = [
    # Base definitions
    "Base",
    "AuditMixin",
    "utc_now",
    # Engine and sessions
    "DatabaseManager",
    "import_all_models",
    "initialize_db",
    # Models
    "GitOpsConfigRecord",
]
