"""
GitOps provider credential model.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Boolean, Column, Index, Integer, String, Text

from .db_base import AuditMixin
from .db_config import Base


class GitOpsConfigRecord(Base, AuditMixin):
    """Credentials for one git hosting provider."""

    __tablename__ = "gitops_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    provider = Column(String(50), nullable=False)
    username = Column(String(250), nullable=True)
    token = Column(Text, nullable=True)
    github_org_id = Column(String(250), nullable=True)
    gitlab_group_id = Column(String(250), nullable=True)

    # Key of the mirrored repository credential entry; not unique in the table
    host = Column(String(500), nullable=False)
    active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (Index("ix_gitops_config_provider", "provider"),)

    def __repr__(self) -> str:
        return (
            f"GitOpsConfigRecord(id={self.id}, provider='{self.provider}', "
            f"host='{self.host}', active={self.active})"
        )
