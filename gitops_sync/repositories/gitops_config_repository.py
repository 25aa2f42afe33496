"""
Repository for GitOps provider credential records.
"""

from typing import List, Union

from sqlalchemy.orm import Session

from ..db.db_gitops_config_models import GitOpsConfigRecord
from ..enums import GitProvider
from ..exceptions import GitOpsConfigNotFoundError, validation_failed
from .base_repository import BaseRepository


class GitOpsConfigRepository(BaseRepository[GitOpsConfigRecord]):
    """
    CRUD on GitOpsConfigRecord keyed by integer id and by provider.

    Writes are flushed but not committed; the caller owns the transaction.
    """

    def __init__(self, session: Session):
        super().__init__(session, GitOpsConfigRecord)

    def create(self, record: GitOpsConfigRecord) -> GitOpsConfigRecord:
        """
        Insert a new record and assign its id.

        Raises:
            RepositoryError: If the insert fails
        """
        with self._session_operation("create"):
            self.session.add(record)

        self.logger.debug(
            "GitOps config stored",
            extra={"config_id": record.id, "provider": record.provider, "host": record.host},
        )
        return record

    def update(self, record: GitOpsConfigRecord) -> None:
        """
        Persist changes made to a loaded record.

        Raises:
            RepositoryError: If the update fails
        """
        with self._session_operation("update", entity_id=record.id):
            self.session.add(record)

    def get_by_id(self, config_id: int) -> GitOpsConfigRecord:
        """
        Raises:
            GitOpsConfigNotFoundError: If no record has this id
            RepositoryError: If the query fails
        """
        with self._session_operation("get_by_id", entity_id=config_id, is_read_only=True):
            record = self.session.get(GitOpsConfigRecord, config_id)

        if record is None:
            raise GitOpsConfigNotFoundError(
                f"GitOps config not found: id={config_id}", config_id=config_id
            )
        return record

    def get_all(self) -> List[GitOpsConfigRecord]:
        with self._session_operation("get_all", is_read_only=True):
            return self.session.query(GitOpsConfigRecord).order_by(GitOpsConfigRecord.id).all()

    def get_by_provider(self, provider: Union[str, GitProvider]) -> GitOpsConfigRecord:
        """
        Record for a provider, preferring an active one.

        Raises:
            GitOpsConfigNotFoundError: If the provider has no record
            ValidationError: If the provider name is unknown
            RepositoryError: If the query fails
        """
        try:
            provider_name = GitProvider.parse(provider).value
        except ValueError as e:
            raise validation_failed("provider", provider, "unknown git provider", cause=e) from e

        with self._session_operation("get_by_provider", is_read_only=True):
            record = (
                self.session.query(GitOpsConfigRecord)
                .filter(GitOpsConfigRecord.provider == provider_name)
                .order_by(GitOpsConfigRecord.active.desc(), GitOpsConfigRecord.id)
                .first()
            )

        if record is None:
            raise GitOpsConfigNotFoundError(
                f"GitOps config not found: provider={provider_name}", provider=provider_name
            )
        return record
