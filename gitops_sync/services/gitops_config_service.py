"""
Service for registering and updating GitOps provider credentials.

A create or update first commits the credential record, then mirrors the
credential into the cluster: the shared credential secret is provisioned and
the GitOps controller ConfigMap is reconciled. A cluster failure after the
commit is reported to the caller while the record stays stored.
"""

from typing import List, NoReturn, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..cluster.connection import ClusterConnectionResolver
from ..config import GitOpsSettings, ReconcileConfig, get_config
from ..context.operation_context import operation
from ..db.db_base import utc_now
from ..db.db_gitops_config_models import GitOpsConfigRecord
from ..enums import GitProvider
from ..exceptions import (
    ErrorCode,
    GitOpsConfigNotFoundError,
    RepositoryError,
    ServiceError,
    ValidationError,
)
from ..repositories.gitops_config_repository import GitOpsConfigRepository
from ..schemas.gitops_config_schema import (
    GitOpsConfigCreate,
    GitOpsConfigRead,
    GitOpsConfigRequest,
    GitOpsConfigUpdate,
)
from ..utils.logger import ContextAwareLogger, get_logger
from .configmap_reconciler import ConfigMapReconciler, ReconcileResult
from .secret_provisioner import SecretProvisioner


class GitOpsConfigService:
    """Credential record CRUD plus mirroring into the GitOps controller."""

    def __init__(
        self,
        session: Session,
        connection_resolver: Optional[ClusterConnectionResolver] = None,
        settings: Optional[GitOpsSettings] = None,
        reconcile_config: Optional[ReconcileConfig] = None,
        repository: Optional[GitOpsConfigRepository] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Args:
            session: SQLAlchemy session; this service commits it
            connection_resolver: Builds cluster clients, defaults to the configured cluster access
            settings: GitOps controller settings, defaults to the global config
            reconcile_config: Retry settings, defaults to the global config
            repository: Optional repository override
            logger: Optional logger instance
        """
        app_config = get_config()
        self.session = session
        self.repository = repository or GitOpsConfigRepository(session)
        self.connection_resolver = connection_resolver or ClusterConnectionResolver(
            app_config.cluster
        )
        self.settings = settings or app_config.gitops
        self.reconcile_config = reconcile_config or app_config.reconcile
        self.logger = logger or get_logger()

    def _rollback_and_fail(self, e: Exception, message: str, operation_name: str) -> NoReturn:
        self.session.rollback()
        raise ServiceError(message, operation=operation_name, cause=e) from e

    def _sync_to_cluster(self, record: GitOpsConfigRecord) -> ReconcileResult:
        """Provision the shared secret and merge the record's host into the ConfigMap."""
        cluster_client = self.connection_resolver.resolve(self.settings.cluster_name)

        SecretProvisioner(cluster_client, logger=self.logger).ensure_secret(
            self.settings.namespace,
            self.settings.secret_name,
            record.username or "",
            record.token or "",
        )

        reconciler = ConfigMapReconciler(
            cluster_client, max_attempts=self.reconcile_config.max_attempts, logger=self.logger
        )
        return reconciler.reconcile(
            self.settings.namespace,
            self.settings.config_map_name,
            record,
            self.settings.secret_name,
        )

    @operation(name="gitops_config_service_create")
    def create_gitops_config(self, request: GitOpsConfigRequest) -> GitOpsConfigCreate:
        """
        Store a provider credential and mirror it into the cluster.

        Returns:
            The request with the assigned id

        Raises:
            ServiceError: If the record cannot be stored
            InfraError: If the cluster cannot be reached or rejects a write
            ConflictExhaustedError: If the ConfigMap kept changing underneath
            SerializationError: If the ConfigMap's credential list is malformed
        """
        record = GitOpsConfigRecord(
            provider=request.provider.value,
            username=request.username,
            token=request.token,
            github_org_id=request.github_org_id,
            gitlab_group_id=request.gitlab_group_id,
            host=request.host,
            active=request.active,
            created_by=request.user_id,
            updated_by=request.user_id,
        )

        try:
            self.repository.create(record)
            self.session.commit()
        except (RepositoryError, SQLAlchemyError) as e:
            self._rollback_and_fail(
                e, "gitops config failed to create in db", "create_gitops_config"
            )

        self.logger.info(
            "GitOps config created",
            extra={"config_id": record.id, "provider": record.provider, "host": record.host},
        )

        self._sync_to_cluster(record)

        return GitOpsConfigCreate.model_validate(
            {**request.model_dump(), "id": record.id, "user_id": request.user_id}
        )

    @operation(name="gitops_config_service_update")
    def update_gitops_config(self, request: GitOpsConfigUpdate) -> None:
        """
        Replace a stored provider credential and mirror it into the cluster.

        Raises:
            ValidationError: If no record has the request's id
            ServiceError: If the record cannot be stored
            InfraError: If the cluster cannot be reached or rejects a write
            ConflictExhaustedError: If the ConfigMap kept changing underneath
            SerializationError: If the ConfigMap's credential list is malformed
        """
        try:
            record = self.repository.get_by_id(request.id)
        except GitOpsConfigNotFoundError as e:
            raise ValidationError(
                "gitops config update failed, does not exist",
                field="id",
                error_code=ErrorCode.NOT_FOUND,
                cause=e,
                config_id=request.id,
            ) from e

        record.provider = request.provider.value
        record.username = request.username
        record.token = request.token
        record.github_org_id = request.github_org_id
        record.gitlab_group_id = request.gitlab_group_id
        record.host = request.host
        record.active = request.active
        record.updated_on = utc_now()
        record.updated_by = request.user_id

        try:
            self.repository.update(record)
            self.session.commit()
        except (RepositoryError, SQLAlchemyError) as e:
            self._rollback_and_fail(
                e, "gitops config failed to update in db", "update_gitops_config"
            )

        self.logger.info(
            "GitOps config updated",
            extra={"config_id": record.id, "provider": record.provider, "host": record.host},
        )

        self._sync_to_cluster(record)

    @operation(name="gitops_config_service_get_by_id")
    def get_gitops_config_by_id(self, config_id: int) -> GitOpsConfigRead:
        """
        Raises:
            GitOpsConfigNotFoundError: If no record has this id
        """
        return GitOpsConfigRead.from_record(self.repository.get_by_id(config_id))

    @operation(name="gitops_config_service_get_all")
    def get_all_gitops_config(self) -> List[GitOpsConfigRead]:
        return [GitOpsConfigRead.from_record(record) for record in self.repository.get_all()]

    @operation(name="gitops_config_service_get_by_provider")
    def get_gitops_config_by_provider(
        self, provider: Union[str, GitProvider]
    ) -> GitOpsConfigRead:
        """
        Raises:
            GitOpsConfigNotFoundError: If the provider has no record
        """
        return GitOpsConfigRead.from_record(self.repository.get_by_provider(provider))
