"""
Pydantic schemas for GitOps provider credentials.

Requests accept `username` and `token`; read models never expose them.
Field aliases follow the camelCase wire names (`gitLabGroupId`, `gitHubOrgId`),
snake_case names are accepted as well.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..enums import GitProvider


class GitOpsConfigBase(BaseModel):
    """Fields shared by requests and responses."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )

    id: Optional[int] = Field(default=None, description="Record identifier")
    provider: GitProvider = Field(..., description="Git hosting provider")
    gitlab_group_id: str = Field(default="", alias="gitLabGroupId")
    github_org_id: str = Field(default="", alias="gitHubOrgId")
    host: str = Field(default="", description="Base URL of the git host")
    active: bool = Field(default=False)

    @field_validator("provider", mode="before")
    @classmethod
    def parse_provider(cls, v):
        """Accept provider names in any case."""
        try:
            return GitProvider.parse(v)
        except ValueError as e:
            allowed = ", ".join(p.value for p in GitProvider)
            raise ValueError(f"provider must be one of: {allowed}") from e

    @field_validator("gitlab_group_id", "github_org_id", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v


class GitOpsConfigRequest(GitOpsConfigBase):
    """Write shape; carries the secret material."""

    username: str = Field(default="")
    token: str = Field(default="", repr=False)
    user_id: Optional[int] = Field(default=None, exclude=True, description="Acting user")

    @field_validator("host")
    @classmethod
    def validate_host(cls, v):
        if not v:
            raise ValueError("host must be a non-empty URL")
        return v


class GitOpsConfigCreate(GitOpsConfigRequest):
    """Schema for registering a provider credential."""


class GitOpsConfigUpdate(GitOpsConfigRequest):
    """Schema for replacing an existing provider credential."""

    id: int = Field(..., description="Record identifier")


class GitOpsConfigRead(GitOpsConfigBase):
    """Read shape; username and token are write-only."""

    id: int
    user_id: Optional[int] = Field(default=None, exclude=True, description="Creator")

    @classmethod
    def from_record(cls, record) -> "GitOpsConfigRead":
        return cls(
            id=record.id,
            provider=record.provider,
            gitlab_group_id=record.gitlab_group_id,
            github_org_id=record.github_org_id,
            host=record.host,
            active=record.active,
            user_id=record.created_by,
        )
