"""
Entries of the GitOps controller's `repository.credentials` list.

Keys this service does not manage (for example `sshPrivateKeySecret`) are kept
on the models so untouched entries are written back as they were read.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import SecretKey


class SecretKeyReference(BaseModel):
    """A key inside a named secret object."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    key: str = ""


class RepositoryCredentialEntry(BaseModel):
    """Credentials the GitOps controller uses for every repository under `url`."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    url: str = ""
    username_secret: Optional[SecretKeyReference] = Field(default=None, alias="usernameSecret")
    password_secret: Optional[SecretKeyReference] = Field(default=None, alias="passwordSecret")

    def point_at_secret(self, secret_name: str) -> None:
        """Reference the username/password keys of `secret_name`."""
        self.username_secret = SecretKeyReference(name=secret_name, key=SecretKey.USERNAME.value)
        self.password_secret = SecretKeyReference(name=secret_name, key=SecretKey.PASSWORD.value)

    def to_document(self) -> Dict[str, Any]:
        """Plain mapping for YAML output; empty fields are left out."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


class SecretObjectReference(BaseModel):
    """Where a provisioned secret lives."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    name: str
