"""
Tests for the repository credential list codec and merge.
"""

import pytest
import yaml

from gitops_sync.exceptions import ErrorCode, SerializationError
from gitops_sync.schemas import RepositoryCredentialEntry
from gitops_sync.utils.repository_credentials import (
    build_repository_entry,
    decode_repository_credentials,
    encode_repository_credentials,
    merge_repository_credential,
)

EXISTING_CREDENTIALS = """\
- url: https://gitlab.com
  usernameSecret:
    name: gitlab-secret
    key: username
  passwordSecret:
    name: gitlab-secret
    key: password
- url: git@bitbucket.org
  sshPrivateKeySecret:
    name: bitbucket-ssh
    key: sshPrivateKey
"""


class TestDecodeRepositoryCredentials:
    """Parsing the `repository.credentials` field."""

    @pytest.mark.parametrize("text", [None, "", "   \n", "~\n"])
    def test_empty_field_means_no_entries(self, text):
        """Missing, blank and null fields decode to an empty list."""
        assert decode_repository_credentials(text) == []

    def test_decodes_entries_in_order(self):
        """Entries keep their order and their secret references."""
        entries = decode_repository_credentials(EXISTING_CREDENTIALS)

        assert [entry.url for entry in entries] == ["https://gitlab.com", "git@bitbucket.org"]
        assert entries[0].username_secret.name == "gitlab-secret"
        assert entries[0].username_secret.key == "username"
        assert entries[0].password_secret.key == "password"

    def test_unknown_keys_are_kept(self):
        """Keys the service does not manage survive decoding."""
        entries = decode_repository_credentials(EXISTING_CREDENTIALS)

        assert entries[1].to_document() == {
            "url": "git@bitbucket.org",
            "sshPrivateKeySecret": {"name": "bitbucket-ssh", "key": "sshPrivateKey"},
        }

    def test_invalid_yaml_raises_serialization_error(self):
        """Text that is not YAML is rejected."""
        with pytest.raises(SerializationError) as exc_info:
            decode_repository_credentials("- url: [unclosed\n")

        assert exc_info.value.error_code == ErrorCode.SERIALIZATION_FAILED
        assert exc_info.value.status_code == 422

    def test_mapping_instead_of_list_raises_serialization_error(self):
        """The field must hold a list."""
        with pytest.raises(SerializationError) as exc_info:
            decode_repository_credentials("url: https://github.com\n")

        assert exc_info.value.context["found_type"] == "dict"

    def test_scalar_entry_raises_serialization_error(self):
        """Every list item must be a mapping."""
        with pytest.raises(SerializationError) as exc_info:
            decode_repository_credentials("- https://github.com\n")

        assert exc_info.value.context["index"] == 0

    def test_wrongly_typed_reference_raises_serialization_error(self):
        """A secret reference that is not a mapping is rejected."""
        with pytest.raises(SerializationError):
            decode_repository_credentials("- url: https://github.com\n  usernameSecret: plain\n")


class TestEncodeRepositoryCredentials:
    """Rendering entries back to YAML."""

    def test_block_style_with_sorted_keys(self):
        """Output is block style with keys sorted at every level."""
        text = encode_repository_credentials(
            [build_repository_entry("https://github.com", "user", "tok")]
        )

        assert text == (
            "- passwordSecret:\n"
            "    key: password\n"
            "    name: tok\n"
            "  url: https://github.com\n"
            "  usernameSecret:\n"
            "    key: username\n"
            "    name: user\n"
        )

    def test_empty_fields_are_omitted(self):
        """An entry with only a url renders only the url."""
        text = encode_repository_credentials([RepositoryCredentialEntry(url="https://a.example")])

        assert yaml.safe_load(text) == [{"url": "https://a.example"}]

    def test_decoded_entries_encode_to_the_same_documents(self):
        """Decoding then encoding keeps every entry's content."""
        entries = decode_repository_credentials(EXISTING_CREDENTIALS)

        reencoded = yaml.safe_load(encode_repository_credentials(entries))

        assert reencoded == yaml.safe_load(EXISTING_CREDENTIALS)


class TestMergeRepositoryCredential:
    """Merging one credential into the list."""

    def test_new_host_is_appended_with_raw_references(self):
        """A host without an entry gets one at the end naming the raw username and token."""
        entries = decode_repository_credentials(EXISTING_CREDENTIALS)
        before = [entry.to_document() for entry in entries]

        found = merge_repository_credential(
            entries, "https://github.com", "octocat", "ghp_abc", "devtron-gitops-secret"
        )

        assert found is False
        assert len(entries) == 3
        assert [entry.to_document() for entry in entries[:2]] == before
        assert entries[2].to_document() == {
            "url": "https://github.com",
            "usernameSecret": {"name": "octocat", "key": "username"},
            "passwordSecret": {"name": "ghp_abc", "key": "password"},
        }

    def test_existing_host_is_pointed_at_secret(self):
        """An entry for the host is repointed at the named secret and nothing is appended."""
        entries = decode_repository_credentials(EXISTING_CREDENTIALS)

        found = merge_repository_credential(
            entries, "https://gitlab.com", "octocat", "ghp_abc", "devtron-gitops-secret"
        )

        assert found is True
        assert len(entries) == 2
        assert entries[0].to_document() == {
            "url": "https://gitlab.com",
            "usernameSecret": {"name": "devtron-gitops-secret", "key": "username"},
            "passwordSecret": {"name": "devtron-gitops-secret", "key": "password"},
        }

    def test_every_matching_entry_is_updated(self):
        """Duplicate entries for a host are all repointed."""
        entries = [
            RepositoryCredentialEntry(url="https://github.com"),
            RepositoryCredentialEntry(url="https://gitlab.com"),
            RepositoryCredentialEntry(url="https://github.com"),
        ]

        found = merge_repository_credential(
            entries, "https://github.com", "u", "t", "devtron-gitops-secret"
        )

        assert found is True
        assert entries[0].username_secret.name == "devtron-gitops-secret"
        assert entries[1].username_secret is None
        assert entries[2].password_secret.name == "devtron-gitops-secret"

    def test_merge_into_empty_list(self):
        """The first credential produces a single entry."""
        entries = []

        assert merge_repository_credential(entries, "https://github.com", "u", "t", "s") is False
        assert [entry.url for entry in entries] == ["https://github.com"]

    def test_url_match_is_exact(self):
        """A trailing slash makes a different host."""
        entries = [RepositoryCredentialEntry(url="https://github.com/")]

        assert merge_repository_credential(entries, "https://github.com", "u", "t", "s") is False
        assert len(entries) == 2
