"""
Source side collaborators: where to fetch from and with which credentials.
"""

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote, urlsplit, urlunsplit

from pydantic import SecretStr

from gitlab_import.core.paths import ImportTarget


@dataclass(frozen=True)
class Credentials:
    """Transport credentials for an HTTP(S) source."""

    username: str
    password: SecretStr

    def apply_to(self, uri: str) -> str:
        """Return ``uri`` with the credentials embedded as URL user-info."""
        parts = urlsplit(uri)
        if parts.scheme not in ("http", "https"):
            return uri
        host = parts.netloc.rsplit("@", 1)[-1]
        userinfo = "%s:%s" % (
            quote(self.username, safe=""),
            quote(self.password.get_secret_value(), safe=""),
        )
        return urlunsplit(
            (parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment)
        )

    def mask(self, text: str) -> str:
        """Hide the secret in ``text`` for log output."""
        secret = self.password.get_secret_value()
        if not secret:
            return text
        for variant in {secret, quote(secret, safe="")}:
            text = text.replace(variant, "***TOKEN***")
        return text


class CredentialProvider(Protocol):
    def get_credentials(self) -> Optional[Credentials]:
        ...


class StaticCredentialProvider:
    """Hands out the same credentials, or none, for every fetch."""

    def __init__(self, credentials: Optional[Credentials] = None):
        self._credentials = credentials

    @classmethod
    def from_token(
        cls, username: Optional[str], token: Optional[SecretStr]
    ) -> "StaticCredentialProvider":
        if token is None:
            return cls(None)
        # GitHub and GitLab both accept any user name next to a token
        return cls(Credentials(username=username or "oauth2", password=token))

    def get_credentials(self) -> Optional[Credentials]:
        return self._credentials


class SourceUriResolver:
    """Builds ``{base_url}/{organisation}/{repository}.git``."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def resolve(self, target: ImportTarget) -> str:
        return f"{self.base_url}/{target.organisation}/{target.repository}.git"
