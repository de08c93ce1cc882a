"""Deployment context used by submission policies."""

from dataclasses import dataclass
from urllib.parse import urlsplit

_LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}  # noqa: S104


@dataclass(frozen=True)
class DeploymentContext:
    """Where the service believes it is running."""

    hostname: str
    scheme: str

    @classmethod
    def from_url(cls, base_url: str) -> "DeploymentContext":
        """Build a context from the public base URL of the deployment."""
        parts = urlsplit(base_url)
        return cls(hostname=(parts.hostname or "").lower(), scheme=parts.scheme.lower())

    @property
    def is_local(self) -> bool:
        """Whether this is a developer machine."""
        return self.scheme == "file" or self.hostname in {"localhost", "127.0.0.1"}

    @property
    def is_production(self) -> bool:
        """Not local, not loopback and served over TLS."""
        return (
            "localhost" not in self.hostname
            and "127.0.0.1" not in self.hostname
            and self.scheme == "https"
        )


def is_loopback_url(url: str) -> bool:
    """Whether a URL points at the local machine."""
    hostname = (urlsplit(url).hostname or "").lower()
    return (
        hostname in _LOOPBACK_HOSTS
        or hostname.endswith(".localhost")
        or hostname.startswith("127.")
    )
