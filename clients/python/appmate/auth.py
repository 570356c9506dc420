"""HTTP Basic authentication context."""

import base64
from dataclasses import dataclass, field

from .exceptions import DuplicateCredentialsError
from .host import HostSpec


@dataclass(frozen=True)
class AuthContext:
    """Optional Basic-Auth credential attached to every outgoing request.

    Instances are immutable, so handing one to a derived table behaves as a
    copy: nothing done through one holder is visible through another.
    """

    username: str | None = None
    credential: str | None = field(default=None, repr=False)

    @classmethod
    def from_credentials(cls, username: str, password: str | None) -> "AuthContext":
        """Encode ``username:password`` for the ``Authorization`` header."""
        pair = f"{username}:{password or ''}"
        encoded = base64.b64encode(pair.encode("utf-8")).decode("ascii")
        return cls(username=username, credential=encoded)

    @property
    def present(self) -> bool:
        return self.credential is not None

    @property
    def header(self) -> str | None:
        """Value of the ``Authorization`` header, or None without credentials."""
        if self.credential is None:
            return None
        return f"Basic {self.credential}"

    def apply(self, headers: dict[str, str]) -> dict[str, str]:
        """Add the ``Authorization`` header to ``headers`` when present."""
        if self.present:
            headers["Authorization"] = self.header
        return headers


def resolve_auth(
    spec: HostSpec,
    username: str | None = None,
    password: str | None = None,
) -> AuthContext:
    """Build the auth context from a host spec and explicit credentials.

    Raises:
        DuplicateCredentialsError: Credentials appear in the host string and
            are also passed explicitly.
    """
    explicit = bool(username or password)
    if spec.has_credentials and explicit:
        raise DuplicateCredentialsError(
            "more than one authentication parameter is assigned"
        )
    if explicit:
        return AuthContext.from_credentials(username or "", password)
    if spec.has_credentials:
        return AuthContext.from_credentials(spec.username, spec.password)
    return AuthContext()
