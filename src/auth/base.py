from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol


class AuthError(Exception):
    """Base credential error for any provider."""


class AuthInvalid(AuthError):
    """Stored credential is missing, expired beyond refresh, or rejected."""


class AuthFailed(AuthError):
    """Unexpected failure while building an authorized client."""


class AuthHealthStatus(str, Enum):
    OK = "ok"
    OK_API_QUOTA = "ok_api_quota"
    AUTH_INVALID = "auth_invalid"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthHealthResult:
    provider: str
    status: AuthHealthStatus
    message: str

    @property
    def usable(self) -> bool:
        return self.status in (AuthHealthStatus.OK, AuthHealthStatus.OK_API_QUOTA)


class AuthProvider(Protocol):
    """
    Credential collaborator for a destination API.

    - ensure_ready() loads the stored credential, refreshing it or running
      the one-time authorization handshake when needed
    - build_client() returns an authenticated API client
    - health_check() performs a cheap authenticated call
    """

    name: str

    def ensure_ready(self) -> None: ...

    def build_client(self) -> Any: ...

    def health_check(self) -> AuthHealthResult: ...
