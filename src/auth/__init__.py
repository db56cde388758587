from __future__ import annotations

from typing import Dict

from auth.base import (
    AuthError,
    AuthFailed,
    AuthHealthResult,
    AuthHealthStatus,
    AuthInvalid,
    AuthProvider,
)

_PROVIDERS: Dict[str, AuthProvider] = {}


def get_provider(name: str) -> AuthProvider:
    key = (name or "").strip().lower()

    if key not in _PROVIDERS:
        if key != "youtube":
            raise ValueError(f"Unknown auth provider: {name}")

        from auth.youtube import YouTubeOAuthProvider

        _PROVIDERS[key] = YouTubeOAuthProvider()

    return _PROVIDERS[key]


def check(provider_name: str = "youtube") -> AuthHealthResult:
    return get_provider(provider_name).health_check()


__all__ = [
    "AuthError",
    "AuthFailed",
    "AuthHealthResult",
    "AuthHealthStatus",
    "AuthInvalid",
    "AuthProvider",
    "check",
    "get_provider",
]
