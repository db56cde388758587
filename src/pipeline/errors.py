"""
errors.py

Failure taxonomy shared by the source and destination collaborators.

Every external call ends in one of three ways besides success:

- RateLimited: throttling / quota; retried by the backoff controller
- NotFound:    the target does not exist; callers record it as terminal state
- Fatal:       anything else (network, unexpected status, malformed payload)

Collaborators translate their library's exceptions into these types so the
engines never see requests / googleapiclient errors directly.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

Status = Union[int, str]

QUOTA_REASONS = (
    "quotaExceeded",
    "dailyLimitExceeded",
    "rateLimitExceeded",
    "userRateLimitExceeded",
)

# 404 reasons naming the container rather than the item being added
TARGET_MISSING_REASONS = ("playlistNotFound",)


class SyncError(Exception):
    """Base class for classified external-call failures."""

    def __init__(self, message: str = "", status: Optional[Status] = None):
        super().__init__(message)
        self.status = status


class RateLimited(SyncError):
    """HTTP 429, or 403 carrying a quota reason. Retryable."""


class NotFound(SyncError):
    """HTTP 404. Terminal but benign."""


class Fatal(SyncError):
    """Unretryable failure."""

    @property
    def status_key(self) -> str:
        return str(self.status) if self.status is not None else "unknown"


class TargetMissing(Fatal):
    """
    The destination container itself is gone (e.g. playlistNotFound).
    Every later call would fail the same way, so callers stop the run.
    """


# ============================================================
# Classification helpers
# ============================================================


def _coerce_payload(payload: Any) -> dict:
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="ignore")
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return {}
    return payload if isinstance(payload, dict) else {}


def _has_reason(payload: Any, reasons: tuple) -> bool:
    data = _coerce_payload(payload)
    error = data.get("error")
    if not isinstance(error, dict):
        return False

    for err in error.get("errors") or []:
        if isinstance(err, dict) and err.get("reason") in reasons:
            return True
    return False


def is_quota_payload(payload: Any) -> bool:
    """
    Google APIs signal quota problems in error.errors[].reason.
    """
    return _has_reason(payload, QUOTA_REASONS)


def is_target_missing_payload(payload: Any) -> bool:
    return _has_reason(payload, TARGET_MISSING_REASONS)


def classify_status(
    status: Optional[int], payload: Any = None, message: str = ""
) -> SyncError:
    """Map an HTTP status (plus optional error body) onto the taxonomy."""
    msg = message or f"HTTP {status}"

    if status == 429:
        return RateLimited(msg, status=status)
    if status == 403 and is_quota_payload(payload):
        return RateLimited(msg, status=status)
    if status == 404 and is_target_missing_payload(payload):
        return TargetMissing(msg, status="target_missing")
    if status == 404:
        return NotFound(msg, status=status)
    return Fatal(msg, status=status if status is not None else "unknown")
