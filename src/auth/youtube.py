from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

import config
from auth.base import (
    AuthFailed,
    AuthHealthResult,
    AuthHealthStatus,
    AuthInvalid,
    AuthProvider,
)
from env import get_env
from env.paths import auth_client_secrets_file, auth_token_file
from logger import get_logger
from pipeline.errors import is_quota_payload


def _is_quota_exceeded_error(exc: Exception) -> bool:
    status = getattr(getattr(exc, "resp", None), "status", None)
    if status not in (403, "403"):
        return False
    return is_quota_payload(getattr(exc, "content", b""))


class YouTubeOAuthProvider(AuthProvider):
    """
    OAuth credential lifecycle for the YouTube Data API.

    The authorization handshake is single-shot: run_local_server() starts a
    listener on localhost, opens the consent page, serves exactly one
    redirect, and returns the credential. The token is written once and
    reused (and refreshed) by every later run.
    """

    name = "youtube"

    def __init__(
        self,
        token_path: Optional[Path] = None,
        secrets_path: Optional[Path] = None,
    ) -> None:
        self._logger = get_logger("auth.youtube")
        self._token_path = token_path
        self._secrets_path = secrets_path

    @property
    def token_path(self) -> Path:
        return self._token_path or auth_token_file()

    @property
    def secrets_path(self) -> Path:
        return self._secrets_path or auth_client_secrets_file()

    def ensure_ready(self) -> None:
        _ = self._load_or_authenticate()

    def build_client(self) -> Any:
        creds = self._load_or_authenticate()
        try:
            return build("youtube", "v3", credentials=creds, cache_discovery=False)
        except Exception as e:
            self._logger.error(f"Failed to build YouTube client: {e}")
            raise AuthFailed(str(e)) from e

    def health_check(self) -> AuthHealthResult:
        """
        Validates OAuth with a cheap authenticated request.
        Quota exhaustion still counts as a usable credential.
        """
        self._logger.info("oauth.check.start")

        try:
            youtube = self.build_client()
            youtube.channels().list(part="id", mine=True, maxResults=1).execute()
        except AuthInvalid as e:
            self._logger.error(f"oauth.check.auth_invalid: {e}")
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.AUTH_INVALID,
                message="OAuth INVALID - reauthentication required",
            )
        except HttpError as e:
            if _is_quota_exceeded_error(e):
                self._logger.warning("oauth.check.ok_quota_exhausted")
                return AuthHealthResult(
                    provider=self.name,
                    status=AuthHealthStatus.OK_API_QUOTA,
                    message="OAuth OK (API quota exhausted)",
                )
            self._logger.error(f"oauth.check.failed: {e}")
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.FAILED,
                message=f"OAuth check failed (HTTP {getattr(e.resp, 'status', '?')})",
            )
        except Exception as e:
            self._logger.error("oauth.check.failed", exc_info=e)
            return AuthHealthResult(
                provider=self.name,
                status=AuthHealthStatus.FAILED,
                message="OAuth check failed (unexpected error)",
            )

        self._logger.info("oauth.check.ok")
        return AuthHealthResult(
            provider=self.name,
            status=AuthHealthStatus.OK,
            message="OAuth OK",
        )

    # -----------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------

    def _load_token(self) -> Optional[Credentials]:
        if not self.token_path.exists():
            self._logger.info("No stored OAuth token; authorization required")
            return None
        try:
            creds = Credentials.from_authorized_user_file(
                str(self.token_path),
                config.YOUTUBE_OAUTH_SCOPES,
            )
            self._logger.debug("Loaded stored OAuth token")
            return creds
        except (ValueError, OSError) as e:
            self._logger.warning(f"Stored OAuth token unusable: {e}")
            return None

    def _load_or_authenticate(self) -> Credentials:
        creds = self._load_token()

        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            try:
                self._logger.debug("Refreshing expired OAuth token...")
                creds.refresh(Request())
            except GoogleAuthError as e:
                self._logger.error(f"Failed to refresh token: {e}")
                raise AuthInvalid(str(e)) from e
            self._persist_token(creds)
            return creds

        return self._authorize()

    def _authorize(self) -> Credentials:
        if not self.secrets_path.exists():
            raise AuthInvalid(f"Missing OAuth client secrets file: {self.secrets_path}")

        port = get_env().oauth_port
        try:
            self._logger.info("Starting one-time OAuth authorization...")
            flow = InstalledAppFlow.from_client_secrets_file(
                str(self.secrets_path),
                config.YOUTUBE_OAUTH_SCOPES,
            )
            creds = flow.run_local_server(
                port=port,
                access_type="offline",
                prompt="consent",
                success_message=config.OAUTH_SUCCESS_MESSAGE,
            )
        except Exception as e:
            self._logger.error(f"OAuth authorization failed: {e}")
            raise AuthInvalid(str(e)) from e

        self._logger.info("OAuth authorization complete")
        self._persist_token(creds)
        return creds

    def _persist_token(self, creds: Credentials) -> None:
        path = self.token_path
        try:
            # Created 0600; fchmod also tightens a token file that already existed
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                os.fchmod(f.fileno(), 0o600)
                f.write(creds.to_json())
            self._logger.info(f"Tokens saved to {path}")
        except OSError as e:
            # The credential still works for this run; the next run reauthorizes.
            self._logger.warning(f"Could not save OAuth token to {path}: {e}")
