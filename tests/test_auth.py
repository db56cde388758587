import json
import stat

import pytest
from googleapiclient.errors import HttpError

from auth import AuthInvalid, get_provider
from auth.base import AuthHealthResult, AuthHealthStatus
from auth.youtube import YouTubeOAuthProvider, _is_quota_exceeded_error


class FakeResp(dict):
    def __init__(self, status):
        super().__init__(status=str(status))
        self.status = status
        self.reason = "error"


def _http_error(status, reason):
    body = {"error": {"errors": [{"reason": reason}]}}
    return HttpError(FakeResp(status), json.dumps(body).encode("utf-8"))


def test_quota_exceeded_detection():
    assert _is_quota_exceeded_error(_http_error(403, "quotaExceeded"))
    assert not _is_quota_exceeded_error(_http_error(403, "forbidden"))
    assert not _is_quota_exceeded_error(_http_error(404, "quotaExceeded"))
    assert not _is_quota_exceeded_error(ValueError("x"))


def test_health_result_shapes():
    r = AuthHealthResult(
        provider="youtube",
        status=AuthHealthStatus.OK_API_QUOTA,
        message="ok",
    )

    assert r.provider == "youtube"
    assert r.usable is True
    assert AuthHealthResult("youtube", AuthHealthStatus.FAILED, "x").usable is False


def test_registry_returns_singleton_and_rejects_unknown():
    assert get_provider("YouTube") is get_provider("youtube")
    with pytest.raises(ValueError):
        get_provider("vimeo")


def test_missing_secrets_is_auth_invalid(tmp_path):
    provider = YouTubeOAuthProvider(
        token_path=tmp_path / "token.json",
        secrets_path=tmp_path / "client_secret.json",
    )

    with pytest.raises(AuthInvalid):
        provider.ensure_ready()


class _StubProvider(YouTubeOAuthProvider):
    def __init__(self, client=None, error=None):
        super().__init__()
        self._client = client
        self._error = error

    def build_client(self):
        if self._error:
            raise self._error
        return self._client


class _Channels:
    def __init__(self, error=None):
        self.error = error

    def list(self, **kwargs):
        return self

    def execute(self):
        if self.error:
            raise self.error
        return {"items": [{"id": "UC1"}]}


class _Client:
    def __init__(self, error=None):
        self._channels = _Channels(error)

    def channels(self):
        return self._channels


def test_health_check_ok():
    result = _StubProvider(client=_Client()).health_check()
    assert result.status == AuthHealthStatus.OK


def test_health_check_quota_is_still_usable():
    result = _StubProvider(
        client=_Client(_http_error(403, "quotaExceeded"))
    ).health_check()
    assert result.status == AuthHealthStatus.OK_API_QUOTA
    assert result.usable


def test_health_check_invalid_credentials():
    result = _StubProvider(error=AuthInvalid("revoked")).health_check()
    assert result.status == AuthHealthStatus.AUTH_INVALID


def test_health_check_other_http_error_fails():
    client = _Client(_http_error(500, "backendError"))
    result = _StubProvider(client=client).health_check()
    assert result.status == AuthHealthStatus.FAILED


class _Creds:
    def to_json(self):
        return '{"token": "t"}'


def test_saved_token_is_owner_only(tmp_path):
    path = tmp_path / "token.json"
    YouTubeOAuthProvider(token_path=path)._persist_token(_Creds())

    assert path.read_text(encoding="utf-8") == '{"token": "t"}'
    assert stat.S_IMODE(path.stat().st_mode) == 0o600


def test_saving_tightens_an_existing_token_file(tmp_path):
    path = tmp_path / "token.json"
    path.write_text("old", encoding="utf-8")
    path.chmod(0o644)

    YouTubeOAuthProvider(token_path=path)._persist_token(_Creds())

    assert path.read_text(encoding="utf-8") == '{"token": "t"}'
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
