import base64

import httpx
import pytest

from payloads import vmess_doc, vmess_line
from subrelay.api.routes.public_sub import UPSTREAM_FAILED_MSG
from subrelay.core.config import settings

DE = "\U0001F1E9\U0001F1EA"
UPSTREAM_TEXT = "\n".join(
    [
        "ss://abc#%F0%9F%87%BA%F0%9F%87%B8%20Old",
        "",
        vmess_line({"ps": f"{DE} Server1", "add": "1.2.3.4"}),
        "trojan://pw@h:443#x",
    ]
)


@pytest.fixture
def upstream(remote):
    remote.routes[settings.UPSTREAM_URL] = httpx.Response(200, text=UPSTREAM_TEXT)
    return remote


def _plain(resp) -> list[str]:
    return base64.b64decode(resp.text).decode("utf-8").split("\n")


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_relabels_subscription(api, license_registry, upstream):
    resp = api.get("/", params={"license": "good", "nexzo": "Relay", "sub": "Team"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "text/plain; charset=utf-8"
    lines = _plain(resp)
    assert lines[0] == "# Subscription: Team"
    assert lines[1] == "ss://abc#%F0%9F%87%BA%F0%9F%87%B8%20Relay"
    assert lines[2] == ""
    assert vmess_doc(lines[3])["ps"] == f"{DE} Relay"
    assert lines[4] == "trojan://pw@h:443#Relay"


def test_defaults_and_limit(api, license_registry, upstream):
    resp = api.get("/", params={"license": "good", "limit": "1"})
    assert resp.status_code == 200
    lines = _plain(resp)
    assert lines[0] == f"# Subscription: {settings.DEFAULT_SUBSCRIPTION_NAME}"
    assert len(lines) == 2
    assert lines[1].startswith("ss://abc#%F0%9F%87%BA%F0%9F%87%B8%20%F0%9D")


def test_bad_limit_means_unlimited(api, license_registry, upstream):
    resp = api.get("/", params={"license": "good", "limit": "lots"})
    assert len(_plain(resp)) == 5


@pytest.mark.parametrize(
    "key, detail",
    [
        (None, "❌ License not found"),
        ("nope", "❌ License not found"),
        ("paused", "❌ License inactive"),
        ("old", "❌ License expired"),
        ("pinned", "❌ IP not allowed (testclient)"),
        ("spent", "❌ License usage limit exceeded"),
    ],
)
def test_license_rejections(api, license_registry, upstream, key, detail):
    params = {"license": key} if key else {}
    resp = api.get("/", params=params)
    assert resp.status_code == 403
    assert resp.text == detail
    assert settings.UPSTREAM_URL not in upstream.calls


def test_forwarded_ip_is_used_for_allow_list(api, license_registry, upstream):
    resp = api.get("/", params={"license": "pinned"}, headers={"X-Forwarded-For": "9.9.9.9, 10.0.0.1"})
    assert resp.status_code == 200


def test_license_source_down(api, remote, upstream):
    remote.routes[settings.LICENSE_SOURCE_URL] = httpx.Response(503)
    resp = api.get("/", params={"license": "good"})
    assert resp.status_code == 403
    assert resp.text == "❌ License check failed"


def test_upstream_error_status(api, remote, license_registry):
    remote.routes[settings.UPSTREAM_URL] = httpx.Response(500, text="secret stack trace")
    resp = api.get("/", params={"license": "good"})
    assert resp.status_code == 502
    assert resp.text == UPSTREAM_FAILED_MSG


def test_upstream_network_error(api, remote, license_registry):
    remote.routes[settings.UPSTREAM_URL] = httpx.ConnectError("refused")
    resp = api.get("/", params={"license": "good"})
    assert resp.status_code == 502
    assert resp.text == UPSTREAM_FAILED_MSG


def test_browser_is_redirected_when_detection_enabled(api, license_registry, upstream, monkeypatch):
    monkeypatch.setattr(settings, "CLIENT_DETECTION_ENABLED", True)
    resp = api.get(
        "/",
        params={"license": "good"},
        headers={"User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"},
        follow_redirects=False,
    )
    assert resp.status_code == 302
    assert resp.headers["location"] == settings.CLIENT_REDIRECT_URL
    assert upstream.calls == []


def test_vpn_client_passes_detection(api, license_registry, upstream, monkeypatch):
    monkeypatch.setattr(settings, "CLIENT_DETECTION_ENABLED", True)
    resp = api.get("/", params={"license": "good"}, headers={"User-Agent": "v2rayNG/1.8.5"})
    assert resp.status_code == 200


def test_processing_failure_is_502_without_partial_body(api, license_registry, upstream, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("broken line")

    monkeypatch.setattr("subrelay.api.routes.public_sub.process_subscription", boom)
    resp = api.get("/", params={"license": "good"})
    assert resp.status_code == 502
    assert resp.text == UPSTREAM_FAILED_MSG
    assert "Subscription" not in resp.text
