"""CLI tests — click CliRunner against a mocked API."""

import json

import httpx
import pytest
from click.testing import CliRunner

from maitre.cli.main import cli

USER = {
    "id": "u-1",
    "name": "Olga Owner",
    "email": "owner@bistro.test",
    "role": "admin",
    "restaurant": {"id": "r-1", "name": "Bistro Verde"},
}


def api(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


def accept_all(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/api/auth/login":
        body = json.loads(request.content)
        if body["password"] != "pw":
            return httpx.Response(400, json={"error": "Invalid credentials"})
        return httpx.Response(200, json={"message": "Login successful", "token": "tok", "user": USER})
    if request.url.path == "/api/auth/me":
        if request.headers.get("Authorization") != "Bearer tok":
            return httpx.Response(401, json={"error": "Token invalid"})
        return httpx.Response(200, json={"user": USER})
    return httpx.Response(404, json={"error": "Not Found"})


@pytest.fixture()
def invoke(tmp_path):
    session_file = tmp_path / "session.json"

    def _invoke(args, handler=accept_all):
        obj = {
            "api_url": "http://test/api",
            "session_file": session_file,
            "transport": api(handler),
        }
        return CliRunner().invoke(cli, args, obj=obj)

    _invoke.session_file = session_file
    return _invoke


def test_login_whoami_logout(invoke):
    r = invoke(["login", "--email", "owner@bistro.test", "--password", "pw"])
    assert r.exit_code == 0, r.output
    assert "Logged in as Olga Owner (admin) at Bistro Verde" in r.output
    assert json.loads(invoke.session_file.read_text())["token"] == "tok"

    r = invoke(["whoami"])
    assert r.exit_code == 0, r.output
    assert "Olga Owner <owner@bistro.test>" in r.output
    assert "Bistro Verde" in r.output

    r = invoke(["logout"])
    assert r.exit_code == 0
    assert not invoke.session_file.exists()

    r = invoke(["whoami"])
    assert r.exit_code == 1
    assert "Not logged in" in r.output


def test_login_bad_password(invoke):
    r = invoke(["login", "--email", "owner@bistro.test", "--password", "nope"])
    assert r.exit_code == 1
    assert "Invalid credentials" in r.output
    assert not invoke.session_file.exists()


def test_whoami_with_revoked_session_clears_it(invoke):
    invoke.session_file.write_text(json.dumps({"token": "old", "user": USER}))
    r = invoke(["whoami"])
    assert r.exit_code == 1
    assert "Not logged in" in r.output
    assert not invoke.session_file.exists()


def test_login_api_unreachable(invoke):
    def down(request):
        raise httpx.ConnectError("connection refused", request=request)

    r = invoke(["login", "--email", "owner@bistro.test", "--password", "pw"], handler=down)
    assert r.exit_code == 1
    assert "API not reachable" in r.output
