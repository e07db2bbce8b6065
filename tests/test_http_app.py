# tests/test_http_app.py
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from taskgrid.config import Settings
from taskgrid_host.http_app import create_http_app

TOKEN = "test-token"


@pytest.fixture
def client() -> TestClient:
    settings = Settings(MCP_HTTP_BEARER_TOKEN=TOKEN, MCP_HTTP_ALLOWED_ORIGINS="tauri://localhost")
    return TestClient(create_http_app(settings))


def _rpc(client: TestClient, method: str, params=None, **headers):
    headers.setdefault("Authorization", f"Bearer {TOKEN}")
    body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params or {}}
    return client.post("/mcp", json=body, headers=headers)


def _call(client: TestClient, name: str, arguments: dict):
    return _rpc(client, "tools/call", {"name": name, "arguments": arguments}).json()


def test_requires_bearer_token(client: TestClient):
    assert _rpc(client, "tools/list", Authorization="").status_code == 401
    assert _rpc(client, "tools/list", Authorization="Bearer wrong").status_code == 401


def test_rejects_foreign_origin(client: TestClient):
    resp = _rpc(client, "tools/list", Origin="https://evil.example")
    assert resp.status_code == 403
    assert _rpc(client, "tools/list", Origin="tauri://localhost").status_code == 200


def test_initialize_and_list(client: TestClient):
    init = _rpc(client, "initialize").json()
    assert init["result"]["protocolVersion"] == "2025-03-26"
    names = {t["name"] for t in _rpc(client, "tools/list").json()["result"]["tools"]}
    assert "write_file_safe" in names and "backend_ready" in names


def test_write_then_read_over_http(client: TestClient, tmp_path: Path):
    (tmp_path / ".taskgrid").mkdir()
    wd = str(tmp_path)
    target = f"{wd}/.taskgrid/a/b/c.txt"

    out = _call(client, "write_file_safe", {"working_dir": wd, "file_path": target, "content": "x"})
    assert out["result"]["isError"] is False
    out = _call(client, "read_file_safe", {"working_dir": wd, "file_path": target})
    assert out["result"]["content"] == [{"type": "text", "text": "x"}]


def test_sandbox_error_is_tool_error_with_message(client: TestClient, tmp_path: Path):
    (tmp_path / ".taskgrid").mkdir()
    out = _call(client, "list_directory_safe", {"working_dir": str(tmp_path), "dir_path": str(tmp_path)})
    result = out["result"]
    assert result["isError"] is True
    assert result["content"][0]["text"] == "Access denied: Path is outside .taskgrid folder"
    assert result["_meta"]["errorKind"] == "access_denied"


def test_protocol_errors(client: TestClient):
    assert _call(client, "nope", {})["error"]["code"] == -32601
    assert _call(client, "read_file_safe", {})["error"]["code"] == -32602
    assert _rpc(client, "resources/list").json()["error"]["code"] == -32601


def test_backend_ready(client: TestClient):
    out = _call(client, "backend_ready", {})
    assert out["result"]["content"] == [{"type": "text", "text": "true"}]


def test_non_object_params_are_invalid(client: TestClient):
    body = {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": ["read_file_safe"]}
    out = client.post("/mcp", json=body, headers={"Authorization": f"Bearer {TOKEN}"}).json()
    assert out["id"] == 7
    assert out["error"]["code"] == -32602


def test_over_long_name_is_tool_error(client: TestClient, tmp_path: Path):
    (tmp_path / ".taskgrid").mkdir()
    wd = str(tmp_path)
    out = _call(client, "read_file_safe", {"working_dir": wd, "file_path": f"{wd}/.taskgrid/{'a' * 300}"})
    result = out["result"]
    assert result["isError"] is True
    assert result["_meta"]["errorKind"] in {"invalid_path", "not_found", "io"}


def test_assistant_tool_call_over_http(client: TestClient, tmp_path: Path):
    (tmp_path / ".taskgrid").mkdir()
    out = _call(client, "execute_tool_call", {
        "working_dir": str(tmp_path),
        "name": "write_file",
        "arguments": {"path": "t.md", "content": "x", "reason": "r"},
    })
    block = out["result"]["content"][0]
    assert block["json"]["success"] is True
    assert (tmp_path / ".taskgrid" / "t.md").read_text() == "x"
    out = _call(client, "load_assistant_config", {"working_dir": str(tmp_path)})
    assert out["result"]["content"] == [{"type": "text", "text": "null"}]
