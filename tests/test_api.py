from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from jsonforge import main
from jsonforge.ai import AIServiceError
from jsonforge.history import HistoryStore
from jsonforge.parser import NESTING_ERROR, parse_json


@pytest.fixture
def client(tmp_path: Path, monkeypatch) -> TestClient:
    monkeypatch.setattr(main, "history_store", HistoryStore(tmp_path / "history.json"))
    return TestClient(main.app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_parse_reports_valid_invalid_and_empty(client: TestClient) -> None:
    valid = client.post("/parse", json={"text": '{"a":1,"b":[1,2,3]}'}).json()
    assert valid["valid"] is True
    assert valid["data"] == {"a": 1, "b": [1, 2, 3]}

    invalid = client.post("/parse", json={"text": '{"a":1,'}).json()
    assert invalid["valid"] is False
    assert invalid["error"] == parse_json('{"a":1,').error
    assert invalid["data"] is None

    empty = client.post("/parse", json={"text": "  "}).json()
    assert empty["valid"] is True
    assert empty["empty"] is True


def test_inspect_resolves_embedded_json_and_searches(client: TestClient) -> None:
    body = {
        "text": json.dumps({"cfg": '{"debug": true}', "note": "debug mode"}),
        "recursive": {"enabled": True, "maxDepth": 3},
        "query": "debug",
    }
    result = client.post("/inspect", json=body).json()
    assert result["valid"] is True
    assert result["data"] == {"cfg": {"debug": True}, "note": "debug mode"}
    assert json.loads(result["display_text"]) == result["data"]
    assert [match["path"] for match in result["matches"]] == ["/cfg/debug", "/note"]
    assert result["match_count"] == 2


def test_inspect_respects_disabled_and_clamped_config(client: TestClient) -> None:
    inner = json.dumps({"z": 1})
    text = json.dumps({"x": json.dumps({"y": inner})})

    disabled = client.post("/inspect", json={"text": text, "recursive": {"enabled": False, "maxDepth": 5}}).json()
    assert disabled["data"] == json.loads(text)

    clamped = client.post("/inspect", json={"text": text, "recursive": {"enabled": True, "maxDepth": 0}}).json()
    assert clamped["data"] == {"x": {"y": inner}}


def test_inspect_rejects_null_depth(client: TestClient) -> None:
    response = client.post("/inspect", json={"text": "[1]", "recursive": {"enabled": True, "maxDepth": None}})
    assert response.status_code == 422


def test_deep_documents_are_invalid_results_not_server_errors(client: TestClient) -> None:
    deep = "[" * 800 + "]" * 800
    for path in ("/parse", "/inspect"):
        response = client.post(path, json={"text": deep})
        assert response.status_code == 200
        assert response.json()["valid"] is False
        assert response.json()["error"] == NESTING_ERROR

    for path in ("/format", "/minify", "/types"):
        response = client.post(path, json={"text": deep})
        assert response.status_code == 400
        assert response.json()["detail"] == NESTING_ERROR


def test_inspect_deep_tree_after_resolving_embedded_layers(client: TestClient) -> None:
    text = "[" * 500 + "]" * 500
    for _ in range(2):
        text = "[" * 500 + json.dumps(text) + "]" * 500
    body = {"text": text, "recursive": {"enabled": True, "maxDepth": 3}}
    response = client.post("/inspect", json=body)
    assert response.status_code == 200
    assert response.json()["valid"] is False
    assert response.json()["error"] == NESTING_ERROR
    assert client.post("/types", json=body).status_code == 400


def test_inspect_invalid_text_is_a_normal_result(client: TestClient) -> None:
    response = client.post("/inspect", json={"text": "[1, 2"})
    assert response.status_code == 200
    result = response.json()
    assert result["valid"] is False
    assert result["error"]
    assert result["data"] is None
    assert result["matches"] == []


def test_format_and_minify(client: TestClient) -> None:
    formatted = client.post("/format", json={"text": '{"a":[1]}', "indent": 4}).json()
    assert formatted["text"] == '{\n    "a": [\n        1\n    ]\n}'

    minified = client.post("/minify", json={"text": '{ "a" : [ 1 ] }'}).json()
    assert minified["text"] == '{"a":[1]}'

    assert client.post("/minify", json={"text": ""}).json() == {"text": ""}


def test_format_invalid_text_is_400(client: TestClient) -> None:
    response = client.post("/format", json={"text": "{oops"})
    assert response.status_code == 400
    assert response.json()["detail"] == parse_json("{oops").error


def test_repair_uses_collaborator(client: TestClient, monkeypatch) -> None:
    async def _fix(text):
        return '{"fixed": true}'

    monkeypatch.setattr(main, "fix_invalid_json", _fix)
    assert client.post("/repair", json={"text": "{fixed: true"}).json() == {"text": '{"fixed": true}'}


def test_repair_failure_is_502(client: TestClient, monkeypatch) -> None:
    async def _fix(text):
        raise AIServiceError("Model call failed: quota")

    monkeypatch.setattr(main, "fix_invalid_json", _fix)
    response = client.post("/repair", json={"text": "{broken"})
    assert response.status_code == 502
    assert response.json()["detail"] == "Model call failed: quota"


def test_types_sends_resolved_minified_tree(client: TestClient, monkeypatch) -> None:
    received = []

    async def _types(text):
        received.append(text)
        return "interface Root {}"

    monkeypatch.setattr(main, "generate_type_interfaces", _types)
    body = {"text": json.dumps({"cfg": '{"debug": true}'}), "recursive": {"enabled": True, "maxDepth": 3}}
    response = client.post("/types", json=body)
    assert response.status_code == 200
    assert response.json() == {"text": "interface Root {}"}
    assert received == ['{"cfg":{"debug":true}}']


def test_types_rejects_invalid_or_empty_text(client: TestClient) -> None:
    assert client.post("/types", json={"text": "{oops"}).status_code == 400
    assert client.post("/types", json={"text": ""}).status_code == 400


def test_types_failure_is_502(client: TestClient, monkeypatch) -> None:
    async def _types(text):
        raise AIServiceError("Model returned no type definitions")

    monkeypatch.setattr(main, "generate_type_interfaces", _types)
    assert client.post("/types", json={"text": "[1, 2, 3]"}).status_code == 502


def test_history_endpoints(client: TestClient) -> None:
    saved = client.post("/history", json={"text": '{"keep": 1}'})
    assert saved.status_code == 200
    item_id = saved.json()["id"]

    assert client.post("/history", json={"text": '{"keep": 1}'}).status_code == 409
    assert [item["id"] for item in client.get("/history").json()] == [item_id]

    assert client.delete(f"/history/{item_id}").json() == {"deleted": item_id}
    assert client.delete(f"/history/{item_id}").status_code == 404

    client.post("/history", json={"text": '{"again": 2}'})
    assert client.delete("/history").json() == {"cleared": True}
    assert client.get("/history").json() == []
