# tests/unit/test_routes.py
from __future__ import annotations
import json

import pytest
from httpx import ASGITransport, AsyncClient

from app.core import resources
from app.main import app
from tutor.analyzer import Analyzer
from tutor.errors import ProviderUnavailable

PAYLOAD = {
    "domain": "CODING",
    "student_analysis": [{"step_id": "step1"}, {"step_id": "step2"}],
    "reasoning_graph": {
        "nodes": [{"id": "step1", "type": "start"}, {"id": "step2", "type": "decision"}],
        "edges": [{"from": "step1", "to": "step2"}],
        "main_path": ["step1", "step2"],
    },
}

MISC_PAYLOAD = dict(PAYLOAD, misconception_graph={
    "nodes": [{"id": "m1", "type": "misconception"}, {"id": "c1"}],
    "edges": [{"from": "m1", "to": "c1", "relation": "stems_from"}],
})


class FakeProvider:
    def __init__(self, reply):
        self.reply = reply

    def ask_llm(self, query, *, system=None, temperature=None, json_mode=False):
        return self.reply


@pytest.fixture
def client():
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def use_reply(monkeypatch):
    def _set(reply):
        monkeypatch.setattr(resources, "get_analyzer", lambda: Analyzer(FakeProvider(reply)))
    return _set


@pytest.mark.asyncio
async def test_health(client):
    async with client as ac:
        r = await ac.get("/api/health/")
        assert r.status_code == 200 and r.json() == {"status": "healthy"}
        assert "X-Request-Id" in r.headers
        r = await ac.get("/api/health/provider")
        assert r.json()["provider"] in {"gemini", "openai"}


@pytest.mark.asyncio
async def test_analyze_ok(client, use_reply):
    use_reply("```json\n" + json.dumps(PAYLOAD) + "\n```")
    async with client as ac:
        r = await ac.post("/api/analysis/analyze", json={"notes": "reverse a list"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["parsed_data"]["domain"] == "CODING"
    assert body["parsed_data"]["reasoning_graph"]["edges"] == [{"from": "step1", "to": "step2", "reason": ""}]


@pytest.mark.asyncio
async def test_analyze_unparseable_reply_is_502(client, use_reply):
    use_reply("no json here")
    async with client as ac:
        r = await ac.post("/api/analysis/analyze", json={"notes": "reverse a list"})
    assert r.status_code == 502
    assert r.json()["detail"]["raw_text"] == "no json here"


@pytest.mark.asyncio
async def test_analyze_empty_notes_is_400(client, use_reply):
    use_reply("{}")
    async with client as ac:
        r = await ac.post("/api/analysis/analyze", json={"notes": ""})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_analyze_without_provider_is_503(client, monkeypatch):
    def _missing():
        raise ProviderUnavailable("GOOGLE_API_KEY is missing")
    monkeypatch.setattr(resources, "get_analyzer", _missing)
    async with client as ac:
        r = await ac.post("/api/analysis/analyze", json={"notes": "x"})
    assert r.status_code == 503


@pytest.mark.asyncio
async def test_parse_reports_failed_status(client):
    async with client as ac:
        ok = await ac.post("/api/analysis/parse", json={"raw_text": json.dumps(MISC_PAYLOAD)})
        ko = await ac.post("/api/analysis/parse", json={"raw_text": "garbage"})
    assert ok.json()["status"] == "ok"
    data = ok.json()["parsed_data"]
    assert data["reasoning_graph"]["edges"][0] == {"from": "step1", "to": "step2", "reason": ""}
    assert data["misconception_graph"]["edges"][0] == {"from": "m1", "to": "c1", "relation": "stems_from"}
    assert ko.status_code == 200
    assert ko.json()["status"] == "failed" and ko.json()["raw_text"] == "garbage"


@pytest.mark.asyncio
async def test_layout_reasoning_graph(client):
    async with client as ac:
        r = await ac.post("/api/analysis/layout", json={
            "graph": PAYLOAD["reasoning_graph"], "width": 800, "height": 600, "domain": "CODING",
        })
    assert r.status_code == 200
    view = r.json()
    by_id = {n["id"]: n for n in view["nodes"]}
    assert by_id["step1"]["level"] == 0 and by_id["step2"]["level"] == 1
    assert by_id["step1"]["shape"]["kind"] == "pill"
    assert by_id["step2"]["shape"]["kind"] == "diamond"
    assert view["edges"][0] == {"from": "step1", "to": "step2", "reason": ""}
    assert set(view["transform"]) == {"scale", "translate_x", "translate_y"}


@pytest.mark.asyncio
async def test_layout_misconception_graph(client):
    graph = {"nodes": [{"id": "m1", "type": "misconception"}, {"id": "c1"}], "edges": [{"from": "m1", "to": "c1"}]}
    async with client as ac:
        r = await ac.post("/api/analysis/layout", json={"graph": graph, "kind": "misconception", "max_ticks": 50})
    view = r.json()
    assert view["kind"] == "misconception" and view["ticks"] == 50
    assert {n["shape"]["icon"] for n in view["nodes"]} == {"!", "✓"}


@pytest.mark.asyncio
async def test_layout_rejects_bad_viewport(client):
    async with client as ac:
        r = await ac.post("/api/analysis/layout", json={"graph": {}, "width": 0})
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_levels_and_correlate(client):
    async with client as ac:
        lv = await ac.post("/api/analysis/levels", json={
            "nodes": [{"id": "a"}, {"id": "b"}], "edges": [{"from": "a", "to": "b"}],
        })
        c1 = await ac.post("/api/analysis/correlate", json={"node_id": "S2", "steps": PAYLOAD["student_analysis"]})
        c2 = await ac.post("/api/analysis/correlate", json={"node_id": "9", "steps": PAYLOAD["student_analysis"]})
    assert lv.json() == {"levels": {"a": 0, "b": 1}}
    assert c1.json() == {"index": 1}
    assert c2.json() == {"index": None}


@pytest.mark.asyncio
async def test_follow_up(client, use_reply):
    use_reply('{"text": "Think about the base case."}')
    async with client as ac:
        r = await ac.post("/api/analysis/follow-up", json={
            "context": {"domain": "CODING"}, "history": [], "question": "hint?",
        })
    assert r.status_code == 200
    assert r.json() == {"type": "text", "content": "Think about the base case."}
