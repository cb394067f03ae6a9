import json

import httpx
import pytest

from app.tools.__main__ import main, run
from app.tools.client import TrackerTools


@pytest.fixture
def api():
    '''Record requests and answer like the issues API would.'''
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        calls.append({
            "method": request.method,
            "url": str(request.url),
            "api_key": request.headers.get("x-api-key"),
            "body": body,
        })
        if request.method == "POST":
            return httpx.Response(201, json={"success": True, "data": {"id": 1, **body}})
        return httpx.Response(200, json={"success": True, "data": body})

    return calls, httpx.MockTransport(handler)


@pytest.fixture
def tools(api):
    _, transport = api
    return TrackerTools(api_key="itk_secret", base_url="http://tracker.test/api/", transport=transport)


def test_create_bug(tools, api):
    calls, _ = api
    result = tools.create_bug("Crash on save", "Stack trace attached")

    assert result["status"] == 201
    assert result["data"]["data"]["id"] == 1
    assert calls == [{
        "method": "POST",
        "url": "http://tracker.test/api/issues",
        "api_key": "itk_secret",
        "body": {
            "title": "Crash on save",
            "description": "Stack trace attached",
            "status": "not_started",
            "priority": "high",
            "tag_ids": [3],
        },
    }]


def test_create_feature_request_uses_configured_tag(api):
    calls, transport = api
    tools = TrackerTools(api_key="k", base_url="http://tracker.test/api", feature_tag_id=9, transport=transport)

    tools.create_feature_request("Dark mode", "Please")
    assert calls[0]["body"]["priority"] == "low"
    assert calls[0]["body"]["tag_ids"] == [9]


def test_create_issue_omits_unset_fields(tools, api):
    calls, _ = api
    tools.create_issue(title="Bare")
    assert calls[0]["body"] == {"title": "Bare"}


def test_update_ticket_status(tools, api):
    calls, _ = api
    result = tools.update_ticket_status(12, "done")

    assert result["status"] == 200
    assert calls[0]["method"] == "PUT"
    assert calls[0]["url"] == "http://tracker.test/api/issues/12"
    assert calls[0]["body"] == {"status": "done"}


def test_invalid_status_is_rejected_locally(tools, api):
    calls, _ = api
    with pytest.raises(ValueError):
        tools.update_ticket_status(12, "finished")
    assert calls == []


def test_non_json_response_is_returned_as_text():
    transport = httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway"))
    tools = TrackerTools(api_key="k", base_url="http://tracker.test/api", transport=transport)

    result = tools.create_issue(title="x")
    assert result["status"] == 502
    assert result["data"] == "Bad gateway"


def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    tools = TrackerTools(api_key="k", base_url="http://tracker.test/api", transport=httpx.MockTransport(handler))
    assert tools.create_bug("x", "y") == {"status": 0, "error": "connection refused"}


def test_cli_dispatch(tools, api):
    calls, _ = api
    run(["create-feature-request", "--title", "Export CSV", "--description", "For reports"], tools=tools)
    run(["update-ticket-status", "--id", "4", "--status", "in_progress"], tools=tools)
    run(["issues-create", "--title", "Tagged", "--tag-id", "1", "--tag-id", "2"], tools=tools)

    assert calls[0]["body"]["priority"] == "low"
    assert calls[1]["url"].endswith("/issues/4")
    assert calls[2]["body"] == {"title": "Tagged", "tag_ids": [1, 2]}


def test_cli_main_prints_json(monkeypatch, capsys):
    monkeypatch.setenv("API_BASE_URL", "http://127.0.0.1:9/api")

    def refuse(self, method, path, data=None):
        return {"status": 0, "error": "connection refused"}

    monkeypatch.setattr(TrackerTools, "make_request", refuse)
    exit_code = main(["create-bug", "--title", "x", "--description", "y"])

    assert exit_code == 1
    assert json.loads(capsys.readouterr().out) == {"status": 0, "error": "connection refused"}
