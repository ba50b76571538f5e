import logging

import pytest

import api_client
from api_client import ApiError
from schemas import ChatMessage, SheetQuestion, UploadBriefResult, UploadSheetResult, UploadUnknownResult

from conftest import FakeResponse


def install(monkeypatch, response, calls=None):
    def fake_request(method, url, **kwargs):
        if calls is not None:
            calls.append((method, url, kwargs))
        return response

    monkeypatch.setattr(api_client.requests, "request", fake_request)


def test_get_latest_scorecard_returns_none_on_404(monkeypatch):
    install(monkeypatch, FakeResponse(404, text="not found"))
    assert api_client.get_latest_scorecard("b1", "s1") is None


def test_get_latest_scorecard_raises_on_other_errors(monkeypatch):
    install(monkeypatch, FakeResponse(500, text="boom"))
    with pytest.raises(ApiError) as exc_info:
        api_client.get_latest_scorecard("b1", "s1")
    assert exc_info.value.status == 500
    assert "500" in str(exc_info.value)
    assert "boom" in str(exc_info.value)


def test_get_latest_scorecard_unwraps_scorecard_json(monkeypatch):
    calls = []
    payload = {
        "scorecard_json": {
            "brief_id": "b1",
            "sheet_id": "s1",
            "theme": "Datenqualität",
            "per_question": [
                {"question_id": "q1", "question_code": "DQ1", "question": "Wer?", "final_score_1_5": 3}
            ],
            "sheet_summary": {"final_level_1_5": 3, "main_gaps": ["Owner fehlt"]},
        }
    }
    install(monkeypatch, FakeResponse(200, payload), calls)

    sc = api_client.get_latest_scorecard("b1", "s1")

    assert calls[0][0] == "GET"
    assert calls[0][1].endswith("/api/briefs/b1/sheets/s1/scorecard-latest")
    assert sc.theme == "Datenqualität"
    assert sc.per_question[0].final_score_1_5 == 3
    assert sc.sheet_summary.main_gaps == ["Owner fehlt"]


def test_delete_brief_accepts_204(monkeypatch):
    calls = []
    install(monkeypatch, FakeResponse(204, text=""), calls)
    api_client.delete_brief("b1")
    assert calls[0][0] == "DELETE"


def test_update_brief_sends_patch(monkeypatch):
    calls = []
    install(monkeypatch, FakeResponse(200, {"id": "b1", "title": "Neu", "raw_markdown": "# x", "version": 2}), calls)

    detail = api_client.update_brief("b1", {"title": "Neu"})

    method, url, kwargs = calls[0]
    assert method == "PATCH"
    assert url.endswith("/api/briefs/b1")
    assert kwargs["json"] == {"title": "Neu"}
    assert detail.version == 2
    assert detail.raw_markdown == "# x"


def test_update_sheet_questions_wraps_list(monkeypatch):
    calls = []
    install(monkeypatch, FakeResponse(200, [{"id": "q1", "code": "A", "question": "?", "order_index": 1}]), calls)

    saved = api_client.update_sheet_questions(
        "s1", [SheetQuestion(code="A", question="?", order_index=1, created_at="2025-01-01")]
    )

    body = calls[0][2]["json"]
    assert calls[0][0] == "PUT"
    assert body == {
        "questions": [{"code": "A", "question": "?", "checkpoints": [], "order_index": 1, "active": True}]
    }
    assert saved[0].id == "q1"


def test_failed_request_is_logged(monkeypatch, caplog):
    install(monkeypatch, FakeResponse(502, text="bad gateway"))
    with caplog.at_level(logging.WARNING):
        with pytest.raises(ApiError):
            api_client.fetch_briefs()
    assert "failed with 502" in caplog.text


def test_upload_dispatches_on_kind(monkeypatch):
    install(monkeypatch, FakeResponse(200, {"kind": "brief", "brief_id": "b9", "title": "T", "version": 3, "warnings": ["w"]}))
    res = api_client.upload_ingest_file("a.md", b"# T")
    assert isinstance(res, UploadBriefResult)
    assert res.brief_id == "b9"
    assert res.warnings == ["w"]

    install(monkeypatch, FakeResponse(200, {"kind": "sheet", "sheet_id": "s9", "theme": "X", "questions_imported": 4, "warnings": []}))
    assert isinstance(api_client.upload_ingest_file("a.xlsx", b"x"), UploadSheetResult)

    install(monkeypatch, FakeResponse(200, {"kind": "unknown"}))
    assert isinstance(api_client.upload_ingest_file("a.bin", b"x"), UploadUnknownResult)


def test_upload_sends_multipart_file(monkeypatch):
    calls = []
    install(monkeypatch, FakeResponse(200, {"kind": "unknown"}), calls)
    api_client.upload_ingest_file("brief.md", b"# hi", "text/markdown")
    assert calls[0][2]["files"] == {"file": ("brief.md", b"# hi", "text/markdown")}


def test_send_chat_message_parses_json_answer(monkeypatch):
    calls = []
    install(monkeypatch, FakeResponse(200, {"answer": "Hallo", "raw": "{...}", "meta": {"theme": "Rollen"}}), calls)

    history = [ChatMessage(role="user", content="Hi")]
    res = api_client.send_chat_message("u1", "Hi", history, session_id="sid", skip_save=True)

    body = calls[0][2]["json"]
    assert body["history"] == [{"role": "user", "content": "Hi"}]
    assert body["skip_save"] is True
    assert body["session_id"] == "sid"
    assert res.answer == "Hallo"
    assert res.raw_answer == "{...}"
    assert res.meta == {"theme": "Rollen"}


def test_send_chat_message_accepts_plain_text(monkeypatch):
    install(monkeypatch, FakeResponse(200, text="Nur Text"))
    res = api_client.send_chat_message(None, "Hi", [])
    assert res.answer == "Nur Text"
    assert res.raw_answer == "Nur Text"
    assert res.meta is None


def test_send_chat_message_raises_with_status(monkeypatch):
    install(monkeypatch, FakeResponse(503, text="down"))
    with pytest.raises(ApiError, match="503 down"):
        api_client.send_chat_message("u1", "Hi", [])
