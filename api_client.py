import json
import logging
from typing import Any, Dict, List, Optional

import requests

from config import API_BASE, API_TIMEOUT, CHAT_ENDPOINT
from schemas import (
    BriefDetail,
    BriefListItem,
    ChatApiResult,
    ChatMessage,
    Domain,
    InterviewContext,
    ScorecardResponse,
    SheetDetail,
    SheetListItem,
    SheetQuestion,
    UploadResult,
    upload_result_from_dict,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx answer from the backend. The message carries status and body text."""

    def __init__(self, action: str, status: int, body: str):
        super().__init__(f"{action}: {status} {body}")
        self.action = action
        self.status = status
        self.body = body


def _request(method: str, path: str, action: str, ok_status=(), **kwargs) -> requests.Response:
    url = f"{API_BASE}{path}"
    logger.debug("%s %s", method, url)
    r = requests.request(method, url, timeout=API_TIMEOUT, **kwargs)
    if not r.ok and r.status_code not in ok_status:
        logger.warning("%s %s failed with %s", method, url, r.status_code)
        raise ApiError(action, r.status_code, r.text)
    return r


def _get(path: str, action: str, params: Optional[Dict[str, Any]] = None) -> Any:
    return _request("GET", path, action, params=params, headers={"Cache-Control": "no-store"}).json()


def _post(path: str, action: str, json_body: Dict[str, Any]) -> Any:
    return _request("POST", path, action, json=json_body).json()


def _patch(path: str, action: str, json_body: Dict[str, Any]) -> Any:
    return _request("PATCH", path, action, json=json_body).json()


def _put(path: str, action: str, json_body: Dict[str, Any]) -> Any:
    return _request("PUT", path, action, json=json_body).json()


def _delete(path: str, action: str) -> None:
    _request("DELETE", path, action, ok_status=(204,))


# ---- Briefs ----

def fetch_briefs() -> List[BriefListItem]:
    data = _get("/api/briefs", "Fehler beim Laden der Steckbriefe")
    return [BriefListItem.from_dict(d) for d in data]


def create_brief(payload: Dict[str, Any]) -> BriefDetail:
    return BriefDetail.from_dict(_post("/api/briefs", "Fehler beim Anlegen des Steckbriefs", payload))


def fetch_brief_detail(brief_id: str) -> BriefDetail:
    return BriefDetail.from_dict(_get(f"/api/briefs/{brief_id}", "Fehler beim Laden des Steckbriefs"))


def update_brief(brief_id: str, patch: Dict[str, Any]) -> BriefDetail:
    data = _patch(f"/api/briefs/{brief_id}", "Fehler beim Speichern des Steckbriefs", patch)
    return BriefDetail.from_dict(data)


def replace_brief(brief_id: str, payload: Dict[str, Any]) -> BriefDetail:
    data = _put(f"/api/briefs/{brief_id}", "Fehler beim Speichern des Steckbriefs", payload)
    return BriefDetail.from_dict(data)


def delete_brief(brief_id: str) -> None:
    _delete(f"/api/briefs/{brief_id}", "Fehler beim Löschen des Steckbriefs")


# ---- Sheets ----

def fetch_sheets() -> List[SheetListItem]:
    data = _get("/api/sheets", "Fehler beim Laden der Überleitungssheets")
    return [SheetListItem.from_dict(d) for d in data]


def create_sheet(payload: Dict[str, Any]) -> SheetDetail:
    return SheetDetail.from_dict(_post("/api/sheets", "Fehler beim Anlegen des Sheets", payload))


def fetch_sheet_detail(sheet_id: str) -> SheetDetail:
    return SheetDetail.from_dict(_get(f"/api/sheets/{sheet_id}", "Fehler beim Laden des Sheets"))


def update_sheet(sheet_id: str, patch: Dict[str, Any]) -> SheetDetail:
    data = _patch(f"/api/sheets/{sheet_id}", "Fehler beim Speichern des Sheets", patch)
    return SheetDetail.from_dict(data)


def replace_sheet(sheet_id: str, payload: Dict[str, Any]) -> SheetDetail:
    data = _put(f"/api/sheets/{sheet_id}", "Fehler beim Speichern des Sheets", payload)
    return SheetDetail.from_dict(data)


def delete_sheet(sheet_id: str) -> None:
    _delete(f"/api/sheets/{sheet_id}", "Fehler beim Löschen des Sheets")


def fetch_sheet_questions(sheet_id: str) -> List[SheetQuestion]:
    data = _get(f"/api/sheets/{sheet_id}/questions", "Fehler beim Laden der Fragen")
    return [SheetQuestion.from_dict(d) for d in data]


def update_sheet_questions(sheet_id: str, questions: List[SheetQuestion]) -> List[SheetQuestion]:
    body = {"questions": [q.to_payload() for q in questions]}
    data = _put(f"/api/sheets/{sheet_id}/questions", "Fehler beim Speichern der Fragen", body)
    return [SheetQuestion.from_dict(d) for d in data]


# ---- Domains ----

def fetch_domains() -> List[Domain]:
    data = _get("/api/domains", "Fehler beim Laden der Domänen")
    return [Domain.from_dict(d) for d in data]


def create_domain(payload: Dict[str, Any]) -> Domain:
    return Domain.from_dict(_post("/api/domains", "Fehler beim Anlegen der Domäne", payload))


def update_domain(domain_id: str, payload: Dict[str, Any]) -> Domain:
    data = _patch(f"/api/domains/{domain_id}", "Fehler beim Aktualisieren der Domäne", payload)
    return Domain.from_dict(data)


def delete_domain(domain_id: str) -> None:
    _request("DELETE", f"/api/domains/{domain_id}", "Fehler beim Löschen der Domäne")


# ---- Scorecard ----

def get_latest_scorecard(brief_id: str, sheet_id: str) -> Optional[ScorecardResponse]:
    """Last stored scorecard for the pair, None when the backend has none (404)."""
    r = _request(
        "GET",
        f"/api/briefs/{brief_id}/sheets/{sheet_id}/scorecard-latest",
        "Fehler beim Laden der Scorecard",
        ok_status=(404,),
        headers={"Cache-Control": "no-store"},
    )
    if r.status_code == 404:
        return None
    return ScorecardResponse.from_dict(r.json()["scorecard_json"])


def evaluate_brief_sheet(brief_id: str, sheet_id: str) -> ScorecardResponse:
    data = _post(f"/api/briefs/{brief_id}/sheets/{sheet_id}/evaluate", "Fehler bei evaluate", {})
    return ScorecardResponse.from_dict(data)


# ---- Upload ----

def upload_ingest_file(file_name: str, content: bytes, mime_type: Optional[str] = None) -> UploadResult:
    files = {"file": (file_name, content, mime_type or "application/octet-stream")}
    r = _request("POST", "/api/ingest/upload", "Fehler beim Upload", files=files)
    return upload_result_from_dict(r.json())


# ---- Interview chat ----

def send_chat_message(
    user: Optional[str],
    message: str,
    history: List[ChatMessage],
    session_id: Optional[str] = None,
    skip_save: bool = False,
) -> ChatApiResult:
    body = {
        "user": user,
        "message": message,
        "history": [m.to_history_item() for m in history],
        "session_id": session_id,
        "skip_save": skip_save,
    }
    logger.info("chat request user=%s history=%d skip_save=%s", user, len(history), skip_save)

    r = _request("POST", CHAT_ENDPOINT, "Load failed (HTTP)", json=body)
    text = r.text

    try:
        data = json.loads(text)
    except ValueError:
        # backend occasionally answers with a bare string
        data = {"answer": text}
    if not isinstance(data, dict):
        data = {"answer": text}

    answer = data["answer"] if isinstance(data.get("answer"), str) else text
    raw = data["raw"] if isinstance(data.get("raw"), str) else text
    meta = data.get("meta") if isinstance(data.get("meta"), dict) else None

    logger.debug("chat answer chars=%d meta=%s", len(answer), meta)
    return ChatApiResult(answer=answer, raw_answer=raw, meta=meta)


def fetch_interview_context(user: str) -> InterviewContext:
    data = _get("/api/interviews/context-for-user", "Fehler beim Laden des Interview-Kontexts", {"user": user})
    return InterviewContext.from_dict(data)
