from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

import api_client
from schemas import UploadBriefResult, UploadSheetResult
from workbench import selection
from workbench.session import ACTION_ERRORS, busy, fail

logger = logging.getLogger(__name__)

MISSING_PAIR = "Bitte zuerst einen Steckbrief und ein Überleitungssheet auswählen."


def load_latest_scorecard(state: MutableMapping[str, Any]) -> None:
    if not selection.has_pair(state):
        state["error"] = MISSING_PAIR
        return
    if state.get("loading"):
        return

    state["error"] = None
    with busy(state, "loading"):
        try:
            sc = api_client.get_latest_scorecard(state["brief_id"], state["sheet_id"])
        except ACTION_ERRORS as e:
            fail(state, e, "Unbekannter Fehler beim Laden.")
            return
    state["scorecard"] = sc
    if sc is None:
        state["error"] = "Keine gespeicherte Auswertung gefunden."


def evaluate_selection(state: MutableMapping[str, Any]) -> None:
    if not selection.has_pair(state):
        state["error"] = MISSING_PAIR
        return
    if state.get("loading"):
        return

    state["error"] = None
    with busy(state, "loading"):
        try:
            state["scorecard"] = api_client.evaluate_brief_sheet(state["brief_id"], state["sheet_id"])
        except ACTION_ERRORS as e:
            fail(state, e, "Unbekannter Fehler bei der Auswertung.")


def delete_brief(state: MutableMapping[str, Any], brief_id: Optional[str]) -> bool:
    if not brief_id or state.get("deleting"):
        return False

    state["error"] = None
    with busy(state, "deleting"):
        try:
            api_client.delete_brief(brief_id)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Löschen des Steckbriefs.")
            return False

    logger.info("brief %s deleted", brief_id)
    if state.get("brief_id") == brief_id:
        selection.select_brief(state, None)
    detail = state.get("brief_detail")
    if detail is not None and detail.id == brief_id:
        selection.close_brief_editor(state)
    state["notice"] = "Steckbrief gelöscht."

    # the record is gone even when the list cannot be refetched
    try:
        selection.refresh_briefs(state)
    except ACTION_ERRORS as e:
        state["briefs"] = [b for b in state.get("briefs") or [] if b.id != brief_id]
        fail(state, e, "Fehler beim Neuladen der Steckbriefe.")
    return True


def delete_selected_brief(state: MutableMapping[str, Any]) -> bool:
    return delete_brief(state, state.get("brief_id"))


def delete_sheet(state: MutableMapping[str, Any], sheet_id: Optional[str]) -> bool:
    if not sheet_id or state.get("deleting"):
        return False

    state["error"] = None
    with busy(state, "deleting"):
        try:
            api_client.delete_sheet(sheet_id)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Löschen des Sheets.")
            return False

    logger.info("sheet %s deleted", sheet_id)
    if state.get("sheet_id") == sheet_id:
        selection.select_sheet(state, None)
    detail = state.get("sheet_detail")
    if detail is not None and detail.id == sheet_id:
        selection.close_sheet_editor(state)
    state["notice"] = "Überleitungssheet gelöscht."

    try:
        selection.refresh_sheets(state)
    except ACTION_ERRORS as e:
        state["sheets"] = [s for s in state.get("sheets") or [] if s.id != sheet_id]
        fail(state, e, "Fehler beim Neuladen der Überleitungssheets.")
    return True


def delete_selected_sheet(state: MutableMapping[str, Any]) -> bool:
    return delete_sheet(state, state.get("sheet_id"))


def upload_file(
    state: MutableMapping[str, Any],
    file_name: Optional[str],
    content: Optional[bytes],
    mime_type: Optional[str] = None,
) -> None:
    if not file_name or content is None or state.get("uploading"):
        return

    state["error"] = None
    state["upload_warnings"] = []
    with busy(state, "uploading"):
        try:
            result = api_client.upload_ingest_file(file_name, content, mime_type)
            state["upload_warnings"] = list(result.warnings)

            if isinstance(result, UploadBriefResult):
                selection.refresh_briefs(state)
                selection.select_brief(state, result.brief_id)
                state["notice"] = f"Steckbrief „{result.title}“ (Version {result.version}) importiert."
            elif isinstance(result, UploadSheetResult):
                selection.refresh_sheets(state)
                selection.select_sheet(state, result.sheet_id)
                state["notice"] = (
                    f"Überleitungssheet „{result.theme}“ importiert "
                    f"({result.questions_imported} Fragen)."
                )
            else:
                state["error"] = "Die Datei konnte weder als Steckbrief noch als Überleitungssheet erkannt werden."
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Upload.")


def create_brief(state: MutableMapping[str, Any], title: str, raw_markdown: str = "") -> bool:
    title = (title or "").strip()
    if not title:
        state["error"] = "Bitte einen Titel angeben."
        return False
    if state.get("saving_brief"):
        return False

    state["error"] = None
    with busy(state, "saving_brief"):
        try:
            created = api_client.create_brief({"title": title, "raw_markdown": raw_markdown})
            selection.refresh_briefs(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Anlegen des Steckbriefs.")
            return False

    selection.select_brief(state, created.id)
    return True


def create_sheet(state: MutableMapping[str, Any], name: str, theme: str = "") -> bool:
    name = (name or "").strip()
    if not name:
        state["error"] = "Bitte einen Namen angeben."
        return False
    if state.get("saving_sheet"):
        return False

    state["error"] = None
    with busy(state, "saving_sheet"):
        try:
            created = api_client.create_sheet({"name": name, "theme": theme.strip() or None})
            selection.refresh_sheets(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Anlegen des Sheets.")
            return False

    selection.select_sheet(state, created.id)
    return True
