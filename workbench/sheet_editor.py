from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, MutableMapping, Optional

import api_client
from schemas import SheetDetail, SheetQuestion
from workbench import actions, selection
from workbench.session import ACTION_ERRORS, busy, fail

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "theme", "status", "theme_target_descr")
QUESTION_FIELDS = ("code", "question", "checkpoints", "active")


def open_sheet_editor(state: MutableMapping[str, Any]) -> bool:
    sheet_id = state.get("sheet_id")
    if not sheet_id:
        return False

    state["error"] = None
    with busy(state, "loading_questions"):
        try:
            detail = api_client.fetch_sheet_detail(sheet_id)
            questions = api_client.fetch_sheet_questions(sheet_id)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Laden des Sheets.")
            return False

    state["sheet_detail"] = detail
    state["sheet_patch"] = {}
    state["questions"] = questions
    state["sheet_editor_open"] = True
    return True


def close_sheet_editor(state: MutableMapping[str, Any]) -> None:
    selection.close_sheet_editor(state)


def set_sheet_field(state: MutableMapping[str, Any], name: str, value: Any) -> None:
    if name not in EDITABLE_FIELDS:
        raise KeyError(f"field not editable: {name}")
    detail: Optional[SheetDetail] = state.get("sheet_detail")
    if detail is None:
        return

    patch: Dict[str, Any] = dict(state.get("sheet_patch") or {})
    if getattr(detail, name) == value:
        patch.pop(name, None)
    else:
        patch[name] = value
    state["sheet_patch"] = patch


def sheet_draft(state: MutableMapping[str, Any]) -> Optional[SheetDetail]:
    detail: Optional[SheetDetail] = state.get("sheet_detail")
    if detail is None:
        return None
    return replace(detail, **(state.get("sheet_patch") or {}))


# ---- question list (positional order) ----

def renumber(questions: List[SheetQuestion]) -> List[SheetQuestion]:
    """order_index follows list position, starting at 1."""
    return [replace(q, order_index=i) for i, q in enumerate(questions, start=1)]


def parse_checkpoints(text: str) -> List[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def add_question(state: MutableMapping[str, Any]) -> None:
    questions = list(state.get("questions") or [])
    questions.append(SheetQuestion(code=f"Q{len(questions) + 1}", active=True))
    state["questions"] = renumber(questions)


def remove_question(state: MutableMapping[str, Any], index: int) -> None:
    questions = list(state.get("questions") or [])
    if 0 <= index < len(questions):
        del questions[index]
        state["questions"] = renumber(questions)


def move_question(state: MutableMapping[str, Any], index: int, delta: int) -> None:
    questions = list(state.get("questions") or [])
    target = index + delta
    if not (0 <= index < len(questions)) or not (0 <= target < len(questions)):
        return
    questions.insert(target, questions.pop(index))
    state["questions"] = renumber(questions)


def update_question(state: MutableMapping[str, Any], index: int, **patch: Any) -> None:
    unknown = set(patch) - set(QUESTION_FIELDS)
    if unknown:
        raise KeyError(f"fields not editable: {sorted(unknown)}")
    questions = list(state.get("questions") or [])
    if 0 <= index < len(questions):
        questions[index] = replace(questions[index], **patch)
        state["questions"] = questions


def save_sheet(state: MutableMapping[str, Any]) -> bool:
    """Sheet patch first, then one bulk write of the question list."""
    detail: Optional[SheetDetail] = state.get("sheet_detail")
    if detail is None or state.get("saving_sheet"):
        return False

    patch = dict(state.get("sheet_patch") or {})
    questions = list(state.get("questions") or [])

    state["error"] = None
    with busy(state, "saving_sheet"):
        try:
            if patch:
                state["sheet_detail"] = api_client.update_sheet(detail.id, patch)
                state["sheet_patch"] = {}
            # the backend answer is the new source of truth for the list
            state["questions"] = api_client.update_sheet_questions(detail.id, questions)
            selection.refresh_sheets(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Speichern des Sheets.")
            return False

    logger.info("sheet %s saved with %d questions", detail.id, len(state["questions"]))
    state["notice"] = "Überleitungssheet gespeichert."
    return True


def delete_from_editor(state: MutableMapping[str, Any]) -> bool:
    """Deletes the sheet open in the editor, whatever the list selection says."""
    detail: Optional[SheetDetail] = state.get("sheet_detail")
    if detail is None:
        return False
    return actions.delete_sheet(state, detail.id)
