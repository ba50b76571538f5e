from __future__ import annotations

import copy
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, MutableMapping

import requests

from api_client import ApiError

logger = logging.getLogger(__name__)

# Failures caught at the UI-action boundary; anything else is a bug and propagates.
ACTION_ERRORS = (ApiError, requests.RequestException, ValueError)

DEFAULTS: Dict[str, Any] = {
    # lists + selection
    "briefs": [],
    "sheets": [],
    "domains": [],
    "brief_id": None,
    "sheet_id": None,
    "expanded_group": None,
    "lists_loaded": False,
    "lists_attempted": False,
    "initial_loading": False,
    # scorecard
    "scorecard": None,
    "loading": False,
    "error": None,
    "notice": None,
    # upload
    "uploading": False,
    "upload_warnings": [],
    # brief editor
    "brief_editor_open": False,
    "brief_detail": None,
    "brief_patch": {},
    "saving_brief": False,
    "saving_domain": False,
    # sheet editor
    "sheet_editor_open": False,
    "sheet_detail": None,
    "sheet_patch": {},
    "questions": [],
    "loading_questions": False,
    "saving_sheet": False,
    "deleting": False,
    # bumped on structural question-list changes so row widgets are rebuilt
    "questions_rev": 0,
}


def init_state(state: MutableMapping[str, Any]) -> None:
    """Fill missing keys; survives Streamlit reruns without resetting anything."""
    for key, value in DEFAULTS.items():
        if key not in state:
            state[key] = copy.deepcopy(value)


def get_or_create_session_id(state: MutableMapping[str, Any]) -> str:
    sid = state.get("session_id")
    if not sid:
        sid = str(uuid.uuid4())
        state["session_id"] = sid
    return sid


@contextmanager
def busy(state: MutableMapping[str, Any], flag: str) -> Iterator[None]:
    state[flag] = True
    try:
        yield
    finally:
        state[flag] = False


def fail(state: MutableMapping[str, Any], exc: BaseException, fallback: str) -> None:
    logger.warning("%s (%s)", fallback, exc)
    state["error"] = str(exc) or fallback
