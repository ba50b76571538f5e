"""
Lists, selection and the initial load for the scorecard page.

All functions take the session-state mapping (``st.session_state`` in the app,
a plain dict in tests) and replace list state wholesale after every fetch.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, MutableMapping, Optional

import api_client
from schemas import BriefListItem, SheetListItem
from workbench.grouping import group_briefs_by_title, sync_expanded_group
from workbench.session import ACTION_ERRORS, busy, fail

logger = logging.getLogger(__name__)

INITIAL_LOAD_ERROR = "Fehler beim Laden der Listen."


def load_initial_lists(state: MutableMapping[str, Any]) -> bool:
    """Fetch briefs, sheets and domains in parallel. Any failure aborts the whole load."""
    state["error"] = None
    # no automatic retry on the next rerun; the refresh button re-triggers
    state["lists_attempted"] = True
    with busy(state, "initial_loading"):
        try:
            with ThreadPoolExecutor(max_workers=3) as pool:
                f_briefs = pool.submit(api_client.fetch_briefs)
                f_sheets = pool.submit(api_client.fetch_sheets)
                f_domains = pool.submit(api_client.fetch_domains)
                briefs = f_briefs.result()
                sheets = f_sheets.result()
                domains = f_domains.result()
        except ACTION_ERRORS as e:
            logger.warning("initial load failed: %s", e)
            state["error"] = INITIAL_LOAD_ERROR
            return False

    state["briefs"] = briefs
    state["sheets"] = sheets
    state["domains"] = domains
    state["lists_loaded"] = True

    if not state.get("brief_id") and briefs:
        select_brief(state, briefs[0].id)
    if not state.get("sheet_id") and sheets:
        select_sheet(state, sheets[0].id)
    return True


def refresh_briefs(state: MutableMapping[str, Any]) -> None:
    state["briefs"] = api_client.fetch_briefs()


def refresh_sheets(state: MutableMapping[str, Any]) -> None:
    state["sheets"] = api_client.fetch_sheets()


def refresh_domains(state: MutableMapping[str, Any]) -> None:
    state["domains"] = api_client.fetch_domains()


def refresh_lists(state: MutableMapping[str, Any]) -> None:
    if not state.get("lists_loaded"):
        load_initial_lists(state)
        return
    state["error"] = None
    try:
        refresh_briefs(state)
        refresh_sheets(state)
        refresh_domains(state)
    except ACTION_ERRORS as e:
        fail(state, e, INITIAL_LOAD_ERROR)


def close_brief_editor(state: MutableMapping[str, Any]) -> None:
    state["brief_editor_open"] = False
    state["brief_detail"] = None
    state["brief_patch"] = {}


def close_sheet_editor(state: MutableMapping[str, Any]) -> None:
    state["sheet_editor_open"] = False
    state["sheet_detail"] = None
    state["sheet_patch"] = {}
    state["questions"] = []


def select_brief(state: MutableMapping[str, Any], brief_id: Optional[str]) -> None:
    state["brief_id"] = brief_id
    state["scorecard"] = None
    # an editor only ever shows the selected brief
    detail = state.get("brief_detail")
    if detail is not None and detail.id != brief_id:
        close_brief_editor(state)
    groups = group_briefs_by_title(state.get("briefs") or [])
    state["expanded_group"] = sync_expanded_group(groups, brief_id, state.get("expanded_group"))


def select_sheet(state: MutableMapping[str, Any], sheet_id: Optional[str]) -> None:
    state["sheet_id"] = sheet_id
    state["scorecard"] = None
    detail = state.get("sheet_detail")
    if detail is not None and detail.id != sheet_id:
        close_sheet_editor(state)


def selected_brief(state: MutableMapping[str, Any]) -> Optional[BriefListItem]:
    return next((b for b in state.get("briefs") or [] if b.id == state.get("brief_id")), None)


def selected_sheet(state: MutableMapping[str, Any]) -> Optional[SheetListItem]:
    return next((s for s in state.get("sheets") or [] if s.id == state.get("sheet_id")), None)


def has_pair(state: MutableMapping[str, Any]) -> bool:
    return bool(state.get("brief_id")) and bool(state.get("sheet_id"))
