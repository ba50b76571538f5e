from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, MutableMapping, Optional

import api_client
from schemas import BriefDetail, Domain
from workbench import selection
from workbench.session import ACTION_ERRORS, busy, fail

logger = logging.getLogger(__name__)

# version is server-assigned and never part of a patch
EDITABLE_FIELDS = ("title", "status", "raw_markdown", "domain_id")


def open_brief_editor(state: MutableMapping[str, Any]) -> bool:
    brief_id = state.get("brief_id")
    if not brief_id:
        return False

    state["error"] = None
    try:
        detail = api_client.fetch_brief_detail(brief_id)
    except ACTION_ERRORS as e:
        fail(state, e, "Fehler beim Laden des Steckbriefs.")
        return False

    state["brief_detail"] = detail
    state["brief_patch"] = {}
    state["brief_editor_open"] = True
    return True


def close_brief_editor(state: MutableMapping[str, Any]) -> None:
    selection.close_brief_editor(state)


def set_brief_field(state: MutableMapping[str, Any], name: str, value: Any) -> None:
    """Record a local edit. Fields equal to the server copy drop out of the patch."""
    if name not in EDITABLE_FIELDS:
        raise KeyError(f"field not editable: {name}")
    detail: Optional[BriefDetail] = state.get("brief_detail")
    if detail is None:
        return

    patch: Dict[str, Any] = dict(state.get("brief_patch") or {})
    if getattr(detail, name) == value:
        patch.pop(name, None)
    else:
        patch[name] = value
    state["brief_patch"] = patch


def brief_draft(state: MutableMapping[str, Any]) -> Optional[BriefDetail]:
    """Server copy with the pending patch applied, for rendering the form."""
    detail: Optional[BriefDetail] = state.get("brief_detail")
    if detail is None:
        return None
    return replace(detail, **(state.get("brief_patch") or {}))


def save_brief(state: MutableMapping[str, Any]) -> bool:
    detail: Optional[BriefDetail] = state.get("brief_detail")
    if detail is None or state.get("saving_brief"):
        return False

    patch = dict(state.get("brief_patch") or {})
    if not patch:
        state["notice"] = "Keine Änderungen zu speichern."
        return True

    state["error"] = None
    with busy(state, "saving_brief"):
        try:
            saved = api_client.update_brief(detail.id, patch)
            state["brief_detail"] = saved
            state["brief_patch"] = {}
            selection.refresh_briefs(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Speichern des Steckbriefs.")
            return False

    logger.info("brief %s saved (%s)", detail.id, ", ".join(sorted(patch)))
    state["notice"] = "Steckbrief gespeichert."
    return True


def domain_options(domains: List[Domain], current: Optional[str]) -> List[Optional[str]]:
    """Selectbox choices; an id missing from a stale list stays selectable so it is not unassigned."""
    options: List[Optional[str]] = [None] + [d.id for d in domains]
    if current is not None and current not in options:
        options.append(current)
    return options
