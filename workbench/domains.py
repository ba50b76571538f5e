from __future__ import annotations

import logging
from typing import Any, List, MutableMapping, Optional

import api_client
from api_client import ApiError
from schemas import Domain
from workbench import selection
from workbench.session import ACTION_ERRORS, busy, fail

logger = logging.getLogger(__name__)

FALLBACK_LOCKED = "Die Fallback-Domäne „Unbekannt“ kann nicht bearbeitet oder gelöscht werden."
DOMAIN_IN_USE = "Domäne wird noch von Steckbriefen verwendet und kann nicht gelöscht werden."
UNKNOWN_DOMAIN = "Domäne nicht gefunden. Bitte die Liste neu laden."


def find_domain(domains: List[Domain], domain_id: Optional[str]) -> Optional[Domain]:
    return next((d for d in domains if d.id == domain_id), None)


def editable_domains(domains: List[Domain]) -> List[Domain]:
    return [d for d in domains if not d.is_fallback]


def _guard_target(state: MutableMapping[str, Any], domain_id: str) -> bool:
    """Only domains from the loaded list, never the fallback, go to the backend."""
    d = find_domain(state.get("domains") or [], domain_id)
    if d is None:
        state["error"] = UNKNOWN_DOMAIN
        return False
    if d.is_fallback:
        state["error"] = FALLBACK_LOCKED
        return False
    return True


def is_domain_in_use(exc: ApiError) -> bool:
    return exc.status == 409 or "domain_in_use" in (exc.body or "")


def create_domain(state: MutableMapping[str, Any], name: str, description: str = "") -> bool:
    name = (name or "").strip()
    if not name:
        state["error"] = "Bitte einen Namen für die Domäne angeben."
        return False
    if state.get("saving_domain"):
        return False

    state["error"] = None
    with busy(state, "saving_domain"):
        try:
            api_client.create_domain({"name": name, "description": description.strip() or None})
            selection.refresh_domains(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Anlegen der Domäne.")
            return False
    return True


def update_domain(state: MutableMapping[str, Any], domain_id: str, name: str, description: str = "") -> bool:
    if not _guard_target(state, domain_id):
        return False
    name = (name or "").strip()
    if not name:
        state["error"] = "Der Name der Domäne darf nicht leer sein."
        return False
    if state.get("saving_domain"):
        return False

    state["error"] = None
    with busy(state, "saving_domain"):
        try:
            api_client.update_domain(domain_id, {"name": name, "description": description.strip() or None})
            selection.refresh_domains(state)
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Aktualisieren der Domäne.")
            return False
    return True


def delete_domain(state: MutableMapping[str, Any], domain_id: str) -> bool:
    if not _guard_target(state, domain_id):
        return False
    if state.get("saving_domain"):
        return False

    state["error"] = None
    with busy(state, "saving_domain"):
        try:
            api_client.delete_domain(domain_id)
            selection.refresh_domains(state)
        except ApiError as e:
            if is_domain_in_use(e):
                logger.info("domain %s still in use", domain_id)
                state["error"] = DOMAIN_IN_USE
            else:
                fail(state, e, "Fehler beim Löschen der Domäne.")
            return False
        except ACTION_ERRORS as e:
            fail(state, e, "Fehler beim Löschen der Domäne.")
            return False

    # the open brief must not keep pointing at a removed domain
    patch = state.get("brief_patch") or {}
    if patch.get("domain_id") == domain_id:
        patch = dict(patch)
        patch.pop("domain_id")
        state["brief_patch"] = patch
    return True
