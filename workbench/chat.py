"""
Guided interview chat.

State machine per session: idle -> sending -> (reply appended | error shown) -> idle.
Messages live only in the session state; the bootstrap turn is sent with
``skip_save`` so the backend does not persist it.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

import api_client
from config import CHAT_DEFAULT_USER
from schemas import ChatMessage, InterviewContext
from workbench.session import ACTION_ERRORS, get_or_create_session_id

logger = logging.getLogger(__name__)

BOOTSTRAP_PROMPT = (
    "Bitte starte den Dialog und stelle mir die erste Frage zur Arbeit mit Domänen-Steckbriefen."
)
BOOTSTRAP_FALLBACK = (
    "Beim Laden der ersten Frage ist ein Fehler aufgetreten. "
    "Stellen Sie bitte direkt Ihre erste Frage."
)
USER_QUERY_KEYS = ("user", "username", "learner")

CHAT_DEFAULTS: Dict[str, Any] = {
    "chat_messages": [],
    "chat_sending": False,
    "chat_error": None,
    "chat_initialized": False,
    "chat_user": None,
    "ctx": None,
    "ctx_user": None,
    "ctx_loading": False,
    "ctx_error": None,
}


def init_chat_state(state: MutableMapping[str, Any], query_params: Optional[Mapping[str, Any]] = None) -> None:
    for key, value in CHAT_DEFAULTS.items():
        if key not in state:
            state[key] = copy.deepcopy(value)
    if state.get("chat_user") is None:
        state["chat_user"] = user_from_query(query_params or {}) or CHAT_DEFAULT_USER
    get_or_create_session_id(state)


def user_from_query(query_params: Mapping[str, Any]) -> Optional[str]:
    for key in USER_QUERY_KEYS:
        value = query_params.get(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value and str(value).strip():
            return str(value).strip()
    return None


def set_chat_user(state: MutableMapping[str, Any], value: Optional[str]) -> None:
    # widget keys are dropped on page switches, so the name lives in its own key
    state["chat_user"] = value or ""


def effective_user(state: Mapping[str, Any]) -> Optional[str]:
    return (state.get("chat_user") or "").strip() or None


def auto_start(state: MutableMapping[str, Any]) -> None:
    """Fetch the assistant's first question, once per session."""
    if state.get("chat_initialized"):
        return
    state["chat_initialized"] = True
    state["chat_sending"] = True
    state["chat_error"] = None
    try:
        res = api_client.send_chat_message(
            effective_user(state),
            BOOTSTRAP_PROMPT,
            [],
            session_id=get_or_create_session_id(state),
            skip_save=True,
        )
        state["chat_messages"] = [ChatMessage(role="assistant", content=res.answer or "", meta=res.meta)]
    except ACTION_ERRORS as e:
        logger.warning("chat auto-start failed: %s", e)
        state["chat_error"] = str(e) or "Fehler beim automatischen Start des Assistenten."
        state["chat_messages"] = [ChatMessage(role="assistant", content=BOOTSTRAP_FALLBACK)]
    finally:
        state["chat_sending"] = False


def send_message(state: MutableMapping[str, Any], text: Optional[str]) -> bool:
    """Returns False when nothing was sent (blank input or a send already in flight)."""
    trimmed = (text or "").strip()
    if not trimmed or state.get("chat_sending"):
        return False

    history: List[ChatMessage] = list(state.get("chat_messages") or [])
    history.append(ChatMessage(role="user", content=trimmed))
    # shown immediately and kept even when the request fails
    state["chat_messages"] = history
    state["chat_sending"] = True
    state["chat_error"] = None

    try:
        res = api_client.send_chat_message(
            effective_user(state),
            trimmed,
            history,
            session_id=get_or_create_session_id(state),
        )
        state["chat_messages"] = list(state["chat_messages"]) + [
            ChatMessage(role="assistant", content=res.answer or "", meta=res.meta)
        ]
    except ACTION_ERRORS as e:
        logger.warning("chat send failed: %s", e)
        state["chat_error"] = str(e) or "Fehler beim Senden der Nachricht."
    finally:
        state["chat_sending"] = False
    return True


def load_context(state: MutableMapping[str, Any], force: bool = False) -> None:
    """Side panel data. Failures stay in ctx_error and never touch the chat."""
    user = effective_user(state)
    if not user:
        state["ctx"] = None
        state["ctx_user"] = None
        state["ctx_error"] = None
        return
    if user == state.get("ctx_user") and not force:
        return

    state["ctx_user"] = user
    state["ctx_loading"] = True
    state["ctx_error"] = None
    try:
        state["ctx"] = api_client.fetch_interview_context(user)
    except ACTION_ERRORS as e:
        logger.warning("interview context for %s failed: %s", user, e)
        state["ctx_error"] = str(e) or "Fehler beim Laden des Interview-Kontexts."
        state["ctx"] = None
    finally:
        state["ctx_loading"] = False


def context_themes(ctx: Optional[InterviewContext]) -> List[str]:
    if ctx is None:
        return []
    seen: List[str] = []
    for row in ctx.interview:
        theme = row.get("theme")
        if isinstance(theme, str) and theme and theme not in seen:
            seen.append(theme)
    return seen


def message_theme(msg: ChatMessage) -> Optional[str]:
    if msg.role != "assistant" or not msg.meta:
        return None
    theme = msg.meta.get("theme")
    return theme if isinstance(theme, str) and theme else None
