from typing import Any, MutableMapping

import streamlit as st

from workbench import chat


@st.dialog("Domänen-Steckbrief", width="large")
def _brief_dialog(title: str, markdown: str) -> None:
    st.markdown(f"**{title}**")
    if markdown:
        st.markdown(markdown)
    else:
        st.caption("Es ist kein Steckbrief für dieses Interview verfügbar.")


def render_user_context(state: MutableMapping[str, Any]) -> None:
    with st.container(border=True):
        st.markdown("**Benutzerkontext**")
        st.caption("Optionaler Anzeigename für den Chat. LearnWorlds kann ihn per URL (`?user=`) befüllen.")
        value = st.text_input(
            "Benutzername",
            value=state.get("chat_user") or "",
            key="chat_user_input",
            placeholder="Optional – z. B. Vor- und Nachname",
        )
        chat.set_chat_user(state, value)
        user = chat.effective_user(state)
        st.caption(f"Aktueller Benutzer: {user}" if user else "Kein Benutzer gesetzt")


def render_messages(state: MutableMapping[str, Any]) -> None:
    messages = state.get("chat_messages") or []
    with st.container(height=480):
        if not messages:
            st.caption("Der Assistent wird initial geladen …")
        for m in messages:
            with st.chat_message(m.role):
                theme = chat.message_theme(m)
                if theme:
                    st.badge(theme, color="violet")
                st.markdown(m.content)


def render_context_panel(state: MutableMapping[str, Any]) -> None:
    ctx = state.get("ctx")
    loading = bool(state.get("ctx_loading"))
    ctx_error = state.get("ctx_error")

    with st.container(border=True):
        st.markdown("**Steckbrief**")
        title = (ctx.brief_title if ctx else None) or "Domänen-Steckbrief"
        st.caption(title)
        st.caption("Der Domänen-Steckbrief, zu dem dieses Interview geführt wird.")
        has_brief = bool(ctx and ctx.brief_markdown)
        label = "Steckbrief wird geladen …" if loading else ("Steckbrief anzeigen" if has_brief else "Kein Steckbrief verfügbar")
        if st.button(label, disabled=(not has_brief or loading), use_container_width=True, key="ctx_show_brief"):
            _brief_dialog(title, ctx.brief_markdown)

        st.divider()
        st.markdown("**Themen im Fokus**")
        if ctx_error:
            st.error(ctx_error)
        elif loading:
            st.caption("Themen werden geladen …")
        else:
            themes = chat.context_themes(ctx)
            if not themes:
                st.caption("Keine Themeninformationen verfügbar.")
            for t in themes:
                st.markdown(f"- {t}")


def render_chat(state: MutableMapping[str, Any]) -> None:
    st.subheader("Chat")
    left, right = st.columns([3, 1.2], gap="medium")
    with left:
        render_messages(state)
    with right:
        render_context_panel(state)

    if state.get("chat_error"):
        st.error(state["chat_error"])

    sending = bool(state.get("chat_sending"))
    prompt = st.chat_input(
        "Senden …" if sending else "Ihre Nachricht an den Assistenten",
        disabled=sending,
    )
    if prompt is not None:
        with st.spinner("Assistent antwortet …"):
            chat.send_message(state, prompt)
        st.rerun()
