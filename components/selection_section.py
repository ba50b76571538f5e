from typing import Any, MutableMapping

import streamlit as st

from workbench import actions, brief_editor, selection, sheet_editor
from workbench.grouping import UNTITLED_LABEL, group_briefs_by_title, toggle_group


def _dash(v: Any) -> str:
    return "–" if v is None or v == "" else str(v)


def _brief_row(state: MutableMapping[str, Any], brief, title: str, indent: bool = False) -> None:
    is_selected = brief.id == state.get("brief_id")
    cols = st.columns([0.15, 2.2, 1.4]) if indent else st.columns([2.35, 1.4])
    label = ("✅ " if is_selected else "") + title
    if cols[-2].button(label, key=f"brief_{brief.id}", use_container_width=True, type="primary" if is_selected else "secondary"):
        selection.select_brief(state, brief.id)
        st.rerun()
    cols[-1].caption(f"Version {_dash(brief.version)} · Status: {_dash(brief.status)}")


def render_brief_list(state: MutableMapping[str, Any]) -> None:
    briefs = state.get("briefs") or []
    head = st.columns([3, 1])
    head[0].markdown("**Steckbriefe**")
    head[1].caption(f"{len(briefs)} Einträge")

    if not briefs:
        st.caption("Noch keine Steckbriefe vorhanden.")
        return

    with st.container(height=320):
        for g in group_briefs_by_title(briefs):
            _brief_row(state, g.latest, g.label)
            if not g.older:
                continue
            is_open = state.get("expanded_group") == g.title
            arrow = "▾" if is_open else "▸"
            if st.button(
                f"{arrow} Ältere Versionen ({len(g.older)})",
                key=f"toggle_{g.title}_{g.latest.id}",
            ):
                state["expanded_group"] = toggle_group(state.get("expanded_group"), g.title)
                st.rerun()
            if is_open:
                for b in g.older:
                    _brief_row(state, b, g.label, indent=True)


def render_sheet_list(state: MutableMapping[str, Any]) -> None:
    sheets = state.get("sheets") or []
    head = st.columns([3, 1])
    head[0].markdown("**Überleitungssheets**")
    head[1].caption(f"{len(sheets)} Einträge")

    if not sheets:
        st.caption("Noch keine Überleitungssheets vorhanden.")
        return

    with st.container(height=320):
        for s in sheets:
            is_selected = s.id == state.get("sheet_id")
            cols = st.columns([2.35, 1.4])
            label = ("✅ " if is_selected else "") + (s.name or "Ohne Name")
            if cols[0].button(label, key=f"sheet_{s.id}", use_container_width=True, type="primary" if is_selected else "secondary"):
                selection.select_sheet(state, s.id)
                st.rerun()
            cols[1].caption(f"Theme: {_dash(s.theme)} · Version {_dash(s.version)}")


def render_upload(state: MutableMapping[str, Any]) -> None:
    st.markdown("**Datei hochladen (Steckbrief oder Überleitungssheet)**")
    uploaded = st.file_uploader("Datei", key="ingest_upload", label_visibility="collapsed")
    busy = bool(state.get("uploading"))
    label = "Wird hochgeladen …" if busy else "Datei hochladen"
    if st.button(label, disabled=(uploaded is None or busy), key="upload_btn"):
        with st.spinner("Datei wird verarbeitet …"):
            actions.upload_file(state, uploaded.name, uploaded.getvalue(), uploaded.type)
        st.rerun()
    if uploaded is not None and not busy:
        st.caption(f"Ausgewählt: {uploaded.name}")

    for w in state.get("upload_warnings") or []:
        st.warning(w)


def render_create_forms(state: MutableMapping[str, Any]) -> None:
    with st.expander("Neu anlegen"):
        c1, c2 = st.columns(2)
        with c1.form("new_brief", clear_on_submit=True):
            title = st.text_input("Titel des Steckbriefs")
            markdown = st.text_area("Markdown (optional)", height=120)
            if st.form_submit_button("Steckbrief anlegen"):
                if actions.create_brief(state, title, markdown):
                    st.rerun()
        with c2.form("new_sheet", clear_on_submit=True):
            name = st.text_input("Name des Sheets")
            theme = st.text_input("Theme (optional)")
            if st.form_submit_button("Sheet anlegen"):
                if actions.create_sheet(state, name, theme):
                    st.rerun()


def render_selection_section(state: MutableMapping[str, Any]) -> None:
    st.subheader("Auswahl Steckbrief und Überleitungssheet")

    if state.get("initial_loading"):
        st.caption("Lade Steckbriefe und Sheets …")

    left, right = st.columns(2, gap="large")
    with left:
        render_brief_list(state)
    with right:
        render_sheet_list(state)

    st.divider()
    render_upload(state)
    render_create_forms(state)

    b = selection.selected_brief(state)
    s = selection.selected_sheet(state)
    st.caption(
        "Ausgewählter Steckbrief: "
        + (f"`{b.title or UNTITLED_LABEL} ({b.id})`" if b else "–")
    )
    st.caption(
        "Ausgewähltes Sheet: "
        + (f"`{s.name or 'Ohne Name'} ({s.id})`" if s else "–")
    )

    loading = bool(state.get("loading"))
    no_pair = not selection.has_pair(state)
    no_brief = not state.get("brief_id")
    no_sheet = not state.get("sheet_id")

    row = st.columns(6)
    if row[0].button("Letzte Auswertung laden", disabled=loading or no_pair):
        with st.spinner("Bitte warten …"):
            actions.load_latest_scorecard(state)
        st.rerun()
    if row[1].button("Neu auswerten", type="primary", disabled=loading or no_pair):
        with st.spinner("Bewertung läuft …"):
            actions.evaluate_selection(state)
        st.rerun()
    if row[2].button("Steckbrief bearbeiten", disabled=no_brief):
        brief_editor.open_brief_editor(state)
        st.rerun()
    if row[3].button("Sheet bearbeiten", disabled=no_sheet):
        sheet_editor.open_sheet_editor(state)
        st.rerun()

    deleting = bool(state.get("deleting"))
    with row[4].popover("Steckbrief löschen", disabled=no_brief or deleting):
        st.write("Ausgewählten Steckbrief endgültig löschen?")
        if st.button("Ja, löschen", key="confirm_delete_brief"):
            actions.delete_selected_brief(state)
            st.rerun()
    with row[5].popover("Sheet löschen", disabled=no_sheet or deleting):
        st.write("Ausgewähltes Überleitungssheet endgültig löschen?")
        if st.button("Ja, löschen", key="confirm_delete_sheet"):
            actions.delete_selected_sheet(state)
            st.rerun()
