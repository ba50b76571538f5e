from typing import Any, MutableMapping

import streamlit as st

from workbench import brief_editor, domains


def render_domain_manager(state: MutableMapping[str, Any]) -> None:
    saving = bool(state.get("saving_domain"))
    with st.expander("Domänen verwalten", expanded=False):
        if saving:
            st.caption("Speichere …")

        st.markdown("**Neue Domäne anlegen**")
        c1, c2, c3 = st.columns([1.2, 2, 0.8], vertical_alignment="bottom")
        new_name = c1.text_input("Name", key="new_domain_name")
        new_descr = c2.text_input("Beschreibung (optional)", key="new_domain_descr")
        if c3.button("Anlegen", disabled=(not new_name.strip() or saving), key="new_domain_btn"):
            if domains.create_domain(state, new_name, new_descr):
                st.session_state.pop("new_domain_name", None)
                st.session_state.pop("new_domain_descr", None)
            st.rerun()

        st.markdown("**Bestehende Domänen**")
        items = state.get("domains") or []
        if not items:
            st.caption("Noch keine Domänen vorhanden.")
        for d in items:
            with st.container(border=True):
                st.caption(d.id)
                if d.is_fallback:
                    # protected: display only
                    st.write(f"🔒 {d.name}")
                    if d.description:
                        st.caption(d.description)
                    continue
                cols = st.columns([1.2, 2, 0.6, 0.6], vertical_alignment="bottom")
                name = cols[0].text_input("Name", value=d.name, key=f"domain_name_{d.id}")
                descr = cols[1].text_input("Beschreibung", value=d.description or "", key=f"domain_descr_{d.id}")
                if cols[2].button("Speichern", key=f"domain_save_{d.id}", disabled=saving):
                    domains.update_domain(state, d.id, name, descr)
                    st.rerun()
                if cols[3].button("Löschen", key=f"domain_del_{d.id}", disabled=saving):
                    domains.delete_domain(state, d.id)
                    st.rerun()


def render_brief_editor(state: MutableMapping[str, Any]) -> None:
    if not state.get("brief_editor_open"):
        return
    draft = brief_editor.brief_draft(state)
    if draft is None:
        return

    head = st.columns([4, 1])
    head[0].subheader("Steckbrief bearbeiten")
    if head[1].button("Schließen", key="brief_close_top"):
        brief_editor.close_brief_editor(state)
        st.rerun()

    meta = st.columns(4)
    meta[0].caption(f"ID\n\n`{draft.id}`")
    meta[1].caption(f"Version (vom Server vergeben)\n\n`{draft.version if draft.version is not None else '–'}`")
    meta[2].caption(f"Erstellt\n\n`{draft.created_at or '–'}`")
    meta[3].caption(f"Zuletzt aktualisiert\n\n`{draft.updated_at or '–'}`")

    key = draft.id
    c1, c2, c3 = st.columns(3)
    title = c1.text_input("Titel", value=draft.title or "", key=f"brief_title_{key}")
    status = c2.text_input("Status", value=draft.status or "", key=f"brief_status_{key}")

    items = state.get("domains") or []
    options = brief_editor.domain_options(items, draft.domain_id)
    names = {d.id: d.name for d in items}
    domain_id = c3.selectbox(
        "Domäne",
        options=options,
        index=options.index(draft.domain_id),
        format_func=lambda v: "–" if v is None else names.get(v, f"{v} (nicht geladen)"),
        key=f"brief_domain_{key}",
    )

    raw_markdown = st.text_area(
        "Steckbrief (Markdown)",
        value=draft.raw_markdown,
        height=320,
        key=f"brief_markdown_{key}",
    )

    # untouched text inputs report "" for a None field
    detail = state["brief_detail"]
    brief_editor.set_brief_field(state, "title", title if (title or detail.title) else detail.title)
    brief_editor.set_brief_field(state, "status", status if (status or detail.status) else detail.status)
    brief_editor.set_brief_field(state, "domain_id", domain_id)
    brief_editor.set_brief_field(state, "raw_markdown", raw_markdown)

    pending = state.get("brief_patch") or {}
    if pending:
        st.caption("Ungespeicherte Änderungen: " + ", ".join(sorted(pending)))

    render_domain_manager(state)

    b1, b2 = st.columns([1, 5])
    if b1.button("Änderungen speichern", type="primary", disabled=bool(state.get("saving_brief")), key="brief_save"):
        with st.spinner("Speichere …"):
            brief_editor.save_brief(state)
        st.rerun()
    if b2.button("Abbrechen", key="brief_cancel"):
        brief_editor.close_brief_editor(state)
        st.rerun()
