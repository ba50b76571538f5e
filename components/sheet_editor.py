from typing import Any, MutableMapping

import streamlit as st

from workbench import sheet_editor


def _bump(state: MutableMapping[str, Any]) -> None:
    state["questions_rev"] = int(state.get("questions_rev") or 0) + 1


def _render_question(state: MutableMapping[str, Any], index: int, q, rev: str, total: int) -> None:
    k = f"{rev}_{index}"
    with st.container(border=True):
        top = st.columns([0.5, 1, 0.4, 0.4, 0.8], vertical_alignment="center")
        top[0].markdown(f"`#{index + 1}`")
        active = top[1].checkbox("aktiv", value=q.active, key=f"q_active_{k}")
        if top[2].button("↑", key=f"q_up_{k}", disabled=index == 0):
            sheet_editor.move_question(state, index, -1)
            _bump(state)
            st.rerun()
        if top[3].button("↓", key=f"q_down_{k}", disabled=index == total - 1):
            sheet_editor.move_question(state, index, 1)
            _bump(state)
            st.rerun()
        if top[4].button("Löschen", key=f"q_del_{k}"):
            sheet_editor.remove_question(state, index)
            _bump(state)
            st.rerun()

        c1, c2 = st.columns([1, 3])
        code = c1.text_input("Code", value=q.code, key=f"q_code_{k}")
        c1.caption(f"Order Index: {q.order_index}")
        question = c2.text_area("Frage", value=q.question, key=f"q_text_{k}", height=80)
        checkpoints_text = st.text_area(
            "Checkpoints (eine Zeile pro Punkt)",
            value="\n".join(q.checkpoints),
            key=f"q_cp_{k}",
            height=90,
        )

    changes = {}
    if code != q.code:
        changes["code"] = code
    if question != q.question:
        changes["question"] = question
    if active != q.active:
        changes["active"] = active
    checkpoints = sheet_editor.parse_checkpoints(checkpoints_text)
    if checkpoints != q.checkpoints:
        changes["checkpoints"] = checkpoints
    if changes:
        sheet_editor.update_question(state, index, **changes)


def render_sheet_editor(state: MutableMapping[str, Any]) -> None:
    if not state.get("sheet_editor_open"):
        return
    draft = sheet_editor.sheet_draft(state)
    if draft is None:
        return
    saving = bool(state.get("saving_sheet"))

    st.subheader("Überleitungssheet bearbeiten")

    a1, a2, a3, _ = st.columns([1, 1, 1, 4])
    if a1.button("Abbrechen", key="sheet_cancel"):
        sheet_editor.close_sheet_editor(state)
        st.rerun()
    if a2.button("Speichern", type="primary", disabled=saving, key="sheet_save"):
        with st.spinner("Speichere …"):
            if sheet_editor.save_sheet(state):
                _bump(state)
        st.rerun()
    with a3.popover("Löschen", disabled=saving):
        st.write("Dieses Überleitungssheet endgültig löschen?")
        if st.button("Ja, löschen", key="sheet_confirm_delete"):
            sheet_editor.delete_from_editor(state)
            st.rerun()

    meta = st.columns(3)
    meta[0].caption(f"ID\n\n`{draft.id}`")
    meta[1].caption(f"Erstellt\n\n`{draft.created_at or '–'}`")
    meta[2].caption(f"Version (vom Server vergeben)\n\n`{draft.version if draft.version is not None else '–'}`")

    detail = state["sheet_detail"]
    key = draft.id
    c1, c2, c3 = st.columns(3)
    values = {
        "name": c1.text_input("Name", value=draft.name or "", key=f"sheet_name_{key}"),
        "theme": c2.text_input("Theme", value=draft.theme or "", key=f"sheet_theme_{key}"),
        "status": c3.text_input("Status", value=draft.status or "", key=f"sheet_status_{key}"),
        "theme_target_descr": st.text_area(
            "Zielbeschreibung des Themas",
            value=draft.theme_target_descr or "",
            key=f"sheet_target_{key}",
            height=80,
        ),
    }
    for field_name, value in values.items():
        # an empty input over a None field is not an edit
        if not value and getattr(detail, field_name) is None:
            value = None
        sheet_editor.set_sheet_field(state, field_name, value)

    st.divider()
    head = st.columns([4, 1])
    head[0].markdown("**Fragen zum Überleitungssheet**")
    if head[1].button("Frage hinzufügen", key="q_add"):
        sheet_editor.add_question(state)
        _bump(state)
        st.rerun()

    questions = state.get("questions") or []
    if state.get("loading_questions"):
        st.caption("Lade Fragen …")
    elif not questions:
        st.caption("Noch keine Fragen vorhanden. Fügen Sie eine neue Frage hinzu.")
    else:
        rev = f"{draft.id}_{int(state.get('questions_rev') or 0)}"
        with st.container(height=520):
            for i, q in enumerate(questions):
                _render_question(state, i, q, rev, len(questions))
