import streamlit as st

from components.brief_editor import render_brief_editor
from components.scorecard_section import render_scorecard_section
from components.selection_section import render_selection_section
from components.sheet_editor import render_sheet_editor
from config import API_BASE, setup_logging
from ui_nav import render_messages, render_top_nav
from workbench import init_state, selection

setup_logging()

st.set_page_config(page_title="Domänen-Steckbrief Scorecard", layout="wide")
render_top_nav("app.py")

st.title("Domänen-Steckbrief Scorecard")
st.caption(
    "Steckbrief + Überleitungssheet auswählen, bewerten und Verbesserungs-Empfehlungen anzeigen. "
    f"Backend: {API_BASE}"
)

# session defaults, kept across reruns
state = st.session_state
init_state(state)

if not state.lists_attempted:
    with st.spinner("Lade Steckbriefe und Sheets …"):
        selection.load_initial_lists(state)

with st.sidebar:
    st.header("Aktionen")
    if st.button("🔄 Listen neu laden", use_container_width=True):
        selection.refresh_lists(state)
        st.rerun()

render_messages()

with st.container(border=True):
    render_selection_section(state)

render_brief_editor(state)
render_sheet_editor(state)

render_scorecard_section(state.scorecard)
