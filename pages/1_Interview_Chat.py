import streamlit as st

from components.chat_panel import render_chat, render_user_context
from config import setup_logging
from ui_nav import render_top_nav
from workbench import chat

setup_logging()

st.set_page_config(page_title="Domänen-Assistent", layout="wide")
render_top_nav("pages/1_Interview_Chat.py", "Geführtes Interview zum Domänen-Steckbrief")

st.title("Domänen-Assistent")
st.caption("Chatten Sie mit dem Assistenten. Den Editor erreichen Sie über die Navigation oben.")

state = st.session_state
chat.init_chat_state(state, st.query_params.to_dict())

render_user_context(state)

# first question of the interview, only on the very first run of the session
if not state.chat_initialized:
    with st.spinner("Assistent wird gestartet …"):
        chat.auto_start(state)

chat.load_context(state)

render_chat(state)
