import streamlit as st

# ------------------------- Top navigation (horizontal) -------------------------
PAGES = [
    ("📊 Scorecard & Editor", "app.py"),
    ("💬 Interview-Chat", "pages/1_Interview_Chat.py"),
]


def _hide_sidebar_css() -> None:
    st.markdown(
        """
        <style>
        [data-testid="stSidebarNav"] { display: none !important; }
        .block-container { padding-top: 1.0rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_top_nav(current_path: str, title: str = "") -> None:
    _hide_sidebar_css()

    nav_cols = st.columns([1] * len(PAGES) + [2], vertical_alignment="center")
    for i, (name, path) in enumerate(PAGES):
        if nav_cols[i].button(
            name,
            use_container_width=True,
            disabled=(path == current_path),
            key=f"nav_{current_path}_{path}",
        ):
            st.switch_page(path)

    if title:
        st.caption(title)

    st.divider()


def render_messages(error_key: str = "error", notice_key: str = "notice") -> None:
    """Show the single error text and a one-shot notice."""
    err = st.session_state.get(error_key)
    if err:
        st.error(f"Fehler: {err}")
    notice = st.session_state.get(notice_key)
    if notice:
        st.success(notice)
        st.session_state[notice_key] = None
