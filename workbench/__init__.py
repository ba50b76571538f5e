from workbench.session import init_state, get_or_create_session_id

__all__ = ["init_state", "get_or_create_session_id"]
