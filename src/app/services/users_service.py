import html
from typing import Any, Dict

from src.app.context import bind_context
from src.app.utils.users_state import (
    FORM_FIELDS,
    UsersPageState,
    build_user_payload,
    fetch_users,
    submit_user,
    validate_user_form,
)

STATE_KEY = "users_page"
FORM_WARNING_KEY = "users_form_warning"
FORM_KEYS = {name: f"user_form_{name}" for name in FORM_FIELDS}
FORM_LABELS = {
    "name": "👤",
    "surname": "👥",
    "email": "✉️",
    "nickname": "⭐️",
    "password": "🔒",
}


def get_page_state(session_state) -> UsersPageState:
    if STATE_KEY not in session_state:
        session_state[STATE_KEY] = UsersPageState()
    return session_state[STATE_KEY]


def _go_previous():
    get_page_state(st.session_state).go_previous()


def _go_next():
    get_page_state(st.session_state).go_next()


def _queue_submission():
    """Form callback: validates the fields and leaves the POST to the next rerun."""
    values = {name: st.session_state.get(key, "") for name, key in FORM_KEYS.items()}
    problem = validate_user_form(values)
    if problem:
        st.session_state[FORM_WARNING_KEY] = problem
        return
    st.session_state.pop(FORM_WARNING_KEY, None)
    get_page_state(st.session_state).pending_submission = build_user_payload(values)


def _sync_with_backend(state: UsersPageState, body) -> None:
    """Runs the pending POST or page fetch while the loading text fills the page body."""
    if state.pending_submission is None and not state.needs_fetch:
        return
    body.write(get_text(lang, "loading_users"))
    if state.pending_submission is not None:
        form, state.pending_submission = state.pending_submission, None
        submit_user(state, api, form, page_limit)
    else:
        fetch_users(state, api, state.current_page, page_limit)


def _render_user_list(users):
    if not users:
        st.caption(get_text(lang, "no_users"))
        return
    for user in users:
        name = html.escape(str(user.get("name") or ""))
        email = html.escape(str(user.get("email") or ""))
        st.markdown(
            f'<div class="user-row"><span class="user-name">{name}</span> '
            f'<span class="user-email">({email})</span></div>',
            unsafe_allow_html=True,
        )


def _render_pagination(state: UsersPageState):
    if state.meta is None:
        return
    col_label, col_prev, col_next = st.columns([2, 1, 1])
    col_label.write(get_text(lang, "page_of").format(page=state.meta.page, total=state.meta.total_pages))
    col_prev.button(
        get_text(lang, "previous"),
        key="users_prev",
        disabled=state.previous_disabled(),
        on_click=_go_previous,
        width="stretch",
    )
    col_next.button(
        get_text(lang, "next"),
        key="users_next",
        disabled=state.next_disabled(),
        on_click=_go_next,
        width="stretch",
    )


def _render_user_form():
    st.subheader(get_text(lang, "add_new_user"))
    with st.form("add_user_form"):
        for name in FORM_FIELDS:
            st.text_input(
                f"{FORM_LABELS[name]} {get_text(lang, name)}",
                key=FORM_KEYS[name],
                type="password" if name == "password" else "default",
            )
        st.form_submit_button(
            get_text(lang, "add_user"),
            key="user_form_submit",
            on_click=_queue_submission,
            width="stretch",
        )
    warning = st.session_state.get(FORM_WARNING_KEY)
    if warning:
        st.warning(get_text(lang, warning))


def render_users_service(context: Dict[str, Any]) -> None:
    """Render the paginated users list and the creation form using injected app context."""
    bind_context(globals(), context)
    state = get_page_state(st.session_state)
    # Single slot for the whole page: loading text, error or content replace each other.
    body = st.empty()
    _sync_with_backend(state, body)

    with body.container():
        if state.error:
            st.error(f"{get_text(lang, 'error_prefix')}: {get_text(lang, state.error)}")
            return

        st.title(get_text(lang, "title"))
        _render_user_list(state.users)
        _render_pagination(state)
        _render_user_form()
