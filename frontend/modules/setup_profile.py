"""Sign-in and profile setup page"""

import streamlit as st

from backend.family import create_account
from backend.schemas import GradeLevel, UserCreate, UserRole
from backend.templates import seed_demo


def show_setup_page(store):
    """Pick an existing account or create a new one

    Args:
        store: Store instance
    """
    st.title("🚀 Welcome to Study Sync!")

    tab_login, tab_create = st.tabs(["Sign in", "Create profile"])

    with tab_login:
        _show_login(store)

    with tab_create:
        _show_create_form(store)


def _show_login(store):
    handle = st.text_input("Login handle", placeholder="e.g., student")
    if st.button("Sign in", type="primary"):
        user = store.get_user_by_handle(handle.strip())
        if user:
            st.session_state.user_id = user.id
            st.rerun()
        else:
            st.error(f"No account named '{handle}'")

    st.divider()
    st.caption("No data yet? Load a demo parent (mentor) and student (student) with two weeks of history.")
    if st.button("🧪 Load demo data"):
        seed_demo(store)
        st.success("Demo ready! Sign in as 'student' or 'mentor'.")


def _show_create_form(store):
    with st.form("user_setup_form"):
        st.subheader("Account")

        name = st.text_input("Display Name *", placeholder="e.g., Ada")
        handle = st.text_input("Login handle *", placeholder="e.g., ada")

        col1, col2 = st.columns(2)
        with col1:
            role = st.selectbox("Role *", options=list(UserRole), format_func=lambda r: r.value.title())
        with col2:
            phone = st.text_input("Phone (optional)")

        st.subheader("Grade")
        st.caption("Students start from a ready-made weekly blueprint for their grade")

        col3, col4 = st.columns(2)
        with col3:
            grade = st.selectbox("Grade level", options=list(GradeLevel), format_func=lambda g: g.value.title())
        with col4:
            specific_grade = st.number_input("Grade number", min_value=1, max_value=16, value=7)

        submitted = st.form_submit_button("Create Profile", type="primary", use_container_width=True)

    if submitted:
        if not name or not handle:
            st.error("Please enter a name and login handle")
            return
        try:
            user = create_account(store, UserCreate(
                user_id=handle.strip(),
                name=name.strip(),
                phone=phone,
                role=role,
                grade=grade if role == UserRole.STUDENT else None,
                specific_grade=int(specific_grade) if role == UserRole.STUDENT else None
            ))
            st.session_state.user_id = user.id
            st.success(f"✅ Profile created for {name}!")
            st.balloons()
            st.rerun()
        except ValueError as e:
            st.error(str(e))
