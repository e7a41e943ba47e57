"""Family page - parents manage and follow linked students"""

import streamlit as st

from backend.family import child_progress, create_child, list_children
from backend.schemas import GradeLevel
from backend.xp import level_progress


def show_family_page(store, parent):
    """Display linked children and their progress

    Args:
        store: Store instance
        parent: UserAccount of the signed-in parent
    """
    st.title("👪 Squad")

    children = list_children(store, parent.id)
    if not children:
        st.info("No students linked yet. Enrol one below.")

    for child in children:
        progress = child_progress(store, child)
        xp = level_progress(child.xp)
        with st.container(border=True):
            col1, col2, col3, col4 = st.columns(4)
            with col1:
                st.markdown(f"**{child.name}**")
                st.caption(f"@{child.user_id}")
            with col2:
                st.metric("Level", xp["level"])
            with col3:
                st.metric("Today", f"{progress.today_score}%", help=f"{progress.pending_today} pending")
            with col4:
                avg = progress.week_average
                st.metric("7-day avg", f"{avg}%" if avg is not None else "-")
            st.progress(xp["xp_in_level"] / xp["xp_per_level"], text=f"{child.xp} XP")

    st.divider()
    _show_add_child_form(store, parent)


def _show_add_child_form(store, parent):
    st.subheader("Enrol a student")
    with st.form("add_child_form"):
        name = st.text_input("Name *")
        handle = st.text_input("Login handle *")
        phone = st.text_input("Phone (optional)")
        col1, col2 = st.columns(2)
        with col1:
            grade = st.selectbox("Grade level", options=list(GradeLevel), format_func=lambda g: g.value.title())
        with col2:
            specific_grade = st.number_input("Grade number", min_value=1, max_value=16, value=5)
        submitted = st.form_submit_button("Enrol", type="primary")

    if submitted:
        if not name or not handle:
            st.error("Please enter a name and login handle")
            return
        try:
            child = create_child(store, parent.id, name.strip(), handle.strip(), phone=phone,
                                 grade=grade, specific_grade=int(specific_grade))
            st.success(f"{child.name} enrolled! 🚀")
            st.rerun()
        except ValueError as e:
            st.error(str(e))
