"""Weekly blueprint editor page"""

import streamlit as st

from backend.blueprint import add_template_item, clone_day, remove_template_item, update_template_item
from backend.conflicts import find_conflicts
from backend.exceptions import StudySyncError
from backend.schemas import DAYS, ActivityCategory, ScheduleItem
from backend.templates import STUDY_SUBJECTS
from utils.helpers import item_title


def show_schedule_editor_page(store, user):
    """Edit the recurring weekly template

    Args:
        store: Store instance
        user: UserAccount of the signed-in user
    """
    st.title("🗺️ Plan Blueprint")
    st.caption("Changes apply from the next day a plan is captured. Today's plan is already locked in.")

    selected_day = st.radio("Day", DAYS, horizontal=True)
    items = sorted(user.day_items(selected_day), key=lambda i: i.start_time or "00:00")
    conflicts = find_conflicts(items)

    if conflicts:
        st.warning(f"⚠️ {len(conflicts)} activities on {selected_day} overlap")

    for item in items:
        _show_item_editor(store, user, selected_day, item, item.id in conflicts)

    st.divider()
    col_add, col_clone = st.columns(2)
    with col_add:
        _show_add_form(store, user, selected_day)
    with col_clone:
        st.subheader("Copy day")
        if st.button(f"📋 Copy {selected_day} to the next day", use_container_width=True):
            try:
                _, next_day = clone_day(store, user.id, selected_day)
                st.success(f"Copied to {next_day}")
                st.rerun()
            except StudySyncError as e:
                st.error(e.message)


def _show_item_editor(store, user, day, item, in_conflict):
    header = f"{'⚠️ ' if in_conflict else ''}{item_title(item)}"
    with st.expander(header):
        with st.form(f"edit_{item.id}"):
            label = st.text_input("Label", value=item.label)
            col1, col2, col3 = st.columns(3)
            with col1:
                start = st.text_input("Start (HH:MM)", value=item.start_time or "")
            with col2:
                end = st.text_input("End (HH:MM)", value=item.end_time or "")
            with col3:
                reminder = st.number_input("Reminder (min before)", min_value=0, max_value=240,
                                           value=item.reminder_minutes or 0)
            category = st.selectbox("Category", options=list(ActivityCategory),
                                    index=list(ActivityCategory).index(item.category),
                                    format_func=lambda c: c.value.title())
            subject = st.text_input("Subject", value=item.planned_subject or "")

            col_save, col_delete = st.columns(2)
            with col_save:
                save = st.form_submit_button("Save", type="primary")
            with col_delete:
                delete = st.form_submit_button("Delete")

        if save:
            updated = item.model_copy(update={
                "label": label,
                "start_time": start.strip(),
                "end_time": end.strip(),
                "category": category,
                "planned_subject": subject or None,
                "reminder_minutes": int(reminder) or None,
            })
            try:
                update_template_item(store, user.id, day, updated)
                st.rerun()
            except (StudySyncError, ValueError) as e:
                st.error(str(e))
        if delete:
            try:
                remove_template_item(store, user.id, day, item.id)
                st.rerun()
            except StudySyncError as e:
                st.error(str(e))


def _show_add_form(store, user, day):
    st.subheader("Add activity")
    with st.form("add_item_form"):
        label = st.text_input("Label", value="New Mission Target")
        col1, col2 = st.columns(2)
        with col1:
            start = st.text_input("Start (HH:MM)", value="08:00")
        with col2:
            end = st.text_input("End (HH:MM)", value="09:00")
        category = st.selectbox("Category", options=list(ActivityCategory), format_func=lambda c: c.value.title())
        subject = st.selectbox("Subject", options=[""] + STUDY_SUBJECTS)
        reminder = st.number_input("Reminder (min before)", min_value=0, max_value=240, value=10)
        submitted = st.form_submit_button("Add", type="primary")

    if submitted:
        item = ScheduleItem(
            category=category,
            start_time=start.strip(),
            end_time=end.strip(),
            label=label,
            planned_subject=subject or None,
            reminder_minutes=int(reminder) or None
        )
        try:
            _, conflicts = add_template_item(store, user.id, day, item)
            if item.id in conflicts:
                st.warning("Added, but it overlaps another activity")
            st.rerun()
        except (StudySyncError, ValueError) as e:
            st.error(str(e))
