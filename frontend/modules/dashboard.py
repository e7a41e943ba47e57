"""Today's dashboard - timeline, sync score, XP and logging actions"""

import streamlit as st
from datetime import date, datetime

from backend.advice import get_advice
from backend.conflicts import add_minutes
from backend.exceptions import StudySyncError
from backend.log_manager import DailyLogManager
from backend.schemas import ActivityCategory, ItemStatus, ScheduleItem
from backend.xp import XP_REASONS
from utils.helpers import item_title, score_color, status_badge


@st.cache_data(ttl=3600, show_spinner=False)
def _cached_advice(schedule_json: dict):
    schedule = {day: [ScheduleItem(**i) for i in items] for day, items in schedule_json.items()}
    return get_advice(schedule)


def show_dashboard_page(store, user):
    """Display today's reconciled timeline

    Args:
        store: Store instance
        user: UserAccount of the signed-in user
    """
    today = date.today()
    manager = DailyLogManager(store)
    view = manager.day_view(user, today, today=today)

    st.title("🛰️ Mission Control")
    st.markdown(f"### {today.strftime('%A, %B %d')}")

    if "feedback" in st.session_state:
        st.toast(st.session_state.pop("feedback"))

    _show_metrics(user, view)
    _show_advice(user)
    st.divider()
    _show_timeline(manager, user, view)
    _show_unsnapshotted(view)
    st.divider()
    _show_manual_entry_form(manager, user, view)


def _show_metrics(user, view):
    col1, col2, col3 = st.columns(3)
    with col1:
        color = score_color(view.sync_score)
        st.metric("Precision Sync", f"{view.sync_score}%")
        st.markdown(f":{color}[{'On track' if view.sync_score > 80 else 'Catch up'}]")
    with col2:
        st.metric("Pending", len(view.pending))
    with col3:
        st.metric("XP", user.xp)
    st.progress(view.sync_score / 100)


def _show_advice(user):
    with st.expander("💡 Tactical Intel", expanded=False):
        with st.spinner("Contacting Mission Control..."):
            schedule_json = {day: [i.to_storage() for i in items] for day, items in user.weekly_schedule.items()}
            st.write(_cached_advice(schedule_json))


def _show_timeline(manager, user, view):
    st.subheader("Timeline")
    if not view.timeline:
        st.info("Nothing planned today. Log a spontaneous activity below!")
        return

    for item in view.timeline:
        col_title, col_status, col_action = st.columns([4, 1.5, 1.5])
        with col_title:
            warn = " ⚠️" if item.id in view.conflicts else ""
            st.markdown(f"**{item_title(item)}**{warn}")
            if item.notes:
                st.caption(item.notes)
        with col_status:
            st.markdown(status_badge(item))
        with col_action:
            if item.status == ItemStatus.PENDING:
                if st.button("Complete", key=f"done_{item.id}", type="primary"):
                    _run(lambda: manager.fulfill(user.id, view.log, item.id))
            else:
                if st.button("Remove", key=f"rm_{item.id}"):
                    _run(lambda: manager.remove_entry(view.log, item.id), xp=False)
        with st.expander("✏️ Edit details"):
            _show_edit_form(manager, view, item)


def _show_edit_form(manager, view, item):
    """Notes, subject and times for one timeline entry (no XP change)"""
    with st.form(f"edit_{item.id}"):
        col1, col2 = st.columns(2)
        with col1:
            start = st.text_input("Start (HH:MM)", value=item.start_time or "")
        with col2:
            end = st.text_input("End (HH:MM)", value=item.end_time or "")
        subject = st.text_input("Subject", value=item.actual_subject or item.planned_subject or "")
        notes = st.text_area("Notes", value=item.notes or "")
        saved = st.form_submit_button("Save")

    if saved:
        updated = item.model_copy(update={
            "start_time": start.strip() or None,
            "end_time": end.strip() or None,
            "actual_subject": subject.strip() or None,
            "notes": notes.strip() or None,
        })
        _run(lambda: manager.update_entry(view.log, updated), xp=False)


def _show_unsnapshotted(view):
    if view.unsnapshotted:
        st.caption("Added to your blueprint after today's plan was captured. These start counting tomorrow:")
        for item in view.unsnapshotted:
            st.caption(f"• {item_title(item)}")


def _show_manual_entry_form(manager, user, view):
    """Form for a spontaneous activity"""
    st.subheader("➕ Spontaneous Mission")
    now = datetime.now()
    default_start = f"{now.hour:02d}:00"

    with st.form("manual_entry_form"):
        label = st.text_input("What did you do?", value="Spontaneous Mission")
        col1, col2, col3 = st.columns(3)
        with col1:
            start = st.text_input("Start (HH:MM)", value=default_start)
        with col2:
            end = st.text_input("End (HH:MM)", value=add_minutes(default_start, 60))
        with col3:
            category = st.selectbox("Category", options=list(ActivityCategory), index=len(ActivityCategory) - 1,
                                    format_func=lambda c: c.value.title())
        notes = st.text_area("Notes (optional)")
        submitted = st.form_submit_button("Log it", type="primary")

    if submitted:
        item = ScheduleItem(category=category, start_time=start, end_time=end, label=label, notes=notes or None)
        _run(lambda: manager.log_spontaneous(user.id, view.log, item))


def _run(action, xp=True):
    """Apply a log action, show XP feedback and refresh"""
    try:
        result = action()
    except StudySyncError as e:
        st.error(f"Sync failed: {e.message}")
        return
    if xp:
        _, award = result
        st.session_state.feedback = f"+{award.amount} XP · {XP_REASONS[award.event]}"
    else:
        st.session_state.feedback = "Telemetry synchronized 📡"
    st.rerun()
