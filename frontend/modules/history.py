"""History page - 30 day sync pulse and per-day detail"""

import streamlit as st
import pandas as pd
from datetime import date

from backend.reconciler import average_score, build_day_view, sync_history
from utils.helpers import item_title, status_badge


def show_history_page(store, user, days=30):
    """Display sync scores for the last `days` days

    Args:
        store: Store instance
        user: UserAccount of the signed-in user
    """
    st.title("📈 Historical Sync Pulse")

    with st.spinner("Querying archives..."):
        logs = store.get_daily_logs(user.id)

    pulse = sync_history(logs, date.today(), days=days)
    df = pd.DataFrame(pulse, columns=["date", "sync"]).set_index("date")

    avg = average_score(pulse)
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Average Sync", f"{avg}%" if avg is not None else "-")
    with col2:
        st.metric("Days Logged", int(df["sync"].notna().sum()))

    st.bar_chart(df["sync"])

    logged_dates = [day for day, score in pulse if score is not None]
    if not logged_dates:
        st.info("No logs yet. Open the dashboard to start today's log.")
        return

    selected = st.selectbox("Day", options=list(reversed(logged_dates)),
                            format_func=lambda d: d.strftime("%A, %B %d"))
    log = next(l for l in logs if l.date == selected)
    _show_day_detail(build_day_view(log))


def _show_day_detail(view):
    st.subheader(f"{view.log.date.strftime('%A, %B %d')} · {view.sync_score}%")
    rows = [
        {"Activity": item_title(item), "Status": status_badge(item), "Notes": item.notes or ""}
        for item in view.timeline
    ]
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
