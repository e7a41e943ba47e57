"""Helper functions shared by the Streamlit pages"""

from backend.schemas import ActivityCategory, ItemStatus, ScheduleItem
from backend.conflicts import duration_minutes, format_duration


CATEGORY_ICONS = {
    ActivityCategory.STUDYING: "📚",
    ActivityCategory.READING: "📖",
    ActivityCategory.PLAYTIME: "🎮",
    ActivityCategory.EXERCISE: "🏃",
    ActivityCategory.CHORES: "🧹",
    ActivityCategory.REST: "😴",
    ActivityCategory.OTHER: "✨",
}


def item_title(item: ScheduleItem) -> str:
    """e.g. '📚 08:30-11:30 Math Session (3h)'"""
    icon = CATEGORY_ICONS.get(item.category, "")
    times = f"{item.start_time or '--:--'}-{item.end_time or '--:--'}"
    return f"{icon} {times} {item.label} ({format_duration(duration_minutes(item))})"


def status_badge(item: ScheduleItem) -> str:
    if item.status == ItemStatus.LOGGED:
        return "🛰️ Spontaneous" if not item.planned_id else "✅ Logged"
    return "⏳ Pending"


def score_color(score: int) -> str:
    """Streamlit markdown color name for a sync score"""
    if score >= 90:
        return "green"
    if score >= 50:
        return "blue"
    return "orange"


def store_error_message(e: Exception) -> str:
    return f"Data unavailable: {getattr(e, 'message', str(e))}"
