"""Study Sync - Main application file"""

import streamlit as st
import sys
import os

# Add parent directory to path to import backend
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from backend.store import get_store
from backend.schemas import UserRole
from backend.exceptions import StoreUnavailableError
from backend.xp import level_progress

# Import page modules
from modules.setup_profile import show_setup_page
from modules.dashboard import show_dashboard_page
from modules.schedule_editor import show_schedule_editor_page
from modules.history import show_history_page
from modules.family import show_family_page
from utils.helpers import store_error_message

# ===================================================================
# PAGE CONFIGURATION & SESSION STATE
# ===================================================================

st.set_page_config(
    page_title="Study Sync",
    page_icon="🚀",
    layout="wide"
)

if 'user_id' not in st.session_state:
    st.session_state.user_id = None

# One store per server process
@st.cache_resource
def load_store():
    return get_store()

# ===================================================================
# USER PROFILE CHECK
# ===================================================================

try:
    store = load_store()
    user = store.get_user_profile(st.session_state.user_id) if st.session_state.user_id else None
except StoreUnavailableError as e:
    st.error(store_error_message(e))
    st.stop()

if not user:
    # Sign in or create a profile
    show_setup_page(store)
    st.stop()

# ===================================================================
# SIDEBAR NAVIGATION
# ===================================================================

progress = level_progress(user.xp)

st.sidebar.title("🚀 Study Sync")
st.sidebar.markdown(f"**{user.name}**")
st.sidebar.markdown(f"LVL {progress['level']} · {user.xp} XP")
st.sidebar.progress(progress['xp_in_level'] / progress['xp_per_level'])
st.sidebar.divider()

pages = ["🛰️ Dashboard", "🗺️ Blueprint", "📈 History"]
if user.role == UserRole.PARENT:
    pages.append("👪 Family")

page = st.sidebar.radio("Navigate", pages)

# ===================================================================
# PAGE ROUTING
# ===================================================================

try:
    if page == "🛰️ Dashboard":
        show_dashboard_page(store, user)
    elif page == "🗺️ Blueprint":
        show_schedule_editor_page(store, user)
    elif page == "📈 History":
        show_history_page(store, user)
    elif page == "👪 Family":
        show_family_page(store, user)
except StoreUnavailableError as e:
    st.error(store_error_message(e))

# ===================================================================
# FOOTER
# ===================================================================

st.sidebar.divider()
if st.sidebar.button("Sign out"):
    st.session_state.user_id = None
    st.rerun()
st.sidebar.caption("Study Sync v1.0")
