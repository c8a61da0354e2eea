import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, time

import streamlit as st

from tracker.aggregate import breakdown_rows
from tracker.allowance import allowance_message, budget_status
from tracker.charts import category_bars, category_pie, week_bars
from tracker.config import Config
from tracker.domain import ALL, Category, RecordDraft, style_for
from tracker.errors import NotFound, PendingApproval, StoreUnavailable, Unauthorized, ValidationError
from tracker.events import BUDGET_ALERT
from tracker.formatting import format_money, format_percent
from tracker.identity import check_access, identity_for
from tracker.logger import setup_logger
from tracker.search import search
from tracker.series import records_frame
from tracker.services import DashboardService
from tracker.state import TrackerState
from tracker.store import make_store
from tracker.temporal import in_zone, month_label, move_to_day, shift_month

logger = setup_logger("tracker", Config.LOG_LEVEL)

st.set_page_config(page_title="Personal Tracker", layout="wide")

try:
    Config.validate()
except ValueError as e:
    st.error(f"Configuration error: {e}")
    st.stop()

TZ = Config.tz()
CUR = Config.CURRENCY
CATEGORIES = [c.value for c in Category]


def money(value) -> str:
    return format_money(value, CUR)


# ---------------- Identity -----------------
st.sidebar.markdown("### 👤 Account")
user_id = st.sidebar.text_input("User ID", value=st.session_state.get("user_id", ""))
email = st.sidebar.text_input("Email", value=st.session_state.get("email", ""))
st.session_state["user_id"] = user_id
st.session_state["email"] = email

try:
    identity = check_access(identity_for(user_id, email, Config))
except Unauthorized:
    st.title("Personal Tracker")
    st.info("Enter your user ID in the sidebar to sign in.")
    st.stop()
except PendingApproval as e:
    st.title("⏳ Waiting for approval")
    st.write(str(e))
    st.stop()

if st.session_state.get("state_owner") != identity.user_id:
    logger.info("opening tracker for %s", identity.user_id)
    st.session_state.tracker_state = TrackerState(make_store(Config, identity.user_id), identity.user_id, tz=TZ)
    st.session_state.state_owner = identity.user_id
    st.session_state.tracker_state.refresh()

state: TrackerState = st.session_state.tracker_state

if st.sidebar.button("🔄 Refresh"):
    state.refresh()

if state.last_error is not None:
    st.sidebar.warning(f"Showing last loaded data: {state.last_error}")

# ---------------- Calendar position -----------------
if "view_month" not in st.session_state:
    st.session_state.view_month = datetime.now(TZ).date().replace(day=1)

nav_prev, nav_label, nav_next = st.sidebar.columns([1, 3, 1])
with nav_prev:
    if st.button("◀", key="month_prev"):
        st.session_state.view_month = shift_month(st.session_state.view_month, -1)
with nav_next:
    if st.button("▶", key="month_next"):
        st.session_state.view_month = shift_month(st.session_state.view_month, 1)
with nav_label:
    st.markdown(f"**{month_label(st.session_state.view_month)}**")

today = datetime.now(TZ).date()
default_day = today if (today.year, today.month) == (st.session_state.view_month.year, st.session_state.view_month.month) \
    else st.session_state.view_month
viewed_day = st.sidebar.date_input("Viewed day", value=default_day, key=f"viewed_{st.session_state.view_month}")

menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 History", "➕ Add", "💰 Budget"])

dash = DashboardService(tz=TZ).build(state.records, state.budget, today, viewed_day)

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Day total", money(dash.day_total), help=viewed_day.isoformat())
    with k2:
        st.metric("Month total", money(dash.month_total))
    with k3:
        st.metric("Budget used", format_percent(dash.allowance.budget_percent),
                  f"of {money(state.budget.monthly_limit)}", delta_color="off")
    with k4:
        st.metric("Daily allowance", money(dash.allowance.remaining_daily),
                  f"{dash.allowance.remaining_days} days left", delta_color="off")

    st.progress(float(dash.allowance.budget_percent) / 100)

    message = allowance_message(dash.allowance, dash.day_total, CUR)
    if dash.allowance.is_over_daily:
        st.error(message)
    else:
        st.success(message)

    for result in state.bus.publish(BUDGET_ALERT, {
        "budget_percent": dash.allowance.budget_percent,
        "day_total": dash.day_total,
        "remaining_daily": dash.allowance.remaining_daily,
    }):
        if result.get("level") == "error":
            st.error(result["alert"])
    if budget_status(dash.allowance) == "warning":
        st.warning("More than 80% of the monthly budget is spent")

    rows = breakdown_rows(dash.breakdown)
    col_pie, col_bar = st.columns(2)
    with col_pie:
        st.plotly_chart(category_pie(rows), use_container_width=True)
    with col_bar:
        st.plotly_chart(category_bars(rows), use_container_width=True)

    st.plotly_chart(week_bars(dash.week, highlight=viewed_day), use_container_width=True)

    st.subheader(f"📅 {viewed_day.strftime('%d %b %Y')}")
    if dash.day_records:
        for r in dash.day_records:
            st.markdown(f"- **{r.name}** · {r.category} · {money(r.amount)}")
    else:
        st.info("Nothing recorded on this day.")

elif menu == "🧾 History":
    st.title("🧾 History")

    col_q, col_c = st.columns([3, 1])
    with col_q:
        query = st.text_input("Search", placeholder="e.g. lunch")
    with col_c:
        category_filter = st.selectbox("Category", [ALL] + CATEGORIES)

    found = search(dash.month_records, query, category_filter)
    st.caption(f"{len(found)} of {len(dash.month_records)} records in {month_label(st.session_state.view_month)}")

    if found:
        df = records_frame(found)
        st.download_button(
            "⬇️ Download CSV",
            df.to_csv(index=False),
            file_name=f"records_{st.session_state.view_month:%Y_%m}.csv",
            mime="text/csv",
        )

    for r in found:
        style = style_for(r.category)
        shown_at = in_zone(r.created_at, TZ)
        with st.expander(f"{r.name} · {money(r.amount)} · {shown_at:%d %b %H:%M}"):
            st.markdown(f"<span style='color:{style.color}'>● {style.label}</span>", unsafe_allow_html=True)
            with st.form(f"edit_{r.id}"):
                name = st.text_input("Name", value=r.name)
                amount = st.text_input("Amount", value=str(r.amount))
                category = st.selectbox(
                    "Category", CATEGORIES,
                    index=CATEGORIES.index(r.category) if r.category in CATEGORIES else CATEGORIES.index(Category.OTHER.value),
                )
                day = st.date_input("Date", value=shown_at.date())
                save = st.form_submit_button("Save")
            if save:
                try:
                    state.edit(r.id, RecordDraft(name, amount, category, move_to_day(r.created_at, day, TZ)))
                    st.rerun()
                except ValidationError as e:
                    st.error(str(e))
                except NotFound:
                    st.warning("This record was already removed.")
                    state.refresh()
                except (StoreUnavailable, Unauthorized) as e:
                    st.error(f"Could not save: {e}")
            if st.button("🗑 Delete", key=f"del_{r.id}"):
                try:
                    state.remove(r.id)
                    st.rerun()
                except NotFound:
                    st.warning("This record was already removed.")
                    state.refresh()
                except (StoreUnavailable, Unauthorized) as e:
                    st.error(f"Could not delete: {e}")

elif menu == "➕ Add":
    st.title("➕ Add New")
    with st.form("input_form", clear_on_submit=True):
        name = st.text_input("Expense Name (e.g. Lunch)")
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input("Amount")
        with col2:
            category = st.selectbox("Category", CATEGORIES)
        day = st.date_input("Date", value=viewed_day)
        submitted = st.form_submit_button("Save Activity")

    if submitted:
        # today keeps the current time; a backdated entry lands at noon
        at = datetime.now(TZ) if day == today else datetime.combine(day, time(12, 0), tzinfo=TZ)
        try:
            state.add(RecordDraft(name, amount, category, at))
            st.success(f"Saved {name}")
        except ValidationError as e:
            st.error(str(e))
        except (StoreUnavailable, Unauthorized) as e:
            st.error(f"Error saving: {e}")

elif menu == "💰 Budget":
    st.title("💰 Budget")
    st.metric("Monthly limit", money(state.budget.monthly_limit))
    with st.form("budget_form"):
        value = st.text_input("New monthly limit", value=str(state.budget.monthly_limit))
        submitted = st.form_submit_button("Update")
    if submitted:
        try:
            limit = state.change_budget(value)
            st.success(f"Monthly limit set to {money(limit)}")
        except ValidationError as e:
            st.error(str(e))
        except (StoreUnavailable, Unauthorized) as e:
            st.error(f"Could not update budget: {e}")
