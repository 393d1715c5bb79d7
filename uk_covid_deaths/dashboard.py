import pandas as pd
import streamlit as st

from uk_covid_deaths.aggregate import CHANGE, TOTAL_DEATHS, complete_weeks, partial_weeks
from uk_covid_deaths.charts import (render_daily_series, render_national_stats, render_weekly_change,
                                    render_weekly_totals)
from uk_covid_deaths.errors import DeathsAnalysisError
from uk_covid_deaths.loaders import COVID_DEATHS, DAILY_COUNT, WEEK_START
from uk_covid_deaths.pipeline import UKCovidDeathsAnalysis

# Page configuration
st.set_page_config(
    page_title="UK Covid-19 Deaths",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1f1f1f;
        text-align: center;
        margin-bottom: 2rem;
    }
    .sidebar .stMetric > div {
        padding: 0.2rem 0;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_data(ttl=3600)
def load_data():
    """Download and prepare both sources"""
    analysis = UKCovidDeathsAnalysis()
    daily = analysis.load_daily()
    weeks = analysis.load_weekly(daily)
    national = analysis.load_national()
    return daily, weeks, national


def calculate_metric(weeks, metric_type):
    """Calculate metrics for sidebar"""
    complete = complete_weeks(weeks)
    if complete.empty:
        return None

    if metric_type == 'latest_week':
        latest = complete.iloc[-1]
        return f"{latest[WEEK_START]:%d %b %Y}", int(latest[TOTAL_DEATHS])
    elif metric_type == 'peak_week':
        peak = complete.loc[complete[TOTAL_DEATHS].idxmax()]
        return f"{peak[WEEK_START]:%d %b %Y}", int(peak[TOTAL_DEATHS])
    elif metric_type == 'latest_change':
        change = complete[CHANGE].iloc[-1]
        return None if pd.isna(change) else int(change)

    return None


def main():
    try:
        daily, weeks, national = load_data()
    except DeathsAnalysisError as e:
        st.error(f"Could not load data: {e}")
        st.stop()

    st.markdown('<h1 class="main-header">UK Covid-19 Deaths</h1>', unsafe_allow_html=True)

    view_choice = st.radio(
        "Select View:",
        ["Daily Deaths", "Weekly Deaths", "Week-over-Week Change", "ONS Registrations"],
        horizontal=True,
        key="view_selector"
    )

    with st.sidebar:
        st.header("Current Data")
        latest_week = calculate_metric(weeks, 'latest_week')
        peak_week = calculate_metric(weeks, 'peak_week')
        latest_change = calculate_metric(weeks, 'latest_change')

        if latest_week:
            st.metric(f"Week of {latest_week[0]}", f"{latest_week[1]:,}",
                      delta=None if latest_change is None else f"{latest_change:+,}",
                      delta_color="inverse")
        if peak_week:
            st.metric("Peak Week", f"{peak_week[1]:,}", help=f"Week starting {peak_week[0]}")

        st.markdown("---")
        st.markdown("**Dataset Info**")
        st.text(f"Daily records: {len(daily):,}")
        st.text(f"Total deaths: {int(daily[DAILY_COUNT].sum()):,}")
        st.text(f"ONS weeks: {len(national)}")
        st.text(f"ONS Covid deaths: {int(national[COVID_DEATHS].sum()):,}")

    if view_choice == "Daily Deaths":
        st.header("Daily Deaths by Date Reported")
        st.markdown("Each point is one day's reported deaths, coloured by day of the week.")
        st.plotly_chart(render_daily_series(daily), use_container_width=True)
        st.info("Interpretation: Weekend reporting lags show up as low Sunday and Monday counts.")

    elif view_choice == "Weekly Deaths":
        st.header("Deaths per Week")
        st.markdown("Deaths summed over Monday-to-Sunday weeks, with a LOWESS trend curve.")
        st.plotly_chart(render_weekly_totals(weeks), use_container_width=True)

    elif view_choice == "Week-over-Week Change":
        st.header("Week-over-Week Change")
        st.markdown("Each week's total minus the previous week's total.")
        st.plotly_chart(render_weekly_change(weeks), use_container_width=True)
        st.info("Interpretation: Points below zero are weeks with fewer deaths than the week before.")

    elif view_choice == "ONS Registrations":
        st.header("Deaths Involving Covid-19 Registered per Week")
        st.markdown("Weekly registrations published by the Office for National Statistics.")
        st.plotly_chart(render_national_stats(national), use_container_width=True)

    excluded = partial_weeks(weeks)
    if not excluded.empty:
        st.markdown("---")
        st.subheader("Partial weeks excluded from weekly charts")
        st.dataframe(excluded, hide_index=True)


if __name__ == "__main__":
    main()
