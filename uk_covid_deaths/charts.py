import logging

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from plotly.colors import qualitative
from statsmodels.nonparametric.smoothers_lowess import lowess

from .aggregate import CHANGE, DAY_COUNT, TOTAL_DEATHS, complete_weeks, partial_weeks
from .config import DAYS_PER_WEEK, LOWESS_FRAC, MIN_SMOOTHING_POINTS
from .dates import DAYS_OF_WEEK
from .loaders import COVID_DEATHS, DAILY_COUNT, DAY_OF_WEEK, REPORT_DATE, WEEK_ENDING, WEEK_START

logger = logging.getLogger(__name__)

# Monday first, so the legend reads in week order
DAY_COLORS = dict(zip(DAYS_OF_WEEK, qualitative.D3))

TREND_COLOR = '#DC143C'
POINT_COLOR = '#1E90FF'


def _as_float(values) -> np.ndarray:
    """Numeric values as a float array, missing entries as NaN."""
    return pd.Series(values).astype('Float64').to_numpy(dtype='float64', na_value=np.nan)


def smooth(dates, values) -> pd.DataFrame:
    """Fit a LOWESS trend curve to a date-indexed series.

    Returns a frame of ``x`` (dates) and ``y`` (fitted values), empty when
    there are too few points to fit.
    """
    points = pd.DataFrame({
        'x': pd.to_datetime(pd.Series(dates)).to_numpy(),
        'y': _as_float(values),
    }).dropna()
    if len(points) < MIN_SMOOTHING_POINTS:
        logger.info(f"Skipping trend curve: {len(points)} points available")
        return pd.DataFrame({'x': pd.Series(dtype='datetime64[ns]'), 'y': pd.Series(dtype='float64')})

    origin = points['x'].min()
    days = (points['x'] - origin).dt.days.to_numpy(dtype=float)
    fitted = lowess(points['y'].to_numpy(dtype=float), days, frac=LOWESS_FRAC, return_sorted=True)

    return pd.DataFrame({
        'x': origin + pd.to_timedelta(fitted[:, 0], unit='D'),
        'y': np.asarray(fitted[:, 1]),
    })


def _scatter_with_trend(x: pd.Series, y: pd.Series, name: str, title: str,
                        x_title: str, y_title: str) -> go.Figure:
    x = pd.to_datetime(pd.Series(x))
    y = _as_float(y)

    fig = go.Figure()
    fig.add_hline(y=0, line_dash="dash", line_color="gray", opacity=0.5)

    fig.add_trace(go.Scatter(
        x=x,
        y=y,
        mode='markers',
        name=name,
        marker=dict(color=POINT_COLOR, size=8),
        hovertemplate=f'%{{x|%d %b %Y}}<br>{y_title}: %{{y:,.0f}}<extra></extra>'
    ))

    trend = smooth(x, y)
    if not trend.empty:
        fig.add_trace(go.Scatter(
            x=trend['x'],
            y=trend['y'],
            mode='lines',
            name='Trend',
            line=dict(color=TREND_COLOR, width=2),
            hoverinfo='skip'
        ))

    fig.update_layout(
        title=title,
        xaxis_title=x_title,
        yaxis_title=y_title,
        template='plotly_white',
        height=500,
        margin=dict(l=50, r=50, t=50, b=50)
    )
    return fig


def render_daily_series(daily: pd.DataFrame) -> go.Figure:
    """Daily deaths as a connected line, points coloured by day of week."""
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=daily[REPORT_DATE],
        y=daily[DAILY_COUNT],
        mode='lines',
        name='Daily deaths',
        line=dict(color='lightgray', width=1),
        hoverinfo='skip',
        showlegend=False
    ))

    for day in DAYS_OF_WEEK:
        day_data = daily[daily[DAY_OF_WEEK] == day]
        fig.add_trace(go.Scatter(
            x=day_data[REPORT_DATE],
            y=day_data[DAILY_COUNT],
            mode='markers',
            name=day,
            marker=dict(color=DAY_COLORS[day], size=7),
            hovertemplate=f'<b>{day}</b> %{{x|%d %b %Y}}<br>Deaths: %{{y:,.0f}}<extra></extra>'
        ))

    fig.update_layout(
        title='Daily Covid-19 deaths by date reported',
        xaxis_title='Date reported',
        yaxis_title='Deaths',
        legend_title_text='Day of week',
        template='plotly_white',
        height=500,
        margin=dict(l=50, r=50, t=50, b=50)
    )
    return fig


def render_weekly_totals(weeks: pd.DataFrame) -> go.Figure:
    """Complete-week totals with a trend curve; partial weeks are left out."""
    complete = complete_weeks(weeks)
    return _scatter_with_trend(complete[WEEK_START], complete[TOTAL_DEATHS],
                               name='Weekly deaths',
                               title='Covid-19 deaths per week (complete weeks)',
                               x_title='Week starting', y_title='Deaths')


def render_weekly_change(weeks: pd.DataFrame) -> go.Figure:
    """Change between consecutive complete weeks.

    A complete week that follows a partial one is drawn without a value, so
    the jump from a short week never reaches the trend curve.
    """
    after_partial = weeks[DAY_COUNT].shift(1) != DAYS_PER_WEEK
    complete = complete_weeks(weeks.assign(**{CHANGE: weeks[CHANGE].mask(after_partial)}))
    return _scatter_with_trend(complete[WEEK_START], complete[CHANGE],
                               name='Change',
                               title='Week-over-week change in Covid-19 deaths',
                               x_title='Week starting', y_title='Change from previous week')


def render_national_stats(national: pd.DataFrame) -> go.Figure:
    return _scatter_with_trend(national[WEEK_ENDING], national[COVID_DEATHS],
                               name='Registered deaths',
                               title='Deaths involving Covid-19 registered per week (ONS)',
                               x_title='Week ending', y_title='Deaths')


def render_excluded_weeks(weeks: pd.DataFrame) -> go.Figure:
    """Table of partial weeks left out of the weekly charts."""
    excluded = partial_weeks(weeks)
    fig = go.Figure(data=[go.Table(
        header=dict(values=['Week starting', 'Days reported', 'Deaths'], align='left'),
        cells=dict(values=[
            excluded[WEEK_START].dt.strftime('%Y-%m-%d').tolist(),
            excluded[DAY_COUNT].tolist(),
            excluded[TOTAL_DEATHS].tolist(),
        ], align='left')
    )])
    fig.update_layout(title='Partial weeks excluded from weekly charts', template='plotly_white')
    return fig
