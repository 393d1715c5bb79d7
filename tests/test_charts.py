import pandas as pd

from uk_covid_deaths.aggregate import aggregate_by_week, with_week_over_week_change
from uk_covid_deaths.charts import (DAY_COLORS, render_daily_series, render_excluded_weeks,
                                    render_national_stats, render_weekly_change,
                                    render_weekly_totals, smooth)
from uk_covid_deaths.dates import DAYS_OF_WEEK
from uk_covid_deaths.loaders import (COVID_DEATHS, DAILY_COUNT, REPORT_DATE, WEEK_ENDING,
                                     load_daily_deaths)


def _weeks(daily_raw):
    return with_week_over_week_change(aggregate_by_week(load_daily_deaths(daily_raw)))


def _steady_weeks(n):
    starts = pd.date_range('2020-03-09', periods=n, freq='7D')
    totals = [100, 180, 290, 350, 520, 610, 640, 800][:n]
    weeks = pd.DataFrame({'week_start': starts, 'total_deaths': totals, 'day_count': [7] * n})
    return with_week_over_week_change(weeks)


def test_smooth_returns_fitted_curve():
    dates = pd.Series(pd.date_range('2020-03-09', periods=10, freq='7D'))
    values = pd.Series([10, 22, 29, 41, 52, 58, 71, 80, 92, 99])

    trend = smooth(dates, values)

    assert len(trend) == 10
    assert trend['x'].iloc[0] == pd.Timestamp('2020-03-09')
    assert trend['y'].iloc[-1] > trend['y'].iloc[0]


def test_smooth_skips_too_few_points():
    dates = pd.Series(pd.to_datetime(['2020-03-09', '2020-03-16']))

    assert smooth(dates, pd.Series([1, 2])).empty


def test_smooth_ignores_missing_values():
    dates = pd.Series(pd.date_range('2020-03-09', periods=5, freq='7D'))
    values = pd.Series([pd.NA, 5, 7, 6, 9], dtype='Int64')

    assert len(smooth(dates, values)) == 4


def test_daily_series_colours_points_monday_first(daily_raw):
    daily = load_daily_deaths(daily_raw)

    fig = render_daily_series(daily)

    marker_traces = [trace for trace in fig.data if trace.mode == 'markers']
    assert [trace.name for trace in marker_traces] == list(DAYS_OF_WEEK)
    assert marker_traces[0].marker.color == DAY_COLORS['Mon']
    assert sum(len(trace.x) for trace in marker_traces) == len(daily)
    assert list(fig.data[0].y) == daily[DAILY_COUNT].tolist()
    assert fig.data[0].mode == 'lines'


def test_weekly_totals_excludes_partial_weeks(daily_raw):
    fig = render_weekly_totals(_weeks(daily_raw))

    points = fig.data[0]
    assert list(points.y) == [331, 475]
    assert len(fig.layout.shapes) == 1
    assert fig.layout.shapes[0].y0 == 0


def test_weekly_totals_adds_trend_with_enough_weeks():
    fig = render_weekly_totals(_steady_weeks(8))

    assert [trace.name for trace in fig.data] == ['Weekly deaths', 'Trend']


def test_weekly_change_plots_complete_weeks(daily_raw):
    fig = render_weekly_change(_weeks(daily_raw))

    # 2020-03-09 follows the 4-day week of 2020-03-02, so its change is blanked
    y = list(fig.data[0].y)
    assert pd.isna(y[0])
    assert y[1:] == [144]
    assert len(fig.layout.shapes) == 1


def test_weekly_change_keeps_change_data_for_partial_predecessor(daily_raw):
    weeks = _weeks(daily_raw)

    render_weekly_change(weeks)

    assert weeks['change'].iloc[1] == 328


def test_weekly_change_first_week_has_no_point():
    fig = render_weekly_change(_steady_weeks(6))

    y = list(fig.data[0].y)
    assert pd.isna(y[0])
    assert y[1:] == [80.0, 110.0, 60.0, 170.0, 90.0]
    assert fig.data[1].name == 'Trend'


def test_empty_input_gives_empty_charts():
    weeks = _steady_weeks(0)

    for fig in (render_weekly_totals(weeks), render_weekly_change(weeks)):
        assert len(fig.data) == 1
        assert len(fig.data[0].x) == 0


def test_national_stats_chart():
    national = pd.DataFrame({
        WEEK_ENDING: pd.date_range('2020-01-03', periods=16, freq='7D'),
        COVID_DEATHS: [0] * 11 + [5, 103, 539, 3475, 6213],
    })

    fig = render_national_stats(national)

    assert list(fig.data[0].y) == national[COVID_DEATHS].tolist()
    assert fig.data[1].name == 'Trend'


def test_excluded_weeks_table(daily_raw):
    fig = render_excluded_weeks(_weeks(daily_raw))

    cells = fig.data[0].cells.values
    assert list(cells[0]) == ['2020-03-02']
    assert list(cells[1]) == [4]
    assert list(cells[2]) == [3]


def test_daily_series_empty():
    daily = pd.DataFrame({REPORT_DATE: pd.Series(dtype='datetime64[ns]'),
                          DAILY_COUNT: pd.Series(dtype='int64'),
                          'day_of_week': pd.Series(dtype='object')})

    fig = render_daily_series(daily)

    assert len(fig.data) == 1 + len(DAYS_OF_WEEK)
