"""Turn raw downloaded tables into the fixed-schema frames used downstream.

Vendor column names are only looked up here. Everything after this module
works with ``REPORT_DATE``, ``DAILY_COUNT`` and the other constants below.
"""
import logging

import pandas as pd

from . import config
from .dates import days_of_week, parse_day_month_year, week_ending_from_index, week_starts
from .errors import ParseError, ShapeError

logger = logging.getLogger(__name__)

REPORT_DATE = 'report_date'
DAILY_COUNT = 'daily_count'
CUMULATIVE_COUNT = 'cumulative_count'
DAY_OF_WEEK = 'day_of_week'
WEEK_START = 'week_start'
DAILY_COLUMNS = [REPORT_DATE, DAILY_COUNT, CUMULATIVE_COUNT, DAY_OF_WEEK, WEEK_START]

WEEK_NUMBER = 'week_number'
WEEK_ENDING = 'week_ending'
COVID_DEATHS = 'covid_deaths'


def _require_columns(df: pd.DataFrame, columns, resource: str):
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise ShapeError(f"Missing expected columns {missing}; found {df.columns.tolist()}",
                         stage='load', resource=resource)


def _counts(series: pd.Series, resource: str) -> pd.Series:
    """Coerce a count column to non-negative int64."""
    numeric = pd.to_numeric(series, errors='coerce')
    bad = numeric.isna() | (numeric < 0) | (numeric % 1 != 0)
    if bad.any():
        examples = series[bad].head(3).tolist()
        raise ShapeError(f"Column {series.name!r} has {int(bad.sum())} missing, negative or "
                         f"non-integer values, e.g. {examples}", stage='load', resource=resource)
    return numeric.astype('int64')


def load_daily_deaths(raw: pd.DataFrame, resource: str = 'daily_deaths') -> pd.DataFrame:
    """Build the daily deaths frame from the raw government CSV."""
    _require_columns(raw, [config.DAILY_PUBLICATION_DATE_COLUMN, config.DAILY_REPORT_DATE_COLUMN,
                           config.DAILY_CUMULATIVE_COLUMN, config.DAILY_COUNT_COLUMN], resource)

    try:
        report_dates = raw[config.DAILY_REPORT_DATE_COLUMN].map(parse_day_month_year)
    except ParseError as e:
        e.resource = resource
        raise
    daily = pd.DataFrame({
        REPORT_DATE: pd.to_datetime(report_dates.tolist()) if len(raw) else pd.Series(dtype='datetime64[ns]'),
        DAILY_COUNT: _counts(raw[config.DAILY_COUNT_COLUMN], resource).to_numpy(),
        CUMULATIVE_COUNT: _counts(raw[config.DAILY_CUMULATIVE_COLUMN], resource).to_numpy(),
    })

    duplicated = daily[REPORT_DATE].duplicated(keep=False)
    if duplicated.any():
        dates = sorted(daily.loc[duplicated, REPORT_DATE].dt.strftime('%Y-%m-%d').unique())
        raise ShapeError(f"Duplicate report dates: {dates}", stage='load', resource=resource)

    daily = daily.sort_values(REPORT_DATE).reset_index(drop=True)

    decreasing = daily[CUMULATIVE_COUNT].diff() < 0
    if decreasing.any():
        dates = daily.loc[decreasing, REPORT_DATE].dt.strftime('%Y-%m-%d').tolist()
        logger.warning(f"Cumulative deaths decrease on {dates}; the source may have revised earlier totals")

    daily[DAY_OF_WEEK] = days_of_week(daily[REPORT_DATE])
    daily[WEEK_START] = week_starts(daily[REPORT_DATE])

    if not daily.empty:
        logger.info(f"Loaded {len(daily)} daily records from {daily[REPORT_DATE].min():%Y-%m-%d} "
                    f"to {daily[REPORT_DATE].max():%Y-%m-%d}")
    return daily[DAILY_COLUMNS]


def load_national_stats(raw: pd.DataFrame,
                        first_week_ending=config.NATIONAL_FIRST_WEEK_ENDING,
                        max_weeks: int = config.MAX_NATIONAL_WEEKS,
                        resource: str = 'ons_weekly') -> pd.DataFrame:
    """Build the weekly national statistics frame.

    Week ending dates come from row position, so the row count and, when
    present, the week number column are checked against a weekly cadence
    before any date is assigned.
    """
    _require_columns(raw, [config.NATIONAL_COVID_COLUMN], resource)

    n_weeks = len(raw)
    if not 1 <= n_weeks <= max_weeks:
        raise ShapeError(f"Expected between 1 and {max_weeks} weekly rows, found {n_weeks}",
                         stage='load', resource=resource)

    national = raw.reset_index(drop=True).rename(columns={config.NATIONAL_COVID_COLUMN: COVID_DEATHS})
    national[COVID_DEATHS] = _counts(national[COVID_DEATHS], resource)

    if config.NATIONAL_WEEK_NUMBER_COLUMN in national.columns:
        national = national.rename(columns={config.NATIONAL_WEEK_NUMBER_COLUMN: WEEK_NUMBER})
        week_numbers = _counts(national[WEEK_NUMBER], resource)
        expected = pd.Series(range(1, n_weeks + 1), dtype='int64')
        if not week_numbers.equals(expected):
            raise ShapeError(f"Week numbers are not consecutive from 1: {week_numbers.tolist()}",
                             stage='load', resource=resource)
        national[WEEK_NUMBER] = week_numbers

    national.insert(0, WEEK_ENDING, pd.to_datetime(
        [week_ending_from_index(first_week_ending, i) for i in range(n_weeks)]))

    logger.info(f"Loaded {n_weeks} weeks of national statistics ending "
                f"{national[WEEK_ENDING].iloc[-1]:%Y-%m-%d}")
    return national
