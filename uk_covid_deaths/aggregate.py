import logging

import pandas as pd

from .config import DAYS_PER_WEEK
from .dates import week_starts
from .errors import ShapeError
from .loaders import DAILY_COUNT, REPORT_DATE, WEEK_START

logger = logging.getLogger(__name__)

TOTAL_DEATHS = 'total_deaths'
DAY_COUNT = 'day_count'
PRIOR_WEEK_TOTAL = 'prior_week_total'
CHANGE = 'change'


def aggregate_by_week(daily: pd.DataFrame) -> pd.DataFrame:
    """Sum daily deaths into Monday-anchored weeks.

    ``day_count`` is the number of daily records behind each total; a week
    with fewer than seven is partial. Duplicate report dates are rejected
    rather than summed.
    """
    duplicated = daily[REPORT_DATE].duplicated(keep=False)
    if duplicated.any():
        dates = sorted(daily.loc[duplicated, REPORT_DATE].dt.strftime('%Y-%m-%d').unique())
        raise ShapeError(f"Duplicate report dates: {dates}", stage='aggregate')

    if daily.empty:
        return pd.DataFrame({
            WEEK_START: pd.Series(dtype='datetime64[ns]'),
            TOTAL_DEATHS: pd.Series(dtype='int64'),
            DAY_COUNT: pd.Series(dtype='int64'),
        })

    weekly = (daily[[REPORT_DATE, DAILY_COUNT]]
              .assign(**{WEEK_START: week_starts(daily[REPORT_DATE])})
              .groupby(WEEK_START, sort=True)
              .agg(**{TOTAL_DEATHS: (DAILY_COUNT, 'sum'), DAY_COUNT: (DAILY_COUNT, 'size')})
              .reset_index())
    weekly[TOTAL_DEATHS] = weekly[TOTAL_DEATHS].astype('int64')
    weekly[DAY_COUNT] = weekly[DAY_COUNT].astype('int64')

    logger.info(f"Aggregated {len(daily)} daily records into {len(weekly)} weeks")
    return weekly


def with_week_over_week_change(weeks: pd.DataFrame) -> pd.DataFrame:
    """Add ``prior_week_total`` and ``change`` to a chronologically sorted frame.

    The first week has no predecessor, so both columns hold ``pd.NA`` there.
    """
    out = weeks.copy()
    totals = out[TOTAL_DEATHS].astype('Int64')
    out[PRIOR_WEEK_TOTAL] = totals.shift(1)
    out[CHANGE] = totals - out[PRIOR_WEEK_TOTAL]
    return out


def complete_weeks(weeks: pd.DataFrame) -> pd.DataFrame:
    return weeks[weeks[DAY_COUNT] == DAYS_PER_WEEK].reset_index(drop=True)


def partial_weeks(weeks: pd.DataFrame) -> pd.DataFrame:
    """Weeks with fewer (or more) than seven contributing days."""
    return weeks[weeks[DAY_COUNT] != DAYS_PER_WEEK].reset_index(drop=True)
