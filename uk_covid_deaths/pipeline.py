import logging
import os
import sys

import pandas as pd

from . import config
from .aggregate import DAY_COUNT, TOTAL_DEATHS, aggregate_by_week, partial_weeks, with_week_over_week_change
from .charts import (render_daily_series, render_excluded_weeks, render_national_stats,
                     render_weekly_change, render_weekly_totals)
from .errors import DeathsAnalysisError
from .fetcher import create_session, fetch_binary_spreadsheet, fetch_csv
from .loaders import DAILY_COUNT, WEEK_START, load_daily_deaths, load_national_stats

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class UKCovidDeathsAnalysis:
    """
    Builds the UK Covid-19 deaths charts from two published sources:
    1. Daily deaths by date reported (UK Government CSV)
    2. Weekly registered deaths (ONS spreadsheet)

    Daily counts are summed into Monday-anchored weeks, compared week on
    week and plotted with trend curves. Partial weeks are reported, not
    plotted.
    """

    def __init__(self, session=None, data_sources: dict = None):
        self.session = session or create_session()
        self.data_sources = data_sources or config.DATA_SOURCES

    def _source_url(self, source_key: str) -> str:
        source = self.data_sources[source_key]
        logger.info(f"Fetching {source['description']}...")
        return source['url']

    def load_daily(self) -> pd.DataFrame:
        """Download and type the daily deaths table."""
        raw = fetch_csv(self._source_url('daily_deaths'), session=self.session)
        return load_daily_deaths(raw, resource='daily_deaths')

    def load_weekly(self, daily: pd.DataFrame) -> pd.DataFrame:
        """Weekly totals with week-over-week change."""
        return with_week_over_week_change(aggregate_by_week(daily))

    def load_national(self) -> pd.DataFrame:
        """Download and type the ONS weekly table."""
        raw = fetch_binary_spreadsheet(self._source_url('ons_weekly'),
                                       skip_rows=config.SPREADSHEET_SKIP_ROWS,
                                       drop_trailing_rows=config.SPREADSHEET_DROP_TRAILING_ROWS,
                                       sheet_name=config.SPREADSHEET_SHEET_NAME,
                                       session=self.session)
        return load_national_stats(raw, resource='ons_weekly')

    def build_charts(self, daily: pd.DataFrame, weeks: pd.DataFrame, national: pd.DataFrame) -> dict:
        return {
            'daily_deaths': render_daily_series(daily),
            'weekly_deaths': render_weekly_totals(weeks),
            'weekly_change': render_weekly_change(weeks),
            'ons_weekly_deaths': render_national_stats(national),
            'excluded_weeks': render_excluded_weeks(weeks),
        }

    def report_excluded_weeks(self, weeks: pd.DataFrame) -> pd.DataFrame:
        """Log and print the partial weeks left out of the weekly charts."""
        excluded = partial_weeks(weeks)
        if excluded.empty:
            logger.info("All weeks are complete; nothing excluded from weekly charts")
            return excluded

        logger.warning(f"{len(excluded)} partial week(s) excluded from weekly charts")
        print("\nPartial weeks excluded from weekly charts:")
        print(excluded[[WEEK_START, DAY_COUNT, TOTAL_DEATHS]].to_string(index=False))
        return excluded

    def save_charts(self, figures: dict, output_dir: str) -> list:
        os.makedirs(output_dir, exist_ok=True)
        paths = []
        for name, fig in figures.items():
            filepath = os.path.join(output_dir, f"{name}.html")
            try:
                fig.write_html(filepath, include_plotlyjs='cdn')
            except OSError as e:
                logger.error(f"Error saving chart {filepath}: {e}")
                raise
            paths.append(filepath)
            logger.info(f"Saved chart: {filepath}")
        return paths

    def save_weekly_summary(self, weeks: pd.DataFrame, output_dir: str) -> str:
        os.makedirs(output_dir, exist_ok=True)
        filepath = os.path.join(output_dir, config.WEEKLY_SUMMARY_FILENAME)
        try:
            weeks.to_csv(filepath, index=False, date_format='%Y-%m-%d')
        except OSError as e:
            logger.error(f"Error saving file: {e}")
            raise
        logger.info(f"Saved weekly summary: {filepath} ({len(weeks)} weeks)")
        return filepath

    def run(self, output_dir: str = config.DEFAULT_OUTPUT_DIR) -> dict:
        """Run every stage in order; the first failure aborts the run."""
        print("=" * 70)
        print("UK COVID-19 DEATHS ANALYSIS")
        print("=" * 70)

        print("\nStep 1: Downloading daily deaths...")
        daily = self.load_daily()

        print("\nStep 2: Aggregating deaths by week...")
        weeks = self.load_weekly(daily)
        self.report_excluded_weeks(weeks)

        print("\nStep 3: Downloading ONS weekly registrations...")
        national = self.load_national()

        print("\nStep 4: Rendering charts...")
        figures = self.build_charts(daily, weeks, national)
        chart_paths = self.save_charts(figures, output_dir)

        print("\nStep 5: Saving weekly summary...")
        summary_path = self.save_weekly_summary(weeks, output_dir)

        print("\n" + "=" * 70)
        print("SUMMARY")
        print("=" * 70)
        print(f"   Daily records: {len(daily):,}")
        print(f"   Weeks: {len(weeks)} ({len(weeks) - len(partial_weeks(weeks))} complete)")
        print(f"   Total deaths (daily source): {int(daily[DAILY_COUNT].sum()):,}")
        print(f"   ONS weeks: {len(national)}")
        print(f"   Output directory: {output_dir}")

        return {'charts': chart_paths, 'weekly_summary': summary_path}


def main():
    """Run the UK Covid-19 deaths analysis."""
    try:
        analysis = UKCovidDeathsAnalysis()
        analysis.run()

    except KeyboardInterrupt:
        print("\n\nProcess interrupted by user.")
    except DeathsAnalysisError as e:
        print(f"\n\nAnalysis stopped: {e}")
        logger.exception("Full error details:")
        sys.exit(1)


if __name__ == "__main__":
    main()
