import io
from datetime import date, timedelta
from itertools import accumulate

import pandas as pd
import pytest
import requests
from openpyxl import Workbook

from uk_covid_deaths import config
from uk_covid_deaths.dates import format_day_month_year

DAILY_URL = 'https://example.test/deaths.csv'
WEEKLY_URL = 'https://example.test/weekly.xlsx'

# 05-Mar-20 (Thu) to 22-Mar-20 (Sun): a 4-day partial week then two full weeks
FIRST_REPORT_DATE = date(2020, 3, 5)
DAILY_COUNTS = [1, 0, 1, 1,
                50, 40, 45, 48, 52, 46, 50,
                60, 70, 55, 80, 75, 65, 70]

ONS_COVID_DEATHS = [0] * 11 + [5, 103, 539, 3475, 6213]


class FakeResponse:
    def __init__(self, content=b'', status_code=200, url=''):
        self.content = content
        self.status_code = status_code
        self.url = url

    @property
    def text(self):
        return self.content.decode('utf-8')

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeSession:
    """Serves canned responses by URL and records requests."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


def daily_csv_text(counts=DAILY_COUNTS, first=FIRST_REPORT_DATE):
    dates = [format_day_month_year(first + timedelta(days=i)) for i in range(len(counts))]
    raw = pd.DataFrame({
        config.DAILY_PUBLICATION_DATE_COLUMN: dates,
        config.DAILY_REPORT_DATE_COLUMN: dates,
        config.DAILY_CUMULATIVE_COLUMN: list(accumulate(counts)),
        config.DAILY_COUNT_COLUMN: counts,
    })
    return raw.to_csv(index=False)


def spreadsheet_bytes(covid_deaths=ONS_COVID_DEATHS, week_numbers=None):
    week_numbers = week_numbers or list(range(1, len(covid_deaths) + 1))
    wb = Workbook()
    contents = wb.active
    contents.title = 'Contents'
    contents.append(['Contents'])
    contents.append(['Weekly figures 2020', 'Deaths registered weekly in England and Wales'])
    ws = wb.create_sheet(config.SPREADSHEET_SHEET_NAME)
    for line in ['Weekly provisional figures on deaths registered in England and Wales',
                 'Contents', 'Week ending dates are Fridays', 'Figures are provisional',
                 'Source: Office for National Statistics', 'Deaths by week of registration']:
        ws.append([line])
    ws.append(['Week number', 'Total deaths, all ages', config.NATIONAL_COVID_COLUMN,
               'Five-year average'])
    for week_number, covid in zip(week_numbers, covid_deaths):
        ws.append([week_number, 10000 + covid, covid, 10500])
    ws.append(['Source: Office for National Statistics'])
    ws.append(['Figures for 2020 are provisional'])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def daily_raw():
    return pd.read_csv(io.StringIO(daily_csv_text()))


@pytest.fixture
def fake_session():
    return FakeSession({
        DAILY_URL: FakeResponse(daily_csv_text().encode('utf-8'), url=DAILY_URL),
        WEEKLY_URL: FakeResponse(spreadsheet_bytes(), url=WEEKLY_URL),
    })


@pytest.fixture
def data_sources():
    return {
        'daily_deaths': {'url': DAILY_URL, 'description': 'test daily deaths'},
        'ons_weekly': {'url': WEEKLY_URL, 'description': 'test weekly registrations'},
    }
