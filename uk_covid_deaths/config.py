from datetime import date

USER_AGENT = 'UK-Covid-Deaths-Analysis/1.0'
REQUEST_TIMEOUT = 60

# Data sources
DATA_SOURCES = {
    # Daily deaths by date reported, 2020-present
    'daily_deaths': {
        'url': 'https://coronavirus.data.gov.uk/downloads/csv/coronavirus-deaths_latest.csv',
        'description': 'UK Government daily confirmed Covid-19 deaths by date reported'
    },
    # Weekly registered deaths, one row per week of the year
    'ons_weekly': {
        'url': 'https://www.ons.gov.uk/file?uri=/peoplepopulationandcommunity/birthsdeathsandmarriages/deaths/datasets/weeklyprovisionalfiguresondeathsregisteredinenglandandwales/2020/publishedweek2020.xlsx',
        'description': 'ONS weekly provisional deaths registered in England and Wales, 2020'
    }
}

# Vendor column names of the daily CSV
DAILY_PUBLICATION_DATE_COLUMN = 'Publication date'
DAILY_REPORT_DATE_COLUMN = 'Reporting date'
DAILY_CUMULATIVE_COLUMN = 'Cumulative deaths'
DAILY_COUNT_COLUMN = 'Daily change in deaths'

# Layout of the weekly spreadsheet
SPREADSHEET_SKIP_ROWS = 6
SPREADSHEET_DROP_TRAILING_ROWS = 2
SPREADSHEET_SHEET_NAME = 'Weekly figures 2020'
NATIONAL_WEEK_NUMBER_COLUMN = 'Week number'
NATIONAL_COVID_COLUMN = 'Deaths involving COVID-19'
NATIONAL_FIRST_WEEK_ENDING = date(2020, 1, 3)
MAX_NATIONAL_WEEKS = 53

DAYS_PER_WEEK = 7

# Share of points used for each local fit of the trend curve
LOWESS_FRAC = 0.5
MIN_SMOOTHING_POINTS = 3

DEFAULT_OUTPUT_DIR = 'output'
WEEKLY_SUMMARY_FILENAME = 'weekly_deaths.csv'
