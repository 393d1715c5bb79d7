import logging
import os
import tempfile
import zipfile
from io import StringIO

import pandas as pd
import requests
from openpyxl.utils.exceptions import InvalidFileException

from .config import REQUEST_TIMEOUT, USER_AGENT
from .errors import NetworkError, ParseError, TempFileError

logger = logging.getLogger(__name__)


def create_session() -> requests.Session:
    """Session shared by every download of a run."""
    session = requests.Session()
    session.headers.update({
        'User-Agent': USER_AGENT,
        'Accept': 'text/csv,application/vnd.openxmlformats-officedocument.spreadsheetml.sheet,*/*'
    })
    return session


def _get(url: str, session: requests.Session = None) -> requests.Response:
    session = session or create_session()
    logger.info(f"Downloading {url}")
    try:
        response = session.get(url, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NetworkError(f"Download failed: {e}", stage='fetch', resource=url) from e
    return response


def fetch_csv(url: str, session: requests.Session = None) -> pd.DataFrame:
    """Download a CSV resource and parse it into a DataFrame."""
    response = _get(url, session)

    try:
        df = pd.read_csv(StringIO(response.text))
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ParseError(f"Malformed CSV content: {e}", stage='fetch', resource=url) from e

    logger.info(f"Downloaded {len(df)} rows with columns {df.columns.tolist()}")
    return df


def fetch_binary_spreadsheet(url: str, skip_rows: int, drop_trailing_rows: int, sheet_name=0,
                             session: requests.Session = None) -> pd.DataFrame:
    """Download a spreadsheet and return its data rows.

    The workbook is written to a temporary file before it is opened; the
    file is removed whether or not it could be read. ``skip_rows`` preamble
    rows are dropped above the header row and ``drop_trailing_rows`` footer
    rows below the data. Only the worksheet ``sheet_name`` is read.
    """
    response = _get(url, session)

    try:
        handle = tempfile.NamedTemporaryFile(suffix='.xlsx', delete=False)
    except OSError as e:
        raise TempFileError(f"Could not create temporary file: {e}", stage='fetch', resource=url) from e

    try:
        try:
            with handle:
                handle.write(response.content)
        except OSError as e:
            raise TempFileError(f"Could not write {handle.name}: {e}", stage='fetch', resource=url) from e

        try:
            df = pd.read_excel(handle.name, skiprows=skip_rows, skipfooter=drop_trailing_rows,
                               sheet_name=sheet_name, engine='openpyxl')
        # malformed sheet XML surfaces as a SyntaxError subclass from xml.etree or lxml
        except (ValueError, KeyError, SyntaxError, zipfile.BadZipFile, InvalidFileException) as e:
            raise ParseError(f"Unreadable spreadsheet: {e}", stage='fetch', resource=url) from e
    finally:
        os.remove(handle.name)

    logger.info(f"Read {len(df)} spreadsheet rows with columns {df.columns.tolist()}")
    return df
