class DeathsAnalysisError(Exception):
    """Base error for every stage of the analysis.

    ``stage`` names the pipeline step that failed and ``resource`` the
    source or file it was working on, so the operator can tell which
    download or table broke the run.
    """

    def __init__(self, message: str, stage: str = None, resource: str = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.resource = resource

    def __str__(self):
        context = [part for part in (self.stage, self.resource) if part]
        if context:
            return f"[{' / '.join(context)}] {self.message}"
        return self.message


class NetworkError(DeathsAnalysisError):
    """Resource unreachable or answered with a non-success status."""


class ParseError(DeathsAnalysisError):
    """A date string or downloaded file does not have the expected format."""


class TempFileError(DeathsAnalysisError, OSError):
    """The temporary spreadsheet file could not be created or written."""


class ShapeError(DeathsAnalysisError):
    """A fetched table is missing columns or has implausible rows."""
