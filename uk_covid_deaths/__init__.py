"""Download, aggregate and chart published UK Covid-19 death counts."""

__version__ = "1.0.0"
