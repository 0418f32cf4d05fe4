"""Building blocks of a server monitoring dashboard."""

__version__ = "0.1.0"