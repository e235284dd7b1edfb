"""Build-output size reporting and page load metrics collection."""

__version__ = "0.1.0"
