"""PropFolio: property portfolio store, theme engine and session gate."""

__version__ = "0.1.0"
