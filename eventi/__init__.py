"""Eventi Campania: a browsable catalog of local events backed by a JSON-file store."""

__version__ = "1.0.0"
