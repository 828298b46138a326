"""venvkit - keeps editor tooling supplied with a working Python environment."""

__version__ = "0.1.0"
