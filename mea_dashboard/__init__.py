"""COBIT 5 MEA maturity self-assessment dashboard."""

__version__ = "0.1.0"
