"""SpendWise personal finance client."""

__version__ = "1.0.0"
