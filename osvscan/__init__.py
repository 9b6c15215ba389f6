"""Load OSV vulnerability databases, read detector configs and report results."""

__version__ = "0.1.0"