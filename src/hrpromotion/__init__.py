"""Promotion eligibility scoring and ranking engine."""

__version__ = "0.1.0"

ALGORITHM_VERSION = "2.0"

__all__ = ["__version__", "ALGORITHM_VERSION"]
