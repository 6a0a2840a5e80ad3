"""Serialize GitHub Actions workflow runs per branch."""

__version__ = "0.3.0"

__all__ = ["__version__"]
