"""Report output helpers."""

from .markdown import normalize_report

__all__ = ["normalize_report"]
