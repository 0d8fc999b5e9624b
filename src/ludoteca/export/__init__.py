"""Report export."""

from .reports import ReportGenerator

__all__ = ["ReportGenerator"]
