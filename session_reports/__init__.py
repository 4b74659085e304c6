from __future__ import annotations  # Session report package exports

from .pdf import ReportRenderer, behavior_flag_labels, render_report_pdf

__all__ = ["ReportRenderer", "behavior_flag_labels", "render_report_pdf"]
