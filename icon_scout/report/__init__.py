# File: icon_scout/report/__init__.py
"""icon_scout.report: JSON-отчёт о результате, используется CLI и тестами."""

from icon_scout.report.json_report import build_record, render_json

__all__ = ["build_record", "render_json"]
