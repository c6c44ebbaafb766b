# File: icon_scout/parser/__init__.py
"""HTML parsing for IconScout."""

from icon_scout.parser.icon_extractor import IconReference, extract_icon

__all__ = ["IconReference", "extract_icon"]
