# File: icon_scout/crawler/__init__.py
"""HTTP retrieval for IconScout."""

from icon_scout.crawler.fetcher import Fetcher, open_session

__all__ = ["Fetcher", "open_session"]
