# icon_scout/__init__.py
"""
IconScout package initializer.
The command line entry point lives in :mod:`icon_scout.cli`.
"""
__version__ = "0.1.0"
