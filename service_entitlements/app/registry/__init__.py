"""
Plan registry package.

Holds the static subscription tier table: which features each tier
unlocks, and the copy shown to a user when a feature is locked. The
tables are built once at import time and are read-only afterwards.
"""
