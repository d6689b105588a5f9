"""Bundled data files (catalog, theme)."""
