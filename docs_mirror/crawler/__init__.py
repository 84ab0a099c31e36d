# docs_mirror/crawler/__init__.py
"""Sitemap walking, fetching and the download worker pool."""
