# site_checker/crawler/__init__.py
"""Crawl engine: URI handling, fetching, dispatch and traversal."""
