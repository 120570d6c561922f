# site_checker/parser/__init__.py
"""Collaborators that judge documents: markup parsers, tidy, XML schemas."""
