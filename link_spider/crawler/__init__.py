"""Crawler core: visited tracking, resource store, engine and default collaborators."""
