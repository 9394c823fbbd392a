"""Harness registry, extraction and profile application."""
