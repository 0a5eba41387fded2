"""Shared utilities: logging, settings, notices."""
