"""Shared utilities: logging, console, paths and environment config."""
