"""Shared plumbing: logging, config, errors and common types."""
