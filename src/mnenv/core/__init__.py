"""Shared constants for mnenv."""
