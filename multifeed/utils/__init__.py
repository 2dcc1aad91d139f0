"""Shared helpers for identifiers, dates, CDATA and writers."""
