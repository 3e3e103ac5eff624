"""Resilience – retry helpers for broker and store connections."""
