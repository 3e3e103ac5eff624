"""Kernel – errors, values, messaging primitives and ports."""
