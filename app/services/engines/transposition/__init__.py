"""Transposition cipher engines."""
