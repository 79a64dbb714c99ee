"""Monoalphabetic cipher engines."""
