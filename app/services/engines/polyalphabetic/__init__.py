"""Polyalphabetic cipher engines."""
