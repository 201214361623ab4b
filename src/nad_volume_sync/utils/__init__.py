"""Utilities: volume scaling."""
