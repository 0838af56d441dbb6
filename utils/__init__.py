"""Utilities package for the unit price calculator."""
