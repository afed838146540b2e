"""Behavioral challenge and rewards engine."""
