"""Gradewise - Core utilities."""
