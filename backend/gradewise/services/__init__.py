"""Gradewise - Business logic services."""
