"""Gradewise - HTTP API."""
