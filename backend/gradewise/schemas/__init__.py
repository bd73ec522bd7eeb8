"""Gradewise - Pydantic schemas."""
