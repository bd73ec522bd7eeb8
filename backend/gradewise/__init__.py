"""Gradewise - school assessment scoring and evaluation backend."""
