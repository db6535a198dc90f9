"""Adapters implementing the klangreise ports."""
