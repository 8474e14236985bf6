"""Seasonal football prediction league service."""
