"""Pydantic schemas for API responses."""
