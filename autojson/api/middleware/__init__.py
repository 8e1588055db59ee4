"""Middleware and exception handlers applied to every request."""
