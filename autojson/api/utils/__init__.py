"""API utilities: JSON response class for framework-built responses."""
