"""Core application constants."""

# Content types
APPLICATION_JSON = "application/json"

# Headers
CONTENT_TYPE_HEADER = "Content-Type"

# Security and redaction
REDACTED = "[REDACTED]"
