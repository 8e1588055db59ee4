"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Media type for bodies no body converter has typed
DEFAULT_MEDIA_TYPE = "text/html"
