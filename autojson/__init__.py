"""AutoJSON - automatic JSON bodies for FastAPI route handlers.

Route handlers return plain Python values; AutoJSON decides per request
whether the value is eligible for JSON serialization and, if so, turns it
into a JSON body with the ``application/json`` content type. Values it does
not recognize are handed to the next body converter in the chain.

Architecture Overview:
- **API Layer**: FastAPI application factory, body-conversion chain,
  result interceptor, middleware and error handling
- **Core Layer**: Configuration, the JSON result config store, shape
  matching, logging, exceptions and request context
"""
