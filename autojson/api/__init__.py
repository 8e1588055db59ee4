"""HTTP API layer built on FastAPI.

Key components:
- **chain**: Ordered body-conversion chain and per-request response context
- **interceptor**: Serializes eligible handler results as JSON
- **routing**: Plugin installation and the route class using the chain
- **main**: Application factory and lifecycle management
- **middleware**: Correlation IDs and centralized error handling
- **schemas**: Standardized error response format
- **utils**: JSON response class for framework-built responses
"""
