"""Core package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **context**: Request context and correlation ID management
- **exceptions**: Structured exception hierarchy with error codes
- **logging**: Structured logging with Loguru
- **result_config**: The JSON result config store (eligible types + serializer)
- **shapes**: Type descriptors and runtime shape matching
- **types**: Type aliases for better code clarity
"""
