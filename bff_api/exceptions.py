"""Domain-specific exceptions for the BFF server."""


class BFFError(Exception):
    """Base exception for all BFF server errors."""


class ConfigurationError(BFFError):
    """Error related to configuration issues."""


class CacheError(BFFError):
    """Error related to cache backend operations."""


class CacheConnectionError(CacheError):
    """Cache backend could not be reached."""


class StartupError(BFFError):
    """Application could not finish starting up."""


class GraphQLExecutionError(BFFError):
    """Unexpected error raised while executing a GraphQL operation."""


class RequestTimeoutError(BFFError):
    """Request did not complete within the configured timeout."""


class BadRequestError(BFFError):
    """Request could not be understood."""
