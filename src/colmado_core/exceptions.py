"""Domain-specific exceptions for colmado_core.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from ColmadoError for easy catching.
"""


class ColmadoError(Exception):
    """Base exception for all colmado_core errors.

    Users can catch this exception to handle any error raised by the package.
    """

    pass


class ConfigError(ColmadoError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Required configuration is missing (e.g. the LLM API key)
    """

    pass


class DataQualityError(ColmadoError):
    """Raised when input data fails validation.

    This exception is raised when:
    - Required columns are missing from an input DataFrame
    - A sale document cannot be parsed into a SaleRecord
    - Imported history files have no usable rows
    """

    pass


class StoreError(ColmadoError):
    """Raised when the sales document store cannot be read or written.

    This exception is raised when:
    - The collection file contains invalid JSON
    - The collection file cannot be written
    """

    pass


class AIAnalysisError(ColmadoError):
    """Raised when the LLM text generation round trip fails.

    This exception is raised when:
    - The chat-completions API returns a non-2xx status
    - The response has no message content
    - The message content is not a JSON object
    """

    pass
