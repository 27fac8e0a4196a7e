"""Domain-specific HTTP errors."""

from werkzeug.exceptions import BadRequest, InternalServerError


class InvalidOperation(BadRequest):
    """A request that is well-formed but violates a domain rule."""

    description = "Invalid operation."


class ConfigurationError(InternalServerError):
    """The deployment is missing something the operation depends on."""

    description = "Server misconfigured."
