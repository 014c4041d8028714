"""
Custom exceptions for hearth - clear, actionable error handling.

hearth only raises for configuration problems. Everything that happens on the
wire (login failures, unreachable servers, TLS trouble) belongs to pyodbc and
azure-identity, and those errors reach the caller untouched.

Exception Hierarchy:
    HearthError (base)
    └── ConfigError - Missing or invalid connection configuration

Usage Guidelines:
    - ConfigError is never transient. Retrying with the same environment
      will fail the same way, so callers should surface the message and stop.
    - The message text is meant to be read by whoever runs the deployment,
      so it lists the variables that would fix the problem.
"""


class HearthError(Exception):
    """Base exception for all hearth errors."""

    pass


class ConfigError(HearthError):
    """Raised when the connection configuration is missing or invalid."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.context = kwargs
