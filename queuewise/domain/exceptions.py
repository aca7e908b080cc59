"""
Domain-specific exception hierarchy for the queuewise application.

The availability engine itself never raises for bad input; these errors
belong to the layers that load data and configuration around it.
"""


class QueueWiseError(Exception):
    """Base class for all application-level errors."""


class DataStoreError(QueueWiseError):
    """Raised when booking data cannot be loaded or parsed."""


class RecordNotFoundError(QueueWiseError):
    """Raised when a company, service or provider id is unknown to the store."""
