from typing import Optional


class RetailReadyError(Exception):
    """Base class for every error raised by the retailready core."""


class SchemaError(RetailReadyError):
    """Top-level extraction payload is malformed (e.g. no `requirements` array)."""


class InvalidRequirementError(RetailReadyError):
    """One requirement in an extraction batch is missing a mandatory field."""

    def __init__(self, index: int, field: str, message: Optional[str] = None):
        self.index = index
        self.field = field
        super().__init__(message or f"Missing or invalid {field} at requirement index {index}")


class InvalidInputError(RetailReadyError):
    """Risk assessment called without a requirement or with non-positive units."""


class UpstreamServiceError(RetailReadyError):
    """The external extraction call failed (quota, auth or transport)."""

    def __init__(self, reason: str, message: str):
        self.reason = reason
        super().__init__(message)


class UpstreamFormatError(RetailReadyError):
    """The external extraction call answered, but not with the expected JSON shape."""


class EmptyDocumentError(RetailReadyError):
    """The uploaded document has no readable text to extract from."""
