class DocumentError(Exception):
    """Base exception for all document-related errors."""


class ValidationError(DocumentError):
    """Raised when an input (file, id, page number, buffer) is malformed."""


class NotFoundError(DocumentError):
    """Raised when a document, page, or stored file does not exist."""
