class OCRError(Exception):
    """Raised when OCR extraction fails."""


class OCRProviderError(OCRError):
    """Raised when the OCR provider answers with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OCRNetworkError(OCRError):
    """Raised when the OCR provider call fails due to network/infrastructure issues."""


class OCRResultError(OCRError):
    """Raised when an OCR response does not have the expected page structure."""
