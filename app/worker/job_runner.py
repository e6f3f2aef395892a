from app.logging.logger import Log
from app.processor.processor import Processor


class OCRJobRunner:
    """Run one OCR job and catch exceptions.

    The processor's failed step has already recorded the error on the
    document by the time an exception reaches here.
    """

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    def run(self, document_id: str) -> bool:
        """Execute OCR for a document. Returns True on success."""
        Log.info("Running OCR job", document_id=document_id)
        try:
            self._processor.process(document_id)
        except Exception as exc:
            Log.error(
                "OCR job failed",
                document_id=document_id,
                error_type=exc.__class__.__name__,
                error=exc,
            )
            return False
        Log.info("OCR job completed", document_id=document_id)
        return True
