from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.documents.models import Document
from app.ocr.models import ProcessedOCRResult


@dataclass(slots=True)
class PipelineContext:
    document_id: str
    document: Document | None = None
    raw_bytes: bytes = b""
    raw_result: dict[str, Any] = field(default_factory=dict)
    result: ProcessedOCRResult | None = None
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
