from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PageDimensions:
    dpi: int
    width: int
    height: int

    def to_dict(self) -> dict[str, int]:
        return {"dpi": self.dpi, "height": self.height, "width": self.width}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PageDimensions":
        return cls(
            dpi=int(data.get("dpi", 0)),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
        )


@dataclass(frozen=True)
class BoundingBox:
    """Image location on its source page, in pixel coordinates."""

    top_left_x: float
    top_left_y: float
    bottom_right_x: float
    bottom_right_y: float

    def to_dict(self) -> dict[str, float]:
        return {
            "topLeftX": self.top_left_x,
            "topLeftY": self.top_left_y,
            "bottomRightX": self.bottom_right_x,
            "bottomRightY": self.bottom_right_y,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoundingBox":
        return cls(
            top_left_x=data["topLeftX"],
            top_left_y=data["topLeftY"],
            bottom_right_x=data["bottomRightX"],
            bottom_right_y=data["bottomRightY"],
        )


@dataclass
class ProcessedOCRPage:
    page_number: int
    markdown: str
    images: list[dict[str, Any]] = field(default_factory=list)
    dimensions: PageDimensions | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "markdown": self.markdown,
            "images": self.images,
            "dimensions": self.dimensions.to_dict() if self.dimensions else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProcessedOCRPage":
        dimensions = data.get("dimensions")
        return cls(
            page_number=data["pageNumber"],
            markdown=data.get("markdown", ""),
            images=list(data.get("images") or []),
            dimensions=PageDimensions.from_dict(dimensions) if dimensions else None,
        )


@dataclass
class ProcessedImage:
    id: str
    page_number: int
    image_index: int
    bounding_box: BoundingBox
    base64_data: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pageNumber": self.page_number,
            "imageIndex": self.image_index,
            "boundingBox": self.bounding_box.to_dict(),
            "base64Data": self.base64_data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProcessedImage":
        return cls(
            id=data["id"],
            page_number=data["pageNumber"],
            image_index=data["imageIndex"],
            bounding_box=BoundingBox.from_dict(data["boundingBox"]),
            base64_data=data.get("base64Data", ""),
        )


@dataclass
class ProcessedOCRResult:
    """Normalized OCR output for one document.

    page_offsets[i] is the offset in full_text where page i + 1 starts.
    """

    total_pages: int
    full_text: str
    pages: list[ProcessedOCRPage]
    images: list[ProcessedImage]
    processed_at: datetime
    page_offsets: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "fullText": self.full_text,
            "pages": [page.to_dict() for page in self.pages],
            "images": [image.to_dict() for image in self.images],
            "processedAt": self.processed_at.isoformat(),
            "pageOffsets": self.page_offsets,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProcessedOCRResult":
        return cls(
            total_pages=data["totalPages"],
            full_text=data.get("fullText", ""),
            pages=[ProcessedOCRPage.from_dict(page) for page in data.get("pages", [])],
            images=[ProcessedImage.from_dict(image) for image in data.get("images", [])],
            processed_at=datetime.fromisoformat(data["processedAt"]),
            page_offsets=list(data.get("pageOffsets") or []),
        )
