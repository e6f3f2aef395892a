from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile

from app.api.responses import success
from app.documents.exceptions import ValidationError
from app.documents.models import UploadedFile
from app.documents.orchestrator import DocumentOrchestrator

router = APIRouter()


def get_orchestrator(request: Request) -> DocumentOrchestrator:
    return request.app.state.orchestrator


def _parse_int(value: str, message: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(message) from exc


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/documents/upload")
def upload_document(
    file: UploadFile | None = File(default=None),
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    uploaded = None
    if file is not None:
        uploaded = UploadedFile(
            name=file.filename or "",
            content_type=file.content_type or "",
            data=file.file.read(),
        )
    result = orchestrator.upload_document(uploaded)
    return success(result.to_dict())


@router.get("/documents")
def list_documents(
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success([document.to_dict() for document in orchestrator.get_documents()])


@router.get("/documents/{document_id}")
def get_document(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.get_document(document_id).to_dict())


@router.delete("/documents/{document_id}")
def delete_document(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    deleted = orchestrator.delete_document(document_id)
    return success({"documentId": document_id, "filesDeleted": deleted})


@router.get("/documents/{document_id}/ocr")
def get_document_ocr(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.get_document_ocr(document_id).to_dict())


@router.get("/documents/{document_id}/ocr/status")
def get_ocr_status(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.get_ocr_status(document_id).to_dict())


@router.post("/documents/{document_id}/ocr/retry")
def retry_ocr(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.retry_ocr_processing(document_id).to_dict())


@router.get("/documents/{document_id}/text")
def get_document_text(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> Response:
    text = orchestrator.get_document_extracted_text(document_id)
    return Response(content=text, media_type="text/markdown")


@router.get("/documents/{document_id}/pages/{page_number}")
def get_document_page(
    document_id: str,
    page_number: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> Response:
    number = _parse_int(page_number, "Page number must be an integer")
    content = orchestrator.get_document_page(document_id, number)
    return Response(content=content, media_type="text/markdown")


@router.get("/documents/{document_id}/images")
def get_document_images(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    images = orchestrator.get_document_images(document_id)
    return success([image.to_dict() for image in images])


@router.get("/documents/{document_id}/images/{page_number}/{image_index}")
def get_document_image(
    document_id: str,
    page_number: str,
    image_index: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    page = _parse_int(page_number, "Page number must be an integer")
    index = _parse_int(image_index, "Image index must be a non-negative integer")
    data = orchestrator.get_document_image(document_id, page, index)
    return success({"pageNumber": page, "imageIndex": index, "base64Data": data})


@router.get("/documents/{document_id}/file")
def get_document_file(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> Response:
    document, stored = orchestrator.get_original_file(document_id)
    return Response(
        content=stored.data,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"inline; filename*=UTF-8''{quote(document.name)}",
        },
    )


@router.get("/documents/{document_id}/metadata")
def get_pdf_metadata(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.get_pdf_metadata(document_id))


@router.get("/documents/{document_id}/search")
def search_document(
    document_id: str,
    q: str | None = None,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    matches = orchestrator.search_document(document_id, q)
    return success([match.to_dict() for match in matches])


@router.get("/documents/{document_id}/summary")
def get_document_summary(
    document_id: str,
    orchestrator: DocumentOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    return success(orchestrator.get_document_summary(document_id).to_dict())
