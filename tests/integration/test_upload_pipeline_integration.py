import time
from typing import Any

import pytest
from fastapi.testclient import TestClient


def _upload(client: TestClient, pdf_bytes: bytes, name: str = "report.pdf") -> dict[str, Any]:
    response = client.post(
        "/api/documents/upload",
        files={"file": (name, pdf_bytes, "application/pdf")},
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


def _wait_for_terminal_status(client: TestClient, status_url: str, timeout: float = 10.0) -> dict[str, Any]:
    deadline = time.monotonic() + timeout
    while True:
        status = client.get(status_url).json()["data"]
        if status["status"] in ("completed", "failed") or time.monotonic() > deadline:
            return status
        time.sleep(0.05)


@pytest.mark.integration
class TestInlinePipeline:
    def test_upload_extracts_every_page(
        self,
        inline_client: TestClient,
        multi_page_pdf_bytes: bytes,
    ) -> None:
        data = _upload(inline_client, multi_page_pdf_bytes)

        assert data["pageCount"] == 2
        assert data["status"] == "completed"
        text = inline_client.get(data["textUrl"]).text
        assert "Page one content" in text
        assert "Page two content" in text
        assert "\n\n---\n\n" in text

    def test_page_and_search(self, inline_client: TestClient, multi_page_pdf_bytes: bytes) -> None:
        document_id = _upload(inline_client, multi_page_pdf_bytes)["documentId"]

        page = inline_client.get(f"/api/documents/{document_id}/pages/2")
        matches = inline_client.get(
            f"/api/documents/{document_id}/search",
            params={"q": "page TWO"},
        ).json()["data"]

        assert "Page two content" in page.text
        assert len(matches) == 1
        assert matches[0]["pageNumber"] == 2

    def test_pdf_metadata(self, inline_client: TestClient, sample_pdf_bytes: bytes) -> None:
        document_id = _upload(inline_client, sample_pdf_bytes)["documentId"]
        data = inline_client.get(f"/api/documents/{document_id}/metadata").json()["data"]
        assert data["pageCount"] == 1

    def test_blank_pdf_has_no_text_or_images(
        self,
        inline_client: TestClient,
        empty_pdf_bytes: bytes,
    ) -> None:
        document_id = _upload(inline_client, empty_pdf_bytes)["documentId"]

        summary = inline_client.get(f"/api/documents/{document_id}/summary").json()["data"]

        assert summary["hasText"] is False
        assert summary["hasImages"] is False
        assert inline_client.get(f"/api/documents/{document_id}/images").status_code == 404

    def test_retry_replaces_result(self, inline_client: TestClient, sample_pdf_bytes: bytes) -> None:
        document_id = _upload(inline_client, sample_pdf_bytes)["documentId"]
        first = inline_client.get(f"/api/documents/{document_id}/ocr").json()["data"]

        retried = inline_client.post(f"/api/documents/{document_id}/ocr/retry").json()["data"]
        second = inline_client.get(f"/api/documents/{document_id}/ocr").json()["data"]

        assert retried["status"] == "completed"
        assert retried["version"] > 1
        assert second["fullText"] == first["fullText"]

    def test_delete_removes_document(self, inline_client: TestClient, sample_pdf_bytes: bytes) -> None:
        document_id = _upload(inline_client, sample_pdf_bytes)["documentId"]

        assert inline_client.delete(f"/api/documents/{document_id}").status_code == 200

        assert inline_client.get(f"/api/documents/{document_id}").status_code == 404
        assert inline_client.get(f"/api/documents/{document_id}/file").status_code == 404
        assert inline_client.get("/api/documents").json()["data"] == []


@pytest.mark.integration
class TestBackgroundPipeline:
    def test_status_becomes_completed(
        self,
        background_client: TestClient,
        sample_pdf_bytes: bytes,
    ) -> None:
        data = _upload(background_client, sample_pdf_bytes)

        assert data["status"] in ("not_started", "processing", "completed")
        status = _wait_for_terminal_status(background_client, data["statusUrl"])

        assert status["status"] == "completed"
        assert status["totalPages"] == 1

    def test_many_uploads_are_independent(
        self,
        background_client: TestClient,
        sample_pdf_bytes: bytes,
        multi_page_pdf_bytes: bytes,
    ) -> None:
        uploads = [
            _upload(background_client, pdf, name=f"doc-{n}.pdf")
            for n, pdf in enumerate([sample_pdf_bytes, multi_page_pdf_bytes] * 3)
        ]

        statuses = [_wait_for_terminal_status(background_client, data["statusUrl"]) for data in uploads]

        assert [status["totalPages"] for status in statuses] == [1, 2] * 3
        assert len(background_client.get("/api/documents").json()["data"]) == 6
