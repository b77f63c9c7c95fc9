"""Integration tests for the clearance HTTP API

Tests cover:
- Student dashboard and certificate readiness
- Multipart upload, file view/download, withdrawal
- ID card hand-in notification
- Administrator queues, status updates and the blob sweep
- Error body shape for illegal transitions and rejected uploads
- Health endpoint
"""

import pytest
from fastapi.testclient import TestClient

from conftest import make_pdf
from models.student import Student


pytestmark = pytest.mark.integration

MATRIC = "eng/2020/001"
MiB = 1024 * 1024


def upload(test_client: TestClient, doc_type: str = "certificate_payment_receipt", data: bytes = None,
           filename: str = "receipt.pdf", content_type: str = "application/pdf", matric: str = MATRIC):
    return test_client.post(
        f"/api/v1/documents/{doc_type}/{matric}",
        files={"file": (filename, data if data is not None else make_pdf(4096), content_type)},
    )


def update_status(test_client: TestClient, doc_type: str, new_status: str, matric: str = MATRIC):
    return test_client.post(
        "/api/v1/admin/update-status",
        json={"matric": matric, "doc_type": doc_type, "new_status": new_status},
    )


class TestDashboard:

    def test_first_visit_creates_pending_records(self, student_client: TestClient):
        response = student_client.get(f"/api/v1/clearance/{MATRIC}")

        assert response.status_code == 200
        data = response.json()
        assert data["matric"] == MATRIC
        assert data["payment_confirmed"] is True
        assert data["certificate_ready"] is False
        documents = {d["doc_type"]: d for d in data["documents"]}
        assert set(documents) == {
            "statement_of_result",
            "school_fees_receipt",
            "clearance_form",
            "certificate_payment_receipt",
            "id_card",
        }
        assert all(d["status"] == "pending" for d in documents.values())
        assert documents["id_card"]["allowed_actions"] == ["notify_admin", "admin_mark_submitted"]

    def test_status_endpoint(self, student_client: TestClient, certificate_ready):
        response = student_client.get(f"/api/v1/status/{MATRIC}")

        assert response.status_code == 200
        assert response.json() == {"is_ready": True}

    def test_other_student_forbidden(self, other_student_client: TestClient, student: Student):
        response = other_student_client.get(f"/api/v1/clearance/{MATRIC}")

        assert response.status_code == 403
        assert response.json()["error"] == "FORBIDDEN"

    def test_unknown_matric(self, admin_client: TestClient):
        response = admin_client.get("/api/v1/clearance/eng/1999/404")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"


class TestUpload:

    def test_upload_receipt(self, student_client: TestClient):
        response = upload(student_client, data=make_pdf(2 * MiB))

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "uploaded"
        assert data["filename"].startswith("eng_2020_001/certificate_payment_receipt/")
        assert data["original_filename"] == "receipt.pdf"
        assert data["mime_type"] == "application/pdf"

    def test_oversized_upload(self, student_client: TestClient, blob_store):
        response = upload(student_client, data=make_pdf(11 * MiB))

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "FILE_TOO_LARGE"
        assert body["max_size_bytes"] == 10 * MiB
        assert blob_store.list_files() == []

    def test_unsupported_type(self, student_client: TestClient):
        response = upload(student_client, data=b"PK\x03\x04", filename="receipt.docx",
                          content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document")

        assert response.status_code == 400
        assert response.json()["error"] == "UNSUPPORTED_FILE_TYPE"

    def test_id_card_upload_conflict(self, student_client: TestClient):
        response = upload(student_client, doc_type="id_card", filename="card.png", content_type="image/png",
                          data=b"\x89PNG\r\n\x1a\n" + b"0" * 100)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "ILLEGAL_TRANSITION"
        assert body["current_status"] == "pending"
        assert body["action"] == "upload"
        assert body["doc_type"] == "id_card"

    def test_unknown_document_type(self, student_client: TestClient):
        response = upload(student_client, doc_type="passport")

        assert response.status_code == 422

    def test_admin_cannot_upload(self, admin_client: TestClient, student: Student):
        response = upload(admin_client)

        assert response.status_code == 403


class TestDocumentFile:

    def test_view_inline(self, student_client: TestClient):
        data = make_pdf(8192)
        upload(student_client, data=data, filename="my receipt.pdf")

        response = student_client.get(f"/api/v1/documents/certificate_payment_receipt/{MATRIC}/file")

        assert response.status_code == 200
        assert response.content == data
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == "inline; filename*=UTF-8''my_receipt.pdf"

    def test_download_attachment(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client)

        response = admin_client.get(
            f"/api/v1/documents/certificate_payment_receipt/{MATRIC}/file",
            params={"download": "true"},
        )

        assert response.status_code == 200
        assert response.headers["content-disposition"].startswith("attachment;")

    def test_no_file_yet(self, student_client: TestClient):
        response = student_client.get(f"/api/v1/documents/clearance_form/{MATRIC}/file")

        assert response.status_code == 404


class TestDelete:

    def test_withdraw_upload(self, student_client: TestClient):
        upload(student_client)

        response = student_client.delete(f"/api/v1/documents/certificate_payment_receipt/{MATRIC}")

        assert response.status_code == 204
        dashboard = student_client.get(f"/api/v1/clearance/{MATRIC}").json()
        receipt = [d for d in dashboard["documents"] if d["doc_type"] == "certificate_payment_receipt"][0]
        assert receipt["status"] == "pending"
        assert receipt["filename"] is None

    def test_verified_cannot_be_withdrawn(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client)
        update_status(admin_client, "certificate_payment_receipt", "verified")

        response = student_client.delete(f"/api/v1/documents/certificate_payment_receipt/{MATRIC}")

        assert response.status_code == 409
        assert response.json()["current_status"] == "verified"


class TestNotifyIdCard:

    def test_notify_twice(self, student_client: TestClient):
        first = student_client.post(f"/api/v1/notify-id-card/{MATRIC}")
        second = student_client.post(f"/api/v1/notify-id-card/{MATRIC}")

        assert first.status_code == second.status_code == 200
        assert second.json()["status"] == "submitted_physically"
        assert second.json()["notified_admin"] is True


class TestAdmin:

    def test_roster(self, admin_client: TestClient, student: Student, other_student: Student, certificate_ready):
        response = admin_client.get("/api/v1/admin/students")

        assert response.status_code == 200
        roster = {entry["matric"]: entry for entry in response.json()}
        assert set(roster) == {"eng/2020/001", "eng/2020/002"}
        assert roster["eng/2020/001"]["certificate_ready"] is True
        assert roster["eng/2020/002"]["payment_confirmed"] is False

    def test_receipts_queue_with_filter(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client)

        uploaded = admin_client.get("/api/v1/admin/queues/receipts", params={"status": "uploaded"})
        verified = admin_client.get("/api/v1/admin/queues/receipts", params={"status": "verified"})

        assert [item["matric"] for item in uploaded.json()] == [MATRIC]
        assert uploaded.json()[0]["document"]["doc_type"] == "certificate_payment_receipt"
        assert verified.json() == []

    def test_id_card_queue(self, student_client: TestClient, admin_client: TestClient):
        student_client.post(f"/api/v1/notify-id-card/{MATRIC}")

        response = admin_client.get("/api/v1/admin/queues/id-cards", params={"status": "submitted_physically"})

        assert [item["matric"] for item in response.json()] == [MATRIC]

    def test_documents_queue(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client, doc_type="clearance_form", filename="form.png", content_type="image/png",
               data=b"\x89PNG\r\n\x1a\n" + b"0" * 100)

        response = admin_client.get("/api/v1/admin/queues/documents", params={"status": "uploaded"})

        assert [item["document"]["doc_type"] for item in response.json()] == ["clearance_form"]

    def test_invalid_queue_filter(self, admin_client: TestClient):
        response = admin_client.get("/api/v1/admin/queues/receipts", params={"status": "approved"})

        assert response.status_code == 422

    def test_verify_then_reject_conflict(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client)
        verified = update_status(admin_client, "certificate_payment_receipt", "verified")

        rejected = update_status(admin_client, "certificate_payment_receipt", "rejected")

        assert verified.status_code == 200
        assert verified.json()["status"] == "verified"
        assert rejected.status_code == 409
        assert rejected.json()["current_status"] == "verified"
        assert rejected.json()["action"] == "admin_reject"

    def test_uploaded_is_not_a_valid_target(self, admin_client: TestClient, student: Student):
        response = update_status(admin_client, "clearance_form", "uploaded")

        assert response.status_code == 409

    def test_id_card_flow(self, student_client: TestClient, admin_client: TestClient):
        early = update_status(admin_client, "id_card", "verified")
        student_client.post(f"/api/v1/notify-id-card/{MATRIC}")
        verified = update_status(admin_client, "id_card", "verified")

        assert early.status_code == 409
        assert verified.status_code == 200
        assert verified.json()["status"] == "verified"

    def test_reconcile_blobs_defaults_to_dry_run(self, student_client: TestClient, admin_client: TestClient):
        upload(student_client)
        student_client.delete(f"/api/v1/documents/certificate_payment_receipt/{MATRIC}")

        response = admin_client.post("/api/v1/admin/reconcile-blobs")

        assert response.status_code == 200
        report = response.json()
        assert report["dry_run"] is True
        assert report["scanned"] == 1
        assert report["deleted"] == 0
        # Still inside the grace period
        assert report["skipped_recent"] == 1


class TestHealth:

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert set(body["components"]) == {"database", "blob_store"}

    def test_request_id_header(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
