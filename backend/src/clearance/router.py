"""Student-facing clearance endpoints

Matric ids contain '/' (e.g. eng/2020/001), so they are always the trailing
path segment and declared with the :path converter.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, File, Response, UploadFile, status

from auth.dependencies import CurrentSession
from domain.documents.document_types import DocumentType
from .dependencies import ClearanceServiceDep, ReadinessDep
from .schemas import (
    ClearanceRecordResponse,
    ReadinessResponse,
    StudentClearanceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Clearance"])


@router.get("/status/{matric:path}", response_model=ReadinessResponse)
def get_status(matric: str, session: CurrentSession, readiness: ReadinessDep):
    """Whether the student's certificate is ready for collection."""
    return ReadinessResponse(is_ready=readiness.get_readiness(session, matric))


@router.get("/clearance/{matric:path}", response_model=StudentClearanceResponse)
def get_clearance(matric: str, session: CurrentSession, readiness: ReadinessDep):
    """Student dashboard. Creates the five pending records on first access."""
    view = readiness.student_view(session, matric)
    return StudentClearanceResponse(
        matric=view.matric,
        email=view.email,
        certificate_ready=view.certificate_ready,
        payment_confirmed=view.payment_confirmed,
        documents=[ClearanceRecordResponse.from_record(r) for r in view.documents],
    )


@router.post(
    "/documents/{doc_type}/{matric:path}",
    response_model=ClearanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_document(
    doc_type: DocumentType,
    matric: str,
    session: CurrentSession,
    service: ClearanceServiceDep,
    file: UploadFile = File(...),
):
    """Upload a JPG, PNG or PDF (max 10 MiB) for an electronic document.

    Example:
        curl -X POST http://localhost:8000/api/v1/documents/clearance_form/eng/2020/001 \\
             -H "Authorization: Bearer $TOKEN" \\
             -F "file=@clearance.pdf"
    """
    data = file.file.read()
    record = service.upload(
        session,
        matric,
        doc_type,
        filename=file.filename,
        mime_type=file.content_type,
        data=data,
    )
    return ClearanceRecordResponse.from_record(record)


@router.delete(
    "/documents/{doc_type}/{matric:path}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_document(
    doc_type: DocumentType,
    matric: str,
    session: CurrentSession,
    service: ClearanceServiceDep,
):
    """Withdraw an uploaded or rejected document."""
    service.delete_document(session, matric, doc_type)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/documents/{doc_type}/{matric:path}/file")
def get_document_file(
    doc_type: DocumentType,
    matric: str,
    session: CurrentSession,
    service: ClearanceServiceDep,
    download: bool = False,
):
    """Stream a submitted file inline, or as an attachment with ?download=true."""
    document = service.read_document(session, matric, doc_type)
    disposition = "attachment" if download else "inline"
    return Response(
        content=document.content,
        media_type=document.mime_type,
        headers={
            "Content-Disposition": f"{disposition}; filename*=UTF-8''{quote(document.filename)}",
        },
    )


@router.post("/notify-id-card/{matric:path}", response_model=ClearanceRecordResponse)
def notify_id_card(matric: str, session: CurrentSession, service: ClearanceServiceDep):
    """Tell the administrator the ID card was handed in. Safe to repeat."""
    record = service.notify_id_card(session, matric)
    return ClearanceRecordResponse.from_record(record)
