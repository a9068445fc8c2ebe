import os
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse

from core.errors import ValidationError
from core.logging import logger
from grievance.pipeline import SubmissionMetadata
from grievance.records import complaint_to_dict
from routers.auth import Actor, get_current_actor, require_citizen
from routers.deps import get_services
from services.grievance_service import GrievanceServices

# voice recordings the kiosk / browser recorders produce
ALLOWED_AUDIO_EXTENSIONS = (".mp3", ".wav", ".m4a", ".ogg", ".webm")

router = APIRouter(prefix="/api/complaints", tags=["complaints"])


def _read_audio(upload: UploadFile, max_bytes: int) -> bytes:
    """Validate extension / size and return the bytes."""
    filename = upload.filename or ""
    ext = os.path.splitext(filename)[1].lower()
    if ext not in ALLOWED_AUDIO_EXTENSIONS:
        raise ValidationError(
            "Only audio files (" + ", ".join(e.lstrip(".") for e in ALLOWED_AUDIO_EXTENSIONS) + ") are allowed"
        )

    data = upload.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError(f"File size too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")
    return data


# 📝 new complaint (citizen)
@router.post("", status_code=201)
def submit_complaint(
    full_name: str = Form(""),
    mobile: str = Form(""),
    area_code: str = Form(""),
    complaint_text: str = Form(""),
    language: str = Form("en"),
    is_voice: bool = Form(False),
    attachment_ref: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    actor: Actor = Depends(require_citizen),
    services: GrievanceServices = Depends(get_services),
):
    """
    - text complaint: complaint_text
    - voice complaint: is_voice=true + audio file (complaint_text is ignored)
    - is_voice=true without a file still goes through, with placeholder text
    """
    metadata = SubmissionMetadata(
        submitter_id=actor.id,
        contact_name=full_name,
        contact_mobile=mobile,
        area_code=area_code,
        attachment_ref=attachment_ref,
    )

    raw_input = complaint_text
    is_audio = False
    file_name = "recording.webm"

    if is_voice and audio is not None:
        raw_input = _read_audio(audio, services.settings.max_audio_bytes)
        is_audio = True
        file_name = audio.filename or file_name
    elif is_voice and not complaint_text.strip():
        raw_input = b""
        is_audio = True

    complaint = services.pipeline.submit(
        raw_input,
        is_audio=is_audio,
        declared_language=language,
        metadata=metadata,
        file_name=file_name,
    )

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "message": "Complaint submitted successfully",
            "complaint": complaint_to_dict(complaint),
        },
    )


# 📋 my complaints (citizen), newest first
@router.get("/mine")
def list_my_complaints(
    actor: Actor = Depends(require_citizen),
    services: GrievanceServices = Depends(get_services),
):
    complaints = services.repository.list_for_submitter(actor.id)
    logger.info(f"fetched {len(complaints)} complaints for {actor.id}")

    return {
        "success": True,
        "count": len(complaints),
        "complaints": [complaint_to_dict(c) for c in complaints],
    }


# single complaint: citizens see their own, authorities see all
@router.get("/{complaint_id}")
def get_complaint(
    complaint_id: str,
    actor: Actor = Depends(get_current_actor),
    services: GrievanceServices = Depends(get_services),
):
    complaint = services.repository.get(complaint_id)

    if actor.role == "citizen" and complaint.submitter_id != actor.id:
        raise HTTPException(status_code=403, detail="Not authorized to view this complaint")

    return {"success": True, "complaint": complaint_to_dict(complaint)}
