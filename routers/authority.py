from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from core.logging import logger, read_events
from grievance.records import complaint_to_dict
from routers.auth import Actor, require_authority
from routers.deps import get_services
from services.grievance_service import GrievanceServices

router = APIRouter(prefix="/api/authority", tags=["authority"])


class ComplaintStatusUpdate(BaseModel):
    # checked by StatusWorkflow so a bad value gets the same 400 as elsewhere
    status: str
    remarks: Optional[str] = None


# 📌 all complaints, optional filters
@router.get("/complaints")
def list_complaints(
    status: Optional[str] = None,
    category: Optional[str] = None,
    area_code: Optional[str] = None,
    department: Optional[str] = None,
    current_authority: Actor = Depends(require_authority),
    services: GrievanceServices = Depends(get_services),
):
    complaints = services.repository.search(
        status=status,
        category=category,
        area_code=area_code,
        department=department,
    )
    logger.info(
        f"authority {current_authority.id} fetched {len(complaints)} complaints "
        f"(status={status}, category={category}, area_code={area_code}, department={department})"
    )

    return {
        "success": True,
        "count": len(complaints),
        "complaints": [complaint_to_dict(c) for c in complaints],
    }


@router.put("/complaints/{complaint_id}/status")
def update_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    current_authority: Actor = Depends(require_authority),
    services: GrievanceServices = Depends(get_services),
):
    complaint = services.workflow.transition(
        complaint_id,
        payload.status,
        actor_id=current_authority.id,
        remarks=payload.remarks,
    )

    return {
        "success": True,
        "message": "Complaint status updated successfully",
        "complaint": complaint_to_dict(complaint),
    }


# 📊 dashboard numbers
@router.get("/stats")
def get_stats(
    current_authority: Actor = Depends(require_authority),
    services: GrievanceServices = Depends(get_services),
):
    return {"success": True, "stats": services.repository.stats()}


# audit trail of one complaint (submission + every status change)
@router.get("/complaints/{complaint_id}/events")
def get_complaint_events(
    complaint_id: str,
    current_authority: Actor = Depends(require_authority),
    services: GrievanceServices = Depends(get_services),
):
    complaint = services.repository.get(complaint_id)
    events = read_events(complaint.id)

    return {"success": True, "count": len(events), "events": events}
