# -*- coding: utf-8 -*-
"""
grievance.records

- new_complaint(...): the only way a Complaint is built. The record and its
  first "Submitted" history entry come out together as one value, so a
  stored complaint can never have an empty history.
- complaint_to_dict(c): wire format shared by the citizen / authority routes.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from db.models.complaint import Complaint, ComplaintStatusHistory

from .constants import INITIAL_STATUS


def utcnow() -> datetime:
    return datetime.utcnow()


def new_complaint(
    *,
    submitter_id: str,
    contact_name: str,
    contact_mobile: str,
    area_code: str,
    source_language: str,
    original_text: str,
    normalized_text: str,
    category: str,
    department: str,
    attachment_ref: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Complaint:
    now = now or utcnow()

    complaint = Complaint(
        id=str(uuid.uuid4()),
        submitter_id=submitter_id,
        contact_name=contact_name,
        contact_mobile=contact_mobile,
        area_code=area_code,
        source_language=source_language,
        original_text=original_text,
        normalized_text=normalized_text,
        category=category,
        department=department,
        attachment_ref=attachment_ref,
        status=INITIAL_STATUS,
        created_at=now,
    )
    complaint.status_history = [
        ComplaintStatusHistory(
            status=INITIAL_STATUS,
            changed_at=now,
            actor_id=None,
            remarks=None,
        )
    ]
    return complaint


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def complaint_to_dict(c: Complaint) -> Dict[str, Any]:
    return {
        "id": c.id,
        "submitter_id": c.submitter_id,
        "contact_name": c.contact_name,
        "contact_mobile": c.contact_mobile,
        "area_code": c.area_code,
        "source_language": c.source_language,
        "original_text": c.original_text,
        "normalized_text": c.normalized_text,
        "category": c.category,
        "department": c.department,
        "attachment_ref": c.attachment_ref,
        "status": c.status,
        "status_history": [
            {
                "status": h.status,
                "timestamp": _iso(h.changed_at),
                "actor_id": h.actor_id,
                "remarks": h.remarks,
            }
            for h in c.status_history
        ],
        "created_at": _iso(c.created_at),
    }
