# -*- coding: utf-8 -*-
"""
grievance.workflow

Status state machine for stored complaints.

States: Submitted / Under Review / In Progress / Resolved.

TRANSITIONS is the complete relation: every status may move to every status,
itself included. Authorities reopen wrongly resolved complaints and move
them backwards when reassigning, so no edge is forbidden. Each move is still
recorded in the status history with the acting authority and remarks, which
is the audit trail for those corrections.

Authorization is not checked here: the caller passes an actor id the
identity layer already approved.
"""

from typing import Callable, Dict, FrozenSet, Optional

from core.errors import InvalidStatus, ValidationError
from core.logging import logger, log_event
from db.models.complaint import Complaint

from .constants import STATUSES
from .records import utcnow
from .repository import ComplaintRepository

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    current: frozenset(STATUSES) for current in STATUSES
}


def is_allowed(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, frozenset())


def _guard(current: str, new: str) -> None:
    if not is_allowed(current, new):
        raise InvalidStatus(f"cannot move complaint from {current} to {new}")


class StatusWorkflow:
    def __init__(
        self,
        repository: ComplaintRepository,
        clock: Callable = utcnow,
    ):
        self.repository = repository
        self.clock = clock

    def transition(
        self,
        complaint_id: str,
        new_status: str,
        actor_id: str,
        remarks: Optional[str] = None,
    ) -> Complaint:
        if new_status not in STATUSES:
            raise InvalidStatus(
                "Invalid status value. Must be one of: " + ", ".join(STATUSES)
            )
        if not actor_id:
            raise ValidationError("status changes need an acting authority")

        complaint = self.repository.append_status(
            complaint_id,
            new_status,
            actor_id=actor_id,
            remarks=remarks or "",
            now=self.clock(),
            check=_guard,
        )

        logger.info(f"complaint {complaint_id} status -> {new_status} by {actor_id}")
        log_event(
            complaint_id,
            "status_transition",
            {
                "status": new_status,
                "actor_id": actor_id,
                "remarks": remarks or "",
            },
        )
        return complaint
