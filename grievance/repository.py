# -*- coding: utf-8 -*-
"""
grievance.repository

Storage engine for complaints on top of SQLAlchemy.

Every public method is one unit of work with its own session:
- create         : record + first history entry in one commit
- append_status  : row lock (FOR UPDATE, BEGIN IMMEDIATE on SQLite), status
                  update + history append in one commit
- get / list_for_submitter / search / stats : read-only queries

SQLAlchemyError never leaves this module raw; it is rolled back and
re-raised as PersistenceError so callers know the request can be retried
and that nothing half-written is visible.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from core.errors import ComplaintNotFound, PersistenceError
from core.logging import logger
from db.models.complaint import Complaint, ComplaintStatusHistory

from .constants import STATUSES


class ComplaintRepository:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    # ---------------------------------------------------------
    # writes
    # ---------------------------------------------------------

    def create(self, complaint: Complaint) -> Complaint:
        db: Session = self.session_factory()
        try:
            db.add(complaint)
            db.commit()
            return complaint
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"complaint insert failed: {e}")
            raise PersistenceError("could not store complaint, please try again") from e
        finally:
            db.close()

    def append_status(
        self,
        complaint_id: str,
        status: str,
        actor_id: Optional[str],
        remarks: Optional[str],
        now: datetime,
        check: Optional[Callable[[str, str], None]] = None,
    ) -> Complaint:
        """
        Set complaint.status and append the matching history entry atomically.

        check(current_status, new_status) runs under the row lock and may
        raise to abort. The new entry's timestamp is never earlier than the
        previous entry's.
        """
        db: Session = self.session_factory()
        try:
            complaint = db.execute(
                select(Complaint).where(Complaint.id == complaint_id).with_for_update()
            ).scalar_one_or_none()
            if complaint is None:
                raise ComplaintNotFound(f"complaint {complaint_id} not found")

            if check is not None:
                check(complaint.status, status)

            history = complaint.status_history
            if history and history[-1].changed_at and history[-1].changed_at > now:
                now = history[-1].changed_at

            complaint.status = status
            history.append(
                ComplaintStatusHistory(
                    status=status,
                    changed_at=now,
                    actor_id=actor_id,
                    remarks=remarks,
                )
            )
            db.commit()
            return complaint
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"status update failed for {complaint_id}: {e}")
            raise PersistenceError("could not update complaint status, please try again") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # ---------------------------------------------------------
    # reads
    # ---------------------------------------------------------

    def _read(self, fn: Callable[[Session], Any]) -> Any:
        db: Session = self.session_factory()
        try:
            return fn(db)
        except SQLAlchemyError as e:
            logger.error(f"complaint query failed: {e}")
            raise PersistenceError("could not read complaints, please try again") from e
        finally:
            db.close()

    def get(self, complaint_id: str) -> Complaint:
        complaint = self._read(lambda db: db.get(Complaint, complaint_id))
        if complaint is None:
            raise ComplaintNotFound(f"complaint {complaint_id} not found")
        return complaint

    def list_for_submitter(self, submitter_id: str) -> List[Complaint]:
        stmt = (
            select(Complaint)
            .where(Complaint.submitter_id == submitter_id)
            .order_by(Complaint.created_at.desc())
        )
        return self._read(lambda db: list(db.execute(stmt).scalars().all()))

    def search(
        self,
        status: Optional[str] = None,
        category: Optional[str] = None,
        area_code: Optional[str] = None,
        department: Optional[str] = None,
    ) -> List[Complaint]:
        """Empty / None filters are ignored; newest first."""
        stmt = select(Complaint)
        if status:
            stmt = stmt.where(Complaint.status == status)
        if category:
            stmt = stmt.where(Complaint.category == category)
        if area_code:
            stmt = stmt.where(Complaint.area_code == area_code)
        if department:
            stmt = stmt.where(Complaint.department == department)
        stmt = stmt.order_by(Complaint.created_at.desc())

        return self._read(lambda db: list(db.execute(stmt).scalars().all()))

    def stats(self, top_areas: int = 10) -> Dict[str, Any]:
        def _grouped(db: Session, column, limit: Optional[int] = None) -> List[Dict[str, Any]]:
            count = func.count(Complaint.id)
            stmt = select(column, count).group_by(column).order_by(count.desc(), column)
            if limit is not None:
                stmt = stmt.limit(limit)
            return [{"value": value, "count": n} for value, n in db.execute(stmt).all()]

        def _query(db: Session) -> Dict[str, Any]:
            total = db.execute(select(func.count(Complaint.id))).scalar() or 0

            by_status = {s: 0 for s in STATUSES}
            for row in _grouped(db, Complaint.status):
                by_status[row["value"]] = row["count"]

            return {
                "total": total,
                "by_status": by_status,
                "by_category": _grouped(db, Complaint.category),
                "by_department": _grouped(db, Complaint.department),
                "by_area_code": _grouped(db, Complaint.area_code, limit=top_areas),
            }

        return self._read(_query)
