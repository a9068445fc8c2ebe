from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from db.base import Base


class Complaint(Base):
    __tablename__ = "complaints"

    id = Column(String(36), primary_key=True)
    submitter_id = Column(String(64), nullable=False, index=True)

    # contact details declared by the citizen
    contact_name = Column(String(200), nullable=False)
    contact_mobile = Column(String(10), nullable=False)
    area_code = Column(String(6), nullable=False, index=True)

    source_language = Column(String(2), nullable=False)        # en / hi / mr
    original_text = Column(Text, nullable=False)                # as typed or transcribed
    normalized_text = Column(Text, nullable=False)              # English, used for routing

    category = Column(String(50), nullable=False, index=True)
    department = Column(String(200), nullable=False, index=True)
    attachment_ref = Column(String(255), nullable=True)

    status = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

    # append-only audit trail, oldest first
    status_history = relationship(
        "ComplaintStatusHistory",
        back_populates="complaint",
        cascade="all, delete-orphan",
        order_by="[ComplaintStatusHistory.changed_at, ComplaintStatusHistory.id]",
        lazy="selectin",
    )


class ComplaintStatusHistory(Base):
    __tablename__ = "complaint_status_history"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    complaint_id = Column(String(36), ForeignKey("complaints.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False)
    changed_at = Column(DateTime, nullable=False)
    actor_id = Column(String(64), nullable=True)   # None for the submission entry
    remarks = Column(Text, nullable=True)

    complaint = relationship(
        "Complaint",
        back_populates="status_history",
    )
