from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from sqlalchemy import Integer, String, Boolean, DateTime, ForeignKey, Text, UniqueConstraint
from atelier.constants.workflow import (
    ALL_RETURN_STATUSES, STATE_RECEIVED, RETURN_NONE, RECEPTION_NUMBER_PREFIX, RECEPTION_NUMBER_WIDTH,
)
from atelier.services.records import utcnow
from atelier.utils.validation import validate_choice
from .base import Base

class Reception(Base):
    __tablename__ = 'receptions'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reception_number: Mapped[Optional[str]] = mapped_column(String(32), unique=True, index=True)
    client_id: Mapped[int] = mapped_column(ForeignKey('clients.id'), nullable=False)
    etrier_id: Mapped[int] = mapped_column(ForeignKey('etriers.id'), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    position: Mapped[str] = mapped_column(String(32), nullable=False)
    observation: Mapped[str] = mapped_column(Text, nullable=False, default='')
    state: Mapped[str] = mapped_column('etat', String(16), nullable=False, default=STATE_RECEIVED, index=True)
    is_returned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delivered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    serial_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    return_status: Mapped[str] = mapped_column(String(16), nullable=False, default=RETURN_NONE)
    return_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    client = relationship('Client')
    etrier = relationship('Etrier')
    user = relationship('User')
    pieces = relationship('ReceptionPiece', cascade='all, delete-orphan', order_by='ReceptionPiece.id')

    def assign_number(self):
        # Sequential with the primary key; never reassigned once set
        if not self.reception_number:
            self.reception_number = f"{RECEPTION_NUMBER_PREFIX}{self.id:0{RECEPTION_NUMBER_WIDTH}d}"
        return self.reception_number

    @validates('return_status')
    def _check_return_status(self, key, value):
        return validate_choice(value, ALL_RETURN_STATUSES, 'returnStatus')

# Lifecycle: recus -> en cours -> finit (+ delivered / is_returned flags, see services.workflow)

class ReceptionPiece(Base):
    __tablename__ = 'reception_pieces'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    reception_id: Mapped[int] = mapped_column(ForeignKey('receptions.id', ondelete='CASCADE'), nullable=False)
    piece_id: Mapped[int] = mapped_column(ForeignKey('pieces.id'), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    __table_args__ = (UniqueConstraint('reception_id', 'piece_id', name='uq_reception_piece'),)
