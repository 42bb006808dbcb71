from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, func
from atelier.constants.roles import ROLE_USER
from .base import Base

class User(Base):
    __tablename__ = 'users'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=ROLE_USER)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    def set_password(self, raw: str):
        from werkzeug.security import generate_password_hash
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        from werkzeug.security import check_password_hash
        return check_password_hash(self.password_hash, raw)

    def profile(self):
        # Both id spellings: older app builds read user._id
        return {'id': self.id, '_id': self.id, 'name': self.name, 'role': self.role}
