from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String
from .base import Base

class Client(Base):
    __tablename__ = 'clients'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

class Etrier(Base):
    """Caliper model, e.g. a car model + axle."""
    __tablename__ = 'etriers'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    car_model: Mapped[str] = mapped_column(String(120), nullable=False, index=True)

class Piece(Base):
    __tablename__ = 'pieces'
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    designation: Mapped[str] = mapped_column(String(160), nullable=False)
    reference_article: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    bar_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)


def client_json(c: Client):
    return {'_id': c.id, 'name': c.name, 'phone': c.phone}


def etrier_json(e: Etrier):
    return {'_id': e.id, 'carModel': e.car_model}


def piece_json(p: Piece):
    return {'_id': p.id, 'designation': p.designation, 'referenceArticle': p.reference_article, 'barCode': p.bar_code}
