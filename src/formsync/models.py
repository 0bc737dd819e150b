from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FormModel(Base):
    __tablename__ = "forms"

    id = Column(String, primary_key=True)
    workspace = Column(String, index=True)
    title = Column(Text)
    header_json = Column(Text)
    style_json = Column(Text)
    options_json = Column(Text)
    blocks_json = Column(Text)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class ResponseModel(Base):
    __tablename__ = "responses"

    id = Column(String, primary_key=True)
    form_id = Column(String, index=True)
    data_json = Column(Text)
    created_at = Column(DateTime)
