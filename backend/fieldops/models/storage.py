from __future__ import annotations
from datetime import datetime
from typing import Any
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy import String, JSON, DateTime, func

Base = declarative_base()


class KVEntry(Base):
    """One serialized collection (users, projects, ...) under its storage key."""
    __tablename__ = 'kv_entries'
    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
