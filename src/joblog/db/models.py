from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from joblog.db.base import Base


class JobRecord(Base):
    """One tracked application; its action timeline is embedded as a JSON array."""

    __tablename__ = "jobs"
    # AUTOINCREMENT keeps sqlite from handing out the id of a deleted newest row again.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    date_created: Mapped[str] = mapped_column("dateCreated", String(40), nullable=False, index=True)
    date_modified: Mapped[str] = mapped_column("dateModified", String(40), nullable=False)
    actions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
