from __future__ import annotations

from batchrec.db.base import Base
from batchrec.db.models.common import HasCreatedAt
from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column
import uuid


def uuid4_str() -> str:
    return str(uuid.uuid4())


class User(Base, HasCreatedAt):
    __tablename__ = "auth_user"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid4_str)
    email: Mapped[str] = mapped_column(String(256), unique=True, index=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    password_hash: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
