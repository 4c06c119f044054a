"""
Staff Model.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK


class Staff(AuditMixin, Base):
    """
    Restaurant employee. Orders reference staff as cashier, kitchen staff,
    hall manager or delivery driver.
    """

    __tablename__ = "staff"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(Text, nullable=False)  # ADMIN, CASHIER, KITCHEN, HALL_MANAGER, DELIVERY
