from __future__ import annotations

from typing import Optional

from sqlalchemy import Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menu_api.db import Base


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # DECIMAL(10,2) in the table, float on the Python side
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
