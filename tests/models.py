"""SQLAlchemy models for integration tests."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    Enum,
    ForeignKey,
    LargeBinary,
    Numeric,
    SmallInteger,
    String,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


post_tag = Table(
    "post_tag",
    Base.metadata,
    Column("post_id", ForeignKey("post.id"), primary_key=True),
    Column("tag_id", ForeignKey("tag.id"), primary_key=True),
)


class InvoiceStatus(enum.Enum):
    DRAFT = "draft"
    PAID = "paid"


class Author(Base):
    __tablename__ = "author"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))

    def __str__(self) -> str:
        return self.name


class Invoice(Base):
    __tablename__ = "invoice"

    id: Mapped[int] = mapped_column(primary_key=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    note: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[InvoiceStatus | None] = mapped_column(Enum(InvoiceStatus))
    issued_on: Mapped[date | None]
    author_id: Mapped[int | None] = mapped_column(ForeignKey("author.id"))
    author: Mapped[Author | None] = relationship()


class Tag(Base):
    __tablename__ = "tag"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))


class Post(Base):
    __tablename__ = "post"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    tags: Mapped[list[Tag]] = relationship(secondary=post_tag)


class Profile(Base):
    """Primary key is the author's: identified through Author."""

    __tablename__ = "profile"

    author_id: Mapped[int] = mapped_column(ForeignKey("author.id"), primary_key=True)
    bio: Mapped[str | None] = mapped_column(Text)
    author: Mapped[Author] = relationship()


class Basket(Base):
    __tablename__ = "basket"

    id: Mapped[int] = mapped_column(primary_key=True)
    items: Mapped[list[BasketItem]] = relationship(cascade="all, delete-orphan")


class BasketItem(Base):
    __tablename__ = "basket_item"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(50))
    basket_id: Mapped[int | None] = mapped_column(ForeignKey("basket.id"))


class Vehicle(Base):
    __tablename__ = "vehicle"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[str] = mapped_column(String(20))
    wheels: Mapped[int] = mapped_column(SmallInteger)

    __mapper_args__ = {"polymorphic_on": "kind", "polymorphic_identity": "vehicle"}


class Car(Vehicle):
    __mapper_args__ = {"polymorphic_identity": "car"}


class Device(Base):
    """Column types of every semantic category."""

    __tablename__ = "device"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    serial: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    active: Mapped[bool | None]
    settings: Mapped[dict[str, Any] | None] = mapped_column(JSON)
    firmware: Mapped[bytes | None] = mapped_column(LargeBinary)
    seen_at: Mapped[datetime | None]
    ratio: Mapped[float | None]


class Comment(Base):
    """Never configured for auditing."""

    __tablename__ = "comment"

    id: Mapped[int] = mapped_column(primary_key=True)
    body: Mapped[str] = mapped_column(Text)


AUDITED_MODELS = (
    Author,
    Invoice,
    Tag,
    Post,
    Profile,
    Basket,
    BasketItem,
    Vehicle,
    Car,
    Device,
)
