from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Integer, Numeric, TIMESTAMP, ForeignKey, CheckConstraint
import enum
import datetime as dt

class Base(DeclarativeBase):
    pass


class BidStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)

    collections: Mapped[list["Collection"]] = relationship(back_populates="owner", lazy="raise")
    bids: Mapped[list["Bid"]] = relationship(back_populates="user", lazy="raise")


class Collection(Base):
    __tablename__ = "collections"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String)
    description: Mapped[str] = mapped_column(Text, default="")
    stocks: Mapped[int] = mapped_column(Integer, default=0)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)

    owner: Mapped[User] = relationship(back_populates="collections", lazy="raise")
    bids: Mapped[list["Bid"]] = relationship(back_populates="collection", lazy="raise", order_by="Bid.id")

    __table_args__ = (CheckConstraint("stocks >= 0", name="ck_collections_stocks_non_negative"),)


class Bid(Base):
    __tablename__ = "bids"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False))
    status: Mapped[str] = mapped_column(String(16), default=BidStatus.PENDING.value)  # pending|accepted|rejected
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    collection_id: Mapped[int] = mapped_column(ForeignKey("collections.id"), index=True)
    created_at: Mapped[dt.datetime] = mapped_column(TIMESTAMP(timezone=True), default=_utcnow)

    user: Mapped[User] = relationship(back_populates="bids", lazy="raise")
    collection: Mapped[Collection] = relationship(back_populates="bids", lazy="raise")
