# bidmarket/api/_serialize.py
# ORM rows -> the camelCase JSON the admin UI reads.

import datetime as dt
from typing import Iterable, Optional

from bidmarket.domain.models import Bid, Collection, User


def _fmt_ts(val):
    if not val:
        return None
    if isinstance(val, dt.datetime) and val.tzinfo is None:
        # SQLite hands back naive values; they were written as UTC
        val = val.replace(tzinfo=dt.timezone.utc)
    try:
        return val.isoformat()
    except AttributeError:
        # if already a string, return as-is
        return str(val)


def user_out(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def bid_out(bid: Bid, with_collection: bool = True) -> dict:
    out = {
        "id": bid.id,
        "price": bid.price,
        "status": bid.status,
        "userId": bid.user_id,
        "collectionId": bid.collection_id,
        "createdAt": _fmt_ts(bid.created_at),
        "user": user_out(bid.user),
    }
    if with_collection:
        out["collection"] = collection_out(bid.collection) if bid.collection is not None else None
    return out


def collection_out(
    collection: Collection,
    bids: Optional[Iterable[Bid]] = None,
    bid_count: Optional[int] = None,
) -> dict:
    out = {
        "id": collection.id,
        "name": collection.name,
        "description": collection.description,
        "stocks": collection.stocks,
        "price": collection.price,
        "ownerId": collection.owner_id,
        "owner": user_out(collection.owner),
    }
    if bids is not None:
        out["bids"] = [bid_out(b, with_collection=False) for b in bids]
    if bid_count is not None:
        out["bidCount"] = bid_count
    return out
