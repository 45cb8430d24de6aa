"""Application-level service helpers."""

from .bids import (
    accept_bid,
    create_bid,
    delete_bid,
    list_bids,
    reject_bid,
    update_bid,
)
from .collections import (
    create_collection,
    delete_collection,
    list_collections,
    update_collection,
)
from .users import list_users
from .pagination import Page

__all__ = [
    "accept_bid",
    "create_bid",
    "delete_bid",
    "list_bids",
    "reject_bid",
    "update_bid",
    "create_collection",
    "delete_collection",
    "list_collections",
    "update_collection",
    "list_users",
    "Page",
]
