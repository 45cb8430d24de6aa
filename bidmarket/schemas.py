from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bidmarket.domain.models import BidStatus


class _Body(BaseModel):
    # the UI posts camelCase keys; unknown keys are refused
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class BidCreate(_Body):
    collection_id: int = Field(alias="collectionId")
    user_id: int = Field(alias="userId")
    price: float
    status: Optional[BidStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def _blank_status(cls, v):
        return v or None


class BidUpdate(_Body):
    id: int
    price: Optional[float] = None
    status: Optional[BidStatus] = None
    user_id: Optional[int] = Field(default=None, alias="userId")
    collection_id: Optional[int] = Field(default=None, alias="collectionId")


class BidRef(_Body):
    id: int


class CollectionCreate(_Body):
    name: str
    description: str = ""
    stocks: int
    price: float
    owner_id: int = Field(alias="ownerId")


class CollectionUpdate(_Body):
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    stocks: Optional[int] = None
    price: Optional[float] = None
    # accepted so the UI can post the row back, never written
    owner_id: Optional[int] = Field(default=None, alias="ownerId")


class CollectionRef(_Body):
    id: int
