import uuid
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sweetshop.models.sweet import Sweet


class SweetRequest(BaseModel):
    """
    Body for create and update. Fields are loose on purpose: the catalog service
    validates them so the caller gets a single "All fields are required" message.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Any = None
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    quantity: Any = None


class QuantityRequest(BaseModel):
    """Body for purchase and restock. Parsed by the inventory service."""
    quantity: Any = None


class SweetResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID
    name: str
    description: str
    price: float
    category: str
    image_url: str
    quantity: int
    created_at: datetime
    updated_at: datetime


class SearchResult(BaseModel):
    sweets: List[SweetResponse]
    total: int


def serialize_sweet(sweet: Sweet) -> dict:
    """Renders a Sweet as the camelCase JSON the storefront expects."""
    return SweetResponse.model_validate(sweet).model_dump(by_alias=True, mode="json")
