from pydantic import BaseModel, Field
from typing import Any, Optional
import uuid


def new_request_id() -> str:
    """Request id echoed in every success and error body."""
    return uuid.uuid4().hex


class SuccessResponse(BaseModel):
    """Envelope for successful responses: a human message, the data and a request id."""
    success: bool = True
    request_id: str = Field(default_factory=new_request_id)
    message: Optional[str] = None
    data: Optional[Any] = None
