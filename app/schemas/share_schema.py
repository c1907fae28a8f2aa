from typing import Any, Optional
from pydantic import BaseModel, Field


class ShareRequest(BaseModel):
    # Short keys keep share links compact
    medium: Optional[Any] = Field(None, alias="m")
    sharer_id: str = Field(..., alias="s")
    post_id: str = Field(..., alias="p")
