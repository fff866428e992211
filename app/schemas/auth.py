from typing import List, Optional
from pydantic import BaseModel, Field


class Principal(BaseModel):
    """Identity resolved from a verified access token."""
    user_id: str = Field(..., min_length=1)
    tenant: Optional[str] = None
    roles: List[str] = Field(default_factory=list)

    class Config:
        frozen = True
