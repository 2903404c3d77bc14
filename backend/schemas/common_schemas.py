"""
Common Schemas - Response envelope and camelCase base model
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys (createdAt, chunkIndex, ...)"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(CamelModel, Generic[DataT]):
    """Envelope wrapping every successful JSON response"""
    success: bool = Field(default=True, description="Always true for successful responses")
    message: str = Field(..., description="Human readable outcome")
    data: Optional[DataT] = Field(None, description="Response payload")