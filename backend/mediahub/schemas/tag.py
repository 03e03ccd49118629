from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List


class Tag(BaseModel):
    id: str
    name: str
    slug: str
    created_at: datetime

    class Config:
        from_attributes = True


class TagResolveRequest(BaseModel):
    names: List[str]

    @field_validator("names")
    @classmethod
    def validate_names(cls, v: List[str]) -> List[str]:
        """Cap the batch size; blank entries are dropped later by the resolver."""
        if len(v) > 100:
            raise ValueError("Cannot resolve more than 100 tags at once")
        return v


class TagWithUsage(BaseModel):
    tag: Tag
    usage_count: int
