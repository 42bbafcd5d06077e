"""Shared base model for backend payloads."""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class BackendModel(BaseModel):
    """Model mirroring a camelCase backend payload."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"
