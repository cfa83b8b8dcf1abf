"""
Base class for response DTOs serialized with camelCase keys.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_json(self) -> dict:
        """Dump with camelCase keys and JSON-safe values."""
        return self.model_dump(by_alias=True, mode="json")
