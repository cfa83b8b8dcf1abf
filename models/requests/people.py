"""
People request models.
"""

from typing import Optional
from pydantic import Field

from models.responses.common import CamelModel


class CreatePersonRequest(CamelModel):
    name: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    description: Optional[str] = None
    relationship: Optional[str] = None
    is_primary_person: bool = False


class UpdatePersonRequest(CamelModel):
    """Only fields that are sent are changed."""

    name: Optional[str] = Field(None, min_length=1)
    display_name: Optional[str] = None
    description: Optional[str] = None
    relationship: Optional[str] = None
    is_primary_person: Optional[bool] = None
