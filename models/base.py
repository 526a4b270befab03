"""
Base schemas and mixins for all models.
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class StoredRecord(BaseModel):
    """
    Base for records persisted in the local mapping store.

    Field aliases keep the camelCase keys of the stored JSON;
    Python code uses the snake_case attribute names.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True
    )

    def to_storage(self) -> dict:
        """Serialize with camelCase keys, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Envelope(BaseModel):
    """Uniform response wrapper shared by every endpoint."""
    success: bool = True
    message: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
