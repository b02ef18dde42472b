"""
Base Model.

Common configuration for all persisted entities.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for entities stored as JSON.

    Attributes are snake_case in Python and camelCase on disk
    (``created_at`` is persisted as ``createdAt``). Unknown keys are rejected.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    @field_validator("*", mode="after")
    @classmethod
    def _naive_utc(cls, value: Any) -> Any:
        """Timestamps written with an offset (``...Z``) are stored as naive UTC."""
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def to_record(self) -> dict[str, Any]:
        """Return the JSON-ready persisted form."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
