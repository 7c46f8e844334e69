"""Shared model configuration: camelCase on the wire, snake_case in Python."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self, **kwargs) -> dict:
        """Dump with wire (camelCase) keys, JSON-safe values."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)


def is_uuid(value: str | None) -> bool:
    """True when ``value`` parses as a UUID."""
    if not value:
        return False
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True
