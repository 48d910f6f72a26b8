"""
Shared base model for records exposed through the JSON API.

Fields are snake_case in Python and camelCase on the wire, matching the keys
API clients and previously stored records use.
"""
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the model to a JSON-ready dictionary with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")
