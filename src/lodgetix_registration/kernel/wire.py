"""
Base model for types that cross the draft API boundary

The draft API speaks camelCase JSON. Python code uses snake_case field
names; the alias generator maps between them, and both spellings are
accepted on input.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """BaseModel with camelCase aliases for JSON serialization"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using camelCase keys"""
        return self.model_dump(mode="json", by_alias=True, **kwargs)
