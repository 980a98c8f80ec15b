"""JsonModel base class for API communication."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class JsonModel(BaseModel):
    """Base model with camelCase JSON aliases and snake_case attributes.

    Request bodies may use either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def model_dump(self, **kwargs) -> dict:
        """Dump with JSON-compatible values by default."""
        kwargs.setdefault("mode", "json")
        return super().model_dump(**kwargs)

    def to_dict(self, by_alias: bool = False) -> dict[str, Any]:
        """Convert to a dictionary without None values."""
        return self.model_dump(exclude_none=True, by_alias=by_alias)
