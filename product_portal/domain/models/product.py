from decimal import Decimal
from typing import Any, Dict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator


class ProductRecord(BaseModel):
    """
    A product as exposed by the gateway's ``Products`` entity set.

    Only ``id`` and ``price`` are modelled; any other display fields the
    gateway returns are kept as extra attributes and round-trip untouched.
    """

    id: str = Field(serialization_alias="Id", validation_alias=AliasChoices("Id", "id"))
    price: Decimal = Field(
        default=Decimal("0"),
        serialization_alias="Price",
        validation_alias=AliasChoices("Price", "price"),
    )

    model_config = ConfigDict(extra="allow", frozen=True)

    @field_validator("id", mode="before")
    @classmethod
    def _numeric_key_as_text(cls, value: Any) -> Any:
        # Edm.Int32/Int64 keys arrive as JSON numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def display_fields(self) -> Dict[str, Any]:
        """Fields returned by the gateway beyond id and price."""
        return {
            key: value
            for key, value in (self.model_extra or {}).items()
            if not key.startswith("@odata")
        }

    @field_serializer("price", when_used="json")
    def _price_as_number(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def wire_name(cls, field_name: str) -> str:
        """Map a model field name to the name the gateway expects."""
        info = cls.model_fields.get(field_name)
        if info is not None and info.serialization_alias:
            return info.serialization_alias
        return field_name
