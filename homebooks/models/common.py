"""
Shared Model Building Blocks

Every persisted record in Homebooks derives from RecordModel so that:
1. JSON field names stay camelCase (the persisted layout)
2. Python attribute names stay snake_case
3. Money is exact in Python (Decimal) and exact on disk: a JSON number
   when a float carries it, decimal text otherwise

DESIGN DECISION: Ids are "<kind>-<uuid4 hex>". Millisecond timestamps
collide when two records are created in the same tick.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def money_to_json(value: Decimal) -> Union[float, str]:
    """Plain number when the float round-trips exactly, else decimal text."""
    as_float = float(value)
    if Decimal(repr(as_float)) == value:
        return as_float
    return str(value)


Money = Annotated[
    Decimal,
    PlainSerializer(money_to_json, when_used="json"),
]

ZERO = Decimal("0")


def utc_now() -> datetime:
    """Timezone-aware current time. All stored timestamps are UTC."""
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()


def new_record_id(kind: str) -> str:
    """Generate a collision-resistant id such as 'goal-3f2a...'."""
    return f"{kind}-{uuid4().hex}"


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and numeric strings to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def drop_blank(values: list[str]) -> list[str]:
    """Keep only non-blank entries, stripped."""
    return [v.strip() for v in values if v and v.strip()]


class RecordModel(BaseModel):
    """Base for every record and payload that touches storage."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_storage(self) -> dict:
        """JSON-safe dict using the persisted (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


class ActionResult(BaseModel):
    """
    Outcome of a user action (form submit, status change, delete).

    Flows never raise into the caller; they return one of these
    with a message fit to show the user.
    """

    success: bool
    message: str
    record_id: Optional[str] = None
    issues: list[str] = Field(default_factory=list)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive timestamps as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
