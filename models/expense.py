"""Pydantic models for Expense data"""
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ExpenseInput(BaseModel):
    """
    Raw request body for creating or patching an expense.

    Every field is optional and untyped. The validator decides what is
    acceptable; `model_fields_set` tells which keys the client sent (an
    explicit null counts as sent).
    """
    model_config = ConfigDict(extra="ignore")

    title: Any = None
    amount: Any = None
    date: Any = None
    category: Any = None


class Expense(BaseModel):
    """
    A stored expense document, as returned to clients.
    """
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    title: str
    amount: float
    date: datetime
    category: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _object_id_to_str(cls, value: Any) -> Any:
        if isinstance(value, ObjectId):
            return str(value)
        return value

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # BSON datetimes come back naive unless the client is tz_aware
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
