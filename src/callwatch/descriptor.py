"""Identification of a unit of work being instrumented."""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvocationDescriptor(BaseModel):
    """Name of a unit of work: a logical group and an operation within it."""

    model_config = ConfigDict(frozen=True)

    group: str = Field(
        ...,
        description="Logical group the operation belongs to, e.g. a service name",
    )
    operation: str = Field(
        ...,
        description="Name of the operation within the group",
    )

    @field_validator("group", "operation", mode="before")
    @classmethod
    def validate_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("must not be empty")
        return v

    @property
    def qualified_name(self) -> str:
        return f"{self.group}.{self.operation}"

    def __str__(self) -> str:
        return self.qualified_name
