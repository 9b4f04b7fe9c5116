"""Domain models for synthetic intake test data.

Pydantic models describe what crosses the API boundary (fields, catalog
columns); plain dataclasses describe what one creation attempt writes.
Field names follow Python conventions and serialize to the camelCase keys the
browser client sends and expects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Environment(str, Enum):
    """Deployment environment; selects a database target and an API host prefix."""
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"
    Q5 = "Q5"
    PROD = "PROD"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().upper():
                    return member
        return None

    @property
    def host_prefix(self) -> str:
        """Lower-case tag used as the external API host prefix."""
        return self.value.lower()


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DataField(CamelModel):
    """One editable form field.

    Attributes:
        id: Client-side identifier
        type: Value generator type tag (names, phone, date, ...)
        property_name: Column or property the value is written under
        option: Chosen generator option (e.g. "First name", "DD-MON-YY")
        checked: Whether the field is included
        value: Literal supplied by the caller; wins over generation
        example: Sample value shown as a placeholder
    """

    id: Optional[str] = None
    type: str = Field(default="text", description="Value generator type tag")
    property_name: str = Field(default="", description="Target column or property name")
    option: str = Field(default="", description="Generator option")
    checked: bool = Field(default=True, description="Include this field")
    value: Optional[str] = Field(default=None, description="Literal value override")
    example: Optional[str] = Field(default=None, description="Example value")

    @field_validator("value", "example", mode="before")
    @classmethod
    def coerce_to_text(cls, v: Any) -> Optional[str]:
        """Accept numbers from JSON clients and keep them as text."""
        if v is None:
            return None
        return str(v)

    @property
    def key(self) -> str:
        """Row key for generated data."""
        return self.property_name or self.type

    @property
    def has_value(self) -> bool:
        return self.value is not None and self.value.strip() != ""


class ColumnMetadata(BaseModel):
    """One row of the Oracle ``ALL_TAB_COLUMNS`` catalog view."""

    table_name: str = Field(..., exclude=True, description="Owning table")
    column_name: str
    data_type: str
    data_length: Optional[int] = None
    data_precision: Optional[int] = None
    is_nullable: str = Field(default="Y", description="Y or N, as reported by the catalog")


@dataclass(frozen=True)
class IntakeCandidate:
    """Identifiers and attributes written by one creation attempt."""

    patient_number: str
    first_name: str
    last_name: str
    phone: str
    date_of_birth: str
    intake_id: int
    op_center_code: str
    plan_level_code: str

    def as_bind_params(self) -> dict[str, Any]:
        return {
            "patient_number": self.patient_number,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "dob": self.date_of_birth,
            "intake_id": self.intake_id,
            "op_center_code": self.op_center_code,
            "plan_level_code": self.plan_level_code,
        }


@dataclass
class IntakeCreationResult:
    """A verified record set together with the attempt that committed it."""

    patient_number: str
    intake_id: int
    attempts: int
    record: dict[str, Any] = field(default_factory=dict)
