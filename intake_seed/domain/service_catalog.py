"""Service definitions for the intake schema.

A service names the fixed two-table join used for lookups and the columns a
synthetic intake creation may override. Table and column names are Oracle
identifiers as stored in the catalog (upper case).
"""

from dataclasses import dataclass
from typing import Optional

PATIENT_TABLE = "TBLPATIENT"
INTAKE_PLAN_TABLE = "TBLPATINTAKEPLAN"
INTAKE_TABLE = "TBLPATINTAKE"

# Column -> IntakeCandidate attribute for every value a caller may override.
INTAKE_OVERRIDE_COLUMNS: dict[str, str] = {
    "PATIENTNUMBER": "patient_number",
    "FIRSTNAME": "first_name",
    "LASTNAME": "last_name",
    "PHONE": "phone",
    "DOB": "date_of_birth",
    "INTAKEID": "intake_id",
    "OPCENTERCODE": "op_center_code",
    "PLANLEVELCODE": "plan_level_code",
}

# Uniqueness of a record set hinges on these two.
INTAKE_KEY_COLUMNS = frozenset({"PATIENTNUMBER", "INTAKEID"})

# Constants written on every synthetic intake unless overridden.
DEFAULT_OP_CENTER_CODE = "OPC01"
DEFAULT_PLAN_LEVEL_CODE = "PL1"


@dataclass(frozen=True)
class TableRef:
    name: str
    alias: str


@dataclass(frozen=True)
class ServiceDefinition:
    """Fixed join a service queries against.

    Attributes:
        service_type: Identifier sent by the client
        label: Human-readable name
        base_table: Left side of the join
        joined_table: Right side of the join
        join_column: Column equal on both sides
        required_columns: (alias, column) pairs that must be non-null
        order_column: (alias, column) sorted descending
    """

    service_type: str
    label: str
    base_table: TableRef
    joined_table: TableRef
    join_column: str
    required_columns: tuple[tuple[str, str], ...]
    order_column: tuple[str, str]

    @property
    def tables(self) -> tuple[TableRef, ...]:
        return (self.base_table, self.joined_table)

    @property
    def table_names(self) -> list[str]:
        return [table.name for table in self.tables]


PATIENT_REST_SERVICES = ServiceDefinition(
    service_type="patient-rest-services",
    label="Patient Rest Services",
    base_table=TableRef(PATIENT_TABLE, "p"),
    joined_table=TableRef(INTAKE_TABLE, "i"),
    join_column="PATIENTNUMBER",
    required_columns=(
        ("p", "PATIENTNUMBER"),
        ("p", "FIRSTNAME"),
        ("p", "LASTNAME"),
        ("p", "DOB"),
        ("i", "INTAKEID"),
    ),
    order_column=("p", "DOB"),
)

SERVICE_CATALOG: dict[str, ServiceDefinition] = {
    PATIENT_REST_SERVICES.service_type: PATIENT_REST_SERVICES,
}


def get_service(service_type: Optional[str]) -> Optional[ServiceDefinition]:
    """Look up a service definition by its client identifier."""
    if not service_type:
        return None
    return SERVICE_CATALOG.get(service_type.strip().lower())
