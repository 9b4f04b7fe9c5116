"""Schema inspection service.

Reads column metadata from the Oracle catalog and turns it into form
descriptions: a plain column list for a single table, or a list of editable
fields (with an inferred generator type) for a service join.
"""

import logging
import re
from typing import Any, Optional

from intake_seed.domain.models import ColumnMetadata
from intake_seed.domain.ports import NotFoundError, Result, SessionPort, ValidationError
from intake_seed.domain.service_catalog import (
    DEFAULT_OP_CENTER_CODE,
    DEFAULT_PLAN_LEVEL_CODE,
    INTAKE_OVERRIDE_COLUMNS,
    INTAKE_TABLE,
    PATIENT_TABLE,
    ServiceDefinition,
)
from intake_seed.domain.value_generator import default_option

logger = logging.getLogger(__name__)

QUERY_MODE = "query"
CREATE_INTAKE_MODE = "create-intake"
SCHEMA_MODES = (QUERY_MODE, CREATE_INTAKE_MODE)

_TABLE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_$#]{0,127}$")

_NUMERIC_TYPES = {"NUMBER", "INTEGER", "FLOAT", "BINARY_FLOAT", "BINARY_DOUBLE"}

# Placeholders shown on the create-intake form.
_OVERRIDE_EXAMPLES = {
    "PATIENTNUMBER": "1234567890",
    "FIRSTNAME": "TESTABCDE",
    "LASTNAME": "INTAKEABCDE",
    "PHONE": "(555) 123-4567",
    "DOB": "01/31/1980",
    "INTAKEID": "123456789",
    "OPCENTERCODE": DEFAULT_OP_CENTER_CODE,
    "PLANLEVELCODE": DEFAULT_PLAN_LEVEL_CODE,
}

# Override columns -> the table whose catalog entry describes them.
_OVERRIDE_SOURCE_TABLE = {
    "PATIENTNUMBER": PATIENT_TABLE,
    "FIRSTNAME": PATIENT_TABLE,
    "LASTNAME": PATIENT_TABLE,
    "PHONE": PATIENT_TABLE,
    "DOB": PATIENT_TABLE,
    "INTAKEID": INTAKE_TABLE,
    "OPCENTERCODE": INTAKE_TABLE,
    "PLANLEVELCODE": INTAKE_TABLE,
}


def infer_field_type(column_name: str, data_type: Optional[str] = None) -> tuple[str, str]:
    """Guess the generator type tag and option for a catalog column.

    Parameters:
        column_name: Column name as stored in the catalog
        data_type: Oracle data type (VARCHAR2, NUMBER, DATE, ...)

    Returns:
        (type tag, option); falls back to ("text", "Sentence")
    """
    name = column_name.upper()
    kind = (data_type or "").upper()

    if "PHONE" in name or "FAX" in name:
        return "phone", default_option("phone")
    if "EMAIL" in name:
        return "email", default_option("email")
    if "FIRSTNAME" in name or "FIRST_NAME" in name:
        return "names", "First name"
    if "LASTNAME" in name or "LAST_NAME" in name:
        return "names", "Last name"
    if name == "DOB" or "BIRTH" in name:
        return "date", "MM/DD/YYYY"
    if kind == "DATE" or kind.startswith("TIMESTAMP") or name.endswith("DATE"):
        return "date", default_option("date")
    if "ZIP" in name or "POSTAL" in name:
        return "postal", default_option("postal")
    if "COUNTRY" in name:
        return "country", default_option("country")
    if name in ("STATE", "REGION") or name.endswith("_STATE"):
        return "region", default_option("region")
    if "ADDR" in name or "STREET" in name:
        return "address", default_option("address")
    if "AMOUNT" in name or "PRICE" in name or "COST" in name:
        return "currency", default_option("currency")
    if "NAME" in name:
        return "names", default_option("names")
    if kind in _NUMERIC_TYPES:
        return "number", default_option("number")
    if name.endswith("ID") or name.endswith("NUMBER") or name.endswith("CODE"):
        return "alphanumeric", default_option("alphanumeric")
    return "text", default_option("text")


def _form_field(index: int, column: ColumnMetadata, example: Optional[str] = None) -> dict[str, Any]:
    field_type, option = infer_field_type(column.column_name, column.data_type)
    entry: dict[str, Any] = {
        "id": str(index),
        "type": field_type,
        "propertyName": column.column_name,
        "option": option,
        "checked": True,
    }
    if example is not None:
        entry["example"] = example
    return entry


def table_schema(session: SessionPort, table_name: str) -> Result[list[dict[str, Any]]]:
    """Column list for one table.

    Returns:
        Result with ``[{column_name, data_type, data_length, data_precision, is_nullable}]``;
        a ValidationError for a malformed name, NotFoundError when the catalog has no columns
    """
    name = (table_name or "").strip()
    if not _TABLE_NAME.match(name):
        return Result.failure_result(ValidationError(f"Invalid table name: {table_name}"))

    result = session.fetch_table_columns([name])
    if result.is_failure():
        return result

    if not result.value:
        return Result.failure_result(NotFoundError(f"Table {name.upper()} not found or has no columns"))

    return Result.success_result([column.model_dump() for column in result.value])


def service_schema(
    session: SessionPort,
    service: ServiceDefinition,
    mode: str = QUERY_MODE
) -> Result[list[dict[str, Any]]]:
    """Editable form fields for a service.

    In ``query`` mode every catalog column of the joined tables becomes a
    field (duplicates such as the join column appear once). In
    ``create-intake`` mode only the overridable intake columns are listed,
    each with an example value.
    """
    if mode not in SCHEMA_MODES:
        return Result.failure_result(
            ValidationError(f"Invalid mode: {mode}", details=f"Expected one of: {', '.join(SCHEMA_MODES)}")
        )

    result = session.fetch_table_columns(service.table_names)
    if result.is_failure():
        return result

    if mode == QUERY_MODE:
        fields = []
        seen = set()
        for column in result.value:
            if column.column_name in seen:
                continue
            seen.add(column.column_name)
            fields.append(_form_field(len(fields) + 1, column))
        logger.debug(f"Built {len(fields)} query fields for {service.service_type}")
        return Result.success_result(fields)

    by_table = {(column.table_name, column.column_name): column for column in result.value}
    fields = []
    for column_name in INTAKE_OVERRIDE_COLUMNS:
        column = by_table.get((_OVERRIDE_SOURCE_TABLE[column_name], column_name))
        if column is None:
            column = ColumnMetadata(table_name=_OVERRIDE_SOURCE_TABLE[column_name], column_name=column_name, data_type="VARCHAR2")
        fields.append(_form_field(len(fields) + 1, column, example=_OVERRIDE_EXAMPLES[column_name]))
    return Result.success_result(fields)
