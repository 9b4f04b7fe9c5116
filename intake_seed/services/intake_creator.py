"""Synthetic patient/intake creation with retry and read-back verification.

Each attempt generates fresh identifiers and writes the patient, intake plan
and intake rows in one transaction. A uniqueness violation (ORA-00001)
discards the candidate and tries again, up to a fixed number of attempts,
unless the caller supplied the patient number (DuplicateRecordError at once);
every other failure is returned at once. A committed record set is read back
by its keys before success is reported.

Security Impact:
    - Writes synthetic values only; caller overrides are limited to known columns
    - All values are bound, never interpolated into SQL
"""

import logging
import random
import re
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional, Union

from intake_seed.domain.models import DataField, IntakeCandidate, IntakeCreationResult
from intake_seed.domain.ports import (
    UNIQUE_VIOLATION,
    DuplicateRecordError,
    Result,
    RetryExhaustedError,
    SessionPort,
    ValidationError,
    VerificationError,
)
from intake_seed.domain.service_catalog import (
    DEFAULT_OP_CENTER_CODE,
    DEFAULT_PLAN_LEVEL_CODE,
    INTAKE_KEY_COLUMNS,
    INTAKE_OVERRIDE_COLUMNS,
    INTAKE_TABLE,
)
from intake_seed.domain.value_generator import format_date, generate_phone, random_letters

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 50

PATIENT_NUMBER_DIGITS = 10
_PATIENT_NUMBER = re.compile(rf"\d{{{PATIENT_NUMBER_DIGITS}}}")
DEFAULT_INTAKE_ID_DIGITS = 9
MAX_INTAKE_ID_DIGITS = 18

DOB_FORMAT = "MM/DD/YYYY"
_DOB_PARSE_FORMAT = "%m/%d/%Y"
_DOB_EARLIEST = date(1940, 1, 1)
_DOB_LATEST = date(2005, 12, 31)

OverrideInput = Union[None, Mapping[str, Any], Iterable[Union[DataField, Mapping[str, Any]]]]


def intake_id_digits(precision: Optional[int]) -> int:
    """Digits for a generated intake id given the catalog precision of INTAKEID."""
    if not precision or precision <= 0:
        return DEFAULT_INTAKE_ID_DIGITS
    return min(precision, MAX_INTAKE_ID_DIGITS)


def override_entries(data_fields: OverrideInput) -> list[tuple[str, Any]]:
    if data_fields is None:
        return []
    if isinstance(data_fields, Mapping):
        return list(data_fields.items())

    entries = []
    for item in data_fields:
        if isinstance(item, DataField):
            entries.append((item.key, item.value))
        elif isinstance(item, Mapping) and ("propertyName" in item or "property_name" in item):
            entries.append((item.get("propertyName") or item.get("property_name"), item.get("value")))
        elif isinstance(item, Mapping):
            entries.extend(item.items())
        else:
            raise ValidationError(f"Unsupported dataFields entry: {item!r}")
    return entries


def normalize_overrides(data_fields: OverrideInput) -> dict[str, str]:
    """Collect caller overrides keyed by upper-case column name.

    Accepts a mapping, a list of single-key mappings, or a list of fields.
    Blank values mean "generate this one" and are dropped.

    Raises:
        ValidationError: A key is not an overridable column, or a value has the wrong shape
    """
    overrides: dict[str, str] = {}
    unknown = []
    for key, value in override_entries(data_fields):
        column = str(key or "").strip().upper()
        if column not in INTAKE_OVERRIDE_COLUMNS:
            unknown.append(str(key))
            continue
        if value is None or str(value).strip() == "":
            continue
        overrides[column] = str(value).strip()

    if unknown:
        raise ValidationError(
            "Unknown dataFields column(s)",
            details=f"{', '.join(unknown)}; allowed: {', '.join(INTAKE_OVERRIDE_COLUMNS)}"
        )

    if "PATIENTNUMBER" in overrides and not _PATIENT_NUMBER.fullmatch(overrides["PATIENTNUMBER"]):
        raise ValidationError(
            f"PATIENTNUMBER must be {PATIENT_NUMBER_DIGITS} digits", details=overrides["PATIENTNUMBER"]
        )
    if "INTAKEID" in overrides and not overrides["INTAKEID"].isdigit():
        raise ValidationError("INTAKEID must be numeric", details=overrides["INTAKEID"])
    if "DOB" in overrides:
        try:
            datetime.strptime(overrides["DOB"], _DOB_PARSE_FORMAT)
        except ValueError:
            raise ValidationError(f"DOB must be formatted {DOB_FORMAT}", details=overrides["DOB"])
    return overrides


class IntakeCreator:
    """Creates one verified patient/intake record set per call.

    Parameters:
        max_attempts: Upper bound on creation attempts
        rng: Random source (seed it for reproducible identifiers)
        op_center_code: Default OPCENTERCODE
        plan_level_code: Default PLANLEVELCODE

    Example Usage:
        ```python
        creator = IntakeCreator(max_attempts=50)
        with adapter.session() as session:
            result = creator.create(session, {"FIRSTNAME": "TESTJANE"})
        if result.is_success():
            print(result.value.record["PATIENTNUMBER"])
        ```
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        rng: Optional[random.Random] = None,
        op_center_code: str = DEFAULT_OP_CENTER_CODE,
        plan_level_code: str = DEFAULT_PLAN_LEVEL_CODE
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()
        self.op_center_code = op_center_code
        self.plan_level_code = plan_level_code

    def _date_of_birth(self) -> str:
        span = (_DOB_LATEST - _DOB_EARLIEST).days
        return format_date(_DOB_EARLIEST + timedelta(days=self.rng.randint(0, span)), DOB_FORMAT)

    def _number(self, digits: int) -> int:
        return self.rng.randint(10 ** (digits - 1), 10 ** digits - 1)

    def generate_candidate(
        self,
        intake_digits: int = DEFAULT_INTAKE_ID_DIGITS,
        overrides: Optional[Mapping[str, str]] = None
    ) -> IntakeCandidate:
        """Generate one attempt's values; overrides replace the generated ones."""
        overrides = overrides or {}
        return IntakeCandidate(
            patient_number=overrides.get("PATIENTNUMBER") or str(self._number(PATIENT_NUMBER_DIGITS)),
            first_name=overrides.get("FIRSTNAME") or f"TEST{random_letters(5, self.rng)}",
            last_name=overrides.get("LASTNAME") or f"INTAKE{random_letters(5, self.rng)}",
            phone=overrides.get("PHONE") or generate_phone("", self.rng),
            date_of_birth=overrides.get("DOB") or self._date_of_birth(),
            intake_id=int(overrides["INTAKEID"]) if "INTAKEID" in overrides else self._number(intake_digits),
            op_center_code=overrides.get("OPCENTERCODE") or self.op_center_code,
            plan_level_code=overrides.get("PLANLEVELCODE") or self.plan_level_code,
        )

    def _verify(self, session: SessionPort, candidate: IntakeCandidate, attempt: int) -> Result[IntakeCreationResult]:
        read_back = session.fetch_intake(candidate.patient_number, candidate.intake_id)
        if read_back.is_failure():
            return Result.failure_result(
                VerificationError(
                    "Intake data was committed but could not be read back",
                    details=(read_back.error_details or {}).get("details") or read_back.error
                )
            )

        row = read_back.value
        if (
            not row
            or str(row.get("PATIENTNUMBER")) != candidate.patient_number
            or str(row.get("INTAKEID")) != str(candidate.intake_id)
        ):
            return Result.failure_result(
                VerificationError(
                    "Read-back verification failed",
                    details=f"PATIENTNUMBER={candidate.patient_number}, INTAKEID={candidate.intake_id}"
                )
            )

        logger.info(
            f"Created intake PATIENTNUMBER={candidate.patient_number} INTAKEID={candidate.intake_id} "
            f"on attempt {attempt}"
        )
        return Result.success_result(IntakeCreationResult(
            patient_number=candidate.patient_number,
            intake_id=candidate.intake_id,
            attempts=attempt,
            record=dict(row),
        ))

    def create(self, session: SessionPort, data_fields: OverrideInput = None) -> Result[IntakeCreationResult]:
        """Create and verify one record set.

        Parameters:
            session: Open database session; used sequentially for every attempt
            data_fields: Caller overrides (see normalize_overrides)

        Returns:
            Result[IntakeCreationResult]. Failures carry one of ValidationError,
            DuplicateRecordError, RetryExhaustedError, VerificationError or
            StorageError as ``error_type``.
        """
        try:
            overrides = normalize_overrides(data_fields)
        except ValidationError as e:
            return Result.failure_result(e)

        precision = session.fetch_column_precision(INTAKE_TABLE, "INTAKEID")
        if precision.is_failure():
            return precision
        digits = intake_id_digits(precision.value)

        keys_fixed = INTAKE_KEY_COLUMNS.issubset(overrides)
        # A supplied patient number is reused on every attempt; its collisions
        # are final.
        patient_fixed = "PATIENTNUMBER" in overrides
        last_detail = None

        for attempt in range(1, self.max_attempts + 1):
            candidate = self.generate_candidate(digits, overrides)
            persisted = session.persist_intake_set(candidate)

            if persisted.is_success():
                return self._verify(session, candidate, attempt)

            if persisted.error_type != UNIQUE_VIOLATION:
                logger.error(f"Intake creation failed on attempt {attempt}: {persisted.error}")
                return persisted

            last_detail = (persisted.error_details or {}).get("details")
            if patient_fixed:
                if keys_fixed:
                    message = (
                        f"Record with PATIENTNUMBER {candidate.patient_number} and "
                        f"INTAKEID {candidate.intake_id} already exists"
                    )
                else:
                    message = f"Record with PATIENTNUMBER {candidate.patient_number} already exists"
                logger.warning(f"{message}; not retrying")
                return Result.failure_result(DuplicateRecordError(message, details=last_detail))

            logger.warning(
                f"Unique constraint violation on attempt {attempt}/{self.max_attempts} "
                f"(PATIENTNUMBER={candidate.patient_number}, INTAKEID={candidate.intake_id}); retrying"
            )

        logger.error(f"Intake creation exhausted {self.max_attempts} attempts")
        return Result.failure_result(
            RetryExhaustedError(self.max_attempts, details=last_detail),
            error_details={"attempts": self.max_attempts}
        )
