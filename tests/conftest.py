"""Shared in-memory storage fakes.

FakeIntakeDatabase stands in for the Oracle intake schema: it enforces the
patient number and (patient number, intake id) uniqueness the real
constraints enforce and reports collisions the way OracleSession does.
"""

import threading
from contextlib import contextmanager
from typing import Any, Optional

import pytest

from intake_seed.domain.models import ColumnMetadata, Environment, IntakeCandidate
from intake_seed.domain.ports import (
    UNIQUE_VIOLATION,
    ConfigurationError,
    Result,
    SessionPort,
    StorageError,
    StoragePort,
)

CATALOG = [
    ColumnMetadata(table_name="TBLPATIENT", column_name="PATIENTNUMBER", data_type="VARCHAR2", data_length=10),
    ColumnMetadata(table_name="TBLPATIENT", column_name="FIRSTNAME", data_type="VARCHAR2", data_length=50),
    ColumnMetadata(table_name="TBLPATIENT", column_name="LASTNAME", data_type="VARCHAR2", data_length=50),
    ColumnMetadata(table_name="TBLPATIENT", column_name="PHONE", data_type="VARCHAR2", data_length=20),
    ColumnMetadata(table_name="TBLPATIENT", column_name="DOB", data_type="DATE", data_length=7),
    ColumnMetadata(table_name="TBLPATINTAKE", column_name="PATIENTNUMBER", data_type="VARCHAR2", data_length=10),
    ColumnMetadata(table_name="TBLPATINTAKE", column_name="INTAKEID", data_type="NUMBER", data_length=22,
                   data_precision=9, is_nullable="N"),
    ColumnMetadata(table_name="TBLPATINTAKE", column_name="OPCENTERCODE", data_type="VARCHAR2", data_length=10),
    ColumnMetadata(table_name="TBLPATINTAKE", column_name="PLANLEVELCODE", data_type="VARCHAR2", data_length=10),
    ColumnMetadata(table_name="TBLPATINTAKE", column_name="INTAKEDATE", data_type="DATE", data_length=7),
]


class FakeIntakeDatabase:
    """In-memory intake schema shared by any number of sessions."""

    def __init__(self, catalog=None, intake_precision: Optional[int] = 9):
        self.catalog = list(CATALOG if catalog is None else catalog)
        self.intake_precision = intake_precision
        self.patients: dict[str, dict[str, Any]] = {}
        self.intakes: dict[tuple[str, int], dict[str, Any]] = {}
        self.persist_calls: list[IntakeCandidate] = []
        self.query_calls: list[tuple[str, dict]] = []
        self.query_result: Optional[dict[str, Any]] = None
        self.persist_failure: Optional[Result] = None
        self.read_back_override: Any = None
        self._lock = threading.Lock()

    def seed_patient(self, patient_number: str) -> None:
        self.patients[patient_number] = {"PATIENTNUMBER": patient_number}

    def seed_intake(self, patient_number: str, intake_id: int) -> None:
        self.seed_patient(patient_number)
        self.intakes[(patient_number, intake_id)] = {"PATIENTNUMBER": patient_number, "INTAKEID": intake_id}


class FakeSession(SessionPort):
    def __init__(self, db: FakeIntakeDatabase):
        self.db = db

    def ping(self) -> Result[float]:
        return Result.success_result(1.5)

    def fetch_table_columns(self, table_names) -> Result[list[ColumnMetadata]]:
        names = [name.upper() for name in table_names]
        columns = [column for column in self.db.catalog if column.table_name in names]
        columns.sort(key=lambda column: names.index(column.table_name))
        return Result.success_result(columns)

    def fetch_column_precision(self, table_name, column_name) -> Result[Optional[int]]:
        return Result.success_result(self.db.intake_precision)

    def query_one(self, sql, params) -> Result[Optional[dict[str, Any]]]:
        self.db.query_calls.append((sql, params))
        return Result.success_result(self.db.query_result)

    def persist_intake_set(self, candidate: IntakeCandidate) -> Result[None]:
        with self.db._lock:
            self.db.persist_calls.append(candidate)
            if self.db.persist_failure is not None:
                return self.db.persist_failure
            key = (candidate.patient_number, candidate.intake_id)
            if candidate.patient_number in self.db.patients or key in self.db.intakes:
                return Result.failure_result(
                    StorageError(
                        "Unique constraint violated",
                        operation="persist_intake_set",
                        details="ORA-00001: unique constraint (TBLPATIENT_PK) violated"
                    ),
                    error_type=UNIQUE_VIOLATION
                )
            self.db.patients[candidate.patient_number] = {
                "PATIENTNUMBER": candidate.patient_number,
                "FIRSTNAME": candidate.first_name,
                "LASTNAME": candidate.last_name,
                "PHONE": candidate.phone,
                "DOB": candidate.date_of_birth,
            }
            self.db.intakes[key] = {
                "INTAKEID": candidate.intake_id,
                "OPCENTERCODE": candidate.op_center_code,
                "PLANLEVELCODE": candidate.plan_level_code,
            }
            return Result.success_result(None)

    def fetch_intake(self, patient_number, intake_id) -> Result[Optional[dict[str, Any]]]:
        if self.db.read_back_override is not None:
            return self.db.read_back_override
        patient = self.db.patients.get(patient_number)
        intake = self.db.intakes.get((patient_number, intake_id))
        if patient is None or intake is None:
            return Result.success_result(None)
        return Result.success_result({**patient, **intake})


class FakeStorage(StoragePort):
    def __init__(self, db: FakeIntakeDatabase):
        self.db = db
        self.sessions_opened = 0
        self.sessions_closed = 0
        self.closed = False

    @contextmanager
    def session(self):
        self.sessions_opened += 1
        try:
            yield FakeSession(self.db)
        finally:
            self.sessions_closed += 1

    def close(self) -> None:
        self.closed = True


class FakeRegistry:
    """Registry stand-in serving one FakeStorage per configured environment."""

    def __init__(self, storages: dict[Environment, FakeStorage]):
        self.storages = storages

    def get(self, environment: Environment):
        if environment not in self.storages:
            raise ConfigurationError(f"No database configured for environment {environment.value}")
        return self.storages[environment]

    def configured_environments(self):
        return [environment for environment in Environment if environment in self.storages]

    def close_all(self) -> None:
        for storage in self.storages.values():
            storage.close()


@pytest.fixture
def fake_db():
    return FakeIntakeDatabase()


@pytest.fixture
def fake_session(fake_db):
    return FakeSession(fake_db)


@pytest.fixture
def fake_storage(fake_db):
    return FakeStorage(fake_db)


@pytest.fixture
def fake_registry(fake_storage):
    return FakeRegistry({Environment.Q1: fake_storage})
