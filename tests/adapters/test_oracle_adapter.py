"""Test suite for the Oracle adapter using a mocked connection pool.

No database is required: ``oracledb.create_pool`` is patched so every
statement lands on MagicMock connections and cursors.

Security Impact:
    - Verifies failed attempts are rolled back
    - Verifies connections are returned to the pool on every path
"""

from unittest.mock import MagicMock, Mock, patch

import oracledb
import pytest
from pydantic import SecretStr

from intake_seed.adapters.storage.oracle_adapter import (
    INSERT_INTAKE_PLAN_SQL,
    INSERT_INTAKE_SQL,
    INSERT_PATIENT_SQL,
    OracleAdapter,
    is_unique_violation,
)
from intake_seed.domain.models import Environment, IntakeCandidate
from intake_seed.domain.ports import UNIQUE_VIOLATION, StorageError
from intake_seed.infrastructure.config_manager import DatabaseConfig


def _driver_error(exc_class, full_code, message):
    return exc_class(Mock(full_code=full_code, message=message))


@pytest.fixture
def mock_oracledb():
    """Patch pool creation; yields the pool, connection and cursor mocks."""
    with patch("intake_seed.adapters.storage.oracle_adapter.oracledb.create_pool") as mock_create_pool:
        mock_pool = MagicMock()
        mock_conn = MagicMock()
        mock_cursor = MagicMock()
        mock_conn.cursor.return_value = mock_cursor
        mock_pool.acquire.return_value = mock_conn
        mock_create_pool.return_value = mock_pool

        yield {
            "create_pool": mock_create_pool,
            "pool": mock_pool,
            "conn": mock_conn,
            "cursor": mock_cursor,
        }


@pytest.fixture
def db_config():
    return DatabaseConfig(
        environment=Environment.Q1,
        dsn="q1-db.example.com:1521/INTAKE",
        username="seed_user",
        password=SecretStr("s3cret"),
        schema_owner="intake",
    )


@pytest.fixture
def adapter(db_config):
    return OracleAdapter(db_config)


@pytest.fixture
def candidate():
    return IntakeCandidate(
        patient_number="1234567890",
        first_name="TESTABCDE",
        last_name="INTAKEABCDE",
        phone="(555) 123-4567",
        date_of_birth="01/31/1980",
        intake_id=123456789,
        op_center_code="OPC01",
        plan_level_code="PL1",
    )


class TestUniqueViolation:
    def test_ora_00001_is_unique_violation(self):
        error = _driver_error(oracledb.IntegrityError, "ORA-00001", "ORA-00001: unique constraint (PK) violated")
        assert is_unique_violation(error)

    def test_other_integrity_error_is_not(self):
        error = _driver_error(oracledb.IntegrityError, "ORA-02291", "ORA-02291: integrity constraint violated")
        assert not is_unique_violation(error)

    def test_message_fallback(self):
        assert is_unique_violation(oracledb.DatabaseError("ORA-00001: unique constraint violated"))

    def test_non_driver_error(self):
        assert not is_unique_violation(ValueError("ORA-00001"))


class TestPoolLifecycle:
    def test_pool_created_lazily_with_config(self, adapter, mock_oracledb):
        mock_oracledb["create_pool"].assert_not_called()

        with adapter.session():
            pass

        mock_oracledb["create_pool"].assert_called_once_with(
            user="seed_user",
            password="s3cret",
            dsn="q1-db.example.com:1521/INTAKE",
            min=2,
            max=10,
            increment=1,
        )

    def test_pool_reused_across_sessions(self, adapter, mock_oracledb):
        with adapter.session():
            pass
        with adapter.session():
            pass
        assert mock_oracledb["create_pool"].call_count == 1

    def test_connection_released_when_block_raises(self, adapter, mock_oracledb):
        with pytest.raises(RuntimeError):
            with adapter.session():
                raise RuntimeError("boom")
        mock_oracledb["pool"].release.assert_called_once_with(mock_oracledb["conn"])

    def test_release_error_is_logged_not_raised(self, adapter, mock_oracledb):
        mock_oracledb["pool"].release.side_effect = oracledb.InterfaceError("DPY-1001: not connected")
        with adapter.session() as session:
            assert session.ping().is_success()

    def test_pool_creation_failure_is_storage_error(self, adapter, mock_oracledb):
        mock_oracledb["create_pool"].side_effect = oracledb.DatabaseError("ORA-12541: no listener")
        with pytest.raises(StorageError) as exc_info:
            with adapter.session():
                pass
        assert "ORA-12541" in exc_info.value.details

    def test_close(self, adapter, mock_oracledb):
        with adapter.session():
            pass
        adapter.close()
        mock_oracledb["pool"].close.assert_called_once_with(force=True)


class TestSessionOperations:
    def test_fetch_table_columns_filters_by_owner(self, adapter, mock_oracledb):
        mock_oracledb["cursor"].fetchall.return_value = [
            ("TBLPATINTAKE", "INTAKEID", "NUMBER", 22, 9, "N"),
            ("TBLPATIENT", "PATIENTNUMBER", "VARCHAR2", 10, None, "N"),
            ("TBLPATIENT", "PATIENTNUMBER", "VARCHAR2", 10, None, "N"),
        ]

        with adapter.session() as session:
            result = session.fetch_table_columns(["tblpatient", "TBLPATINTAKE"])

        sql, binds = mock_oracledb["cursor"].execute.call_args[0]
        assert "owner = :owner" in sql
        assert binds == {"t0": "TBLPATIENT", "t1": "TBLPATINTAKE", "owner": "INTAKE"}
        assert [(c.table_name, c.column_name) for c in result.value] == [
            ("TBLPATIENT", "PATIENTNUMBER"),
            ("TBLPATINTAKE", "INTAKEID"),
        ]
        assert result.value[1].data_precision == 9

    def test_query_one_maps_columns(self, adapter, mock_oracledb):
        cursor = mock_oracledb["cursor"]
        cursor.description = [("PATIENTNUMBER",), ("INTAKEID",)]
        cursor.fetchone.return_value = ("1234567890", 42)

        with adapter.session() as session:
            result = session.query_one("SELECT 1 FROM DUAL", {})

        assert result.value == {"PATIENTNUMBER": "1234567890", "INTAKEID": 42}

    def test_query_one_no_rows(self, adapter, mock_oracledb):
        mock_oracledb["cursor"].fetchone.return_value = None
        with adapter.session() as session:
            assert session.query_one("SELECT 1 FROM DUAL", {}).value is None

    def test_persist_inserts_three_rows_and_commits(self, adapter, mock_oracledb, candidate):
        with adapter.session() as session:
            result = session.persist_intake_set(candidate)

        assert result.is_success()
        statements = [c.args[0] for c in mock_oracledb["cursor"].execute.call_args_list]
        assert statements == [INSERT_PATIENT_SQL, INSERT_INTAKE_PLAN_SQL, INSERT_INTAKE_SQL]
        patient_binds = mock_oracledb["cursor"].execute.call_args_list[0].args[1]
        assert patient_binds == {
            "patient_number": "1234567890",
            "first_name": "TESTABCDE",
            "last_name": "INTAKEABCDE",
            "phone": "(555) 123-4567",
            "dob": "01/31/1980",
        }
        mock_oracledb["conn"].commit.assert_called_once()
        mock_oracledb["conn"].rollback.assert_not_called()

    def test_persist_unique_violation_rolls_back(self, adapter, mock_oracledb, candidate):
        mock_oracledb["cursor"].execute.side_effect = [
            None,
            _driver_error(oracledb.IntegrityError, "ORA-00001", "ORA-00001: unique constraint (PLAN_PK) violated"),
        ]

        with adapter.session() as session:
            result = session.persist_intake_set(candidate)

        assert result.error_type == UNIQUE_VIOLATION
        assert "ORA-00001" in result.error_details["details"]
        mock_oracledb["conn"].rollback.assert_called_once()
        mock_oracledb["conn"].commit.assert_not_called()

    def test_persist_other_error_is_storage_error(self, adapter, mock_oracledb, candidate):
        mock_oracledb["cursor"].execute.side_effect = _driver_error(
            oracledb.IntegrityError, "ORA-02291", "ORA-02291: integrity constraint violated - parent key not found"
        )

        with adapter.session() as session:
            result = session.persist_intake_set(candidate)

        assert result.error_type == "StorageError"
        assert "ORA-02291" in result.error_details["details"]
        mock_oracledb["conn"].rollback.assert_called_once()

    def test_fetch_intake_binds_keys(self, adapter, mock_oracledb):
        cursor = mock_oracledb["cursor"]
        cursor.description = [("PATIENTNUMBER",), ("INTAKEID",)]
        cursor.fetchone.return_value = ("1234567890", 123456789)

        with adapter.session() as session:
            result = session.fetch_intake("1234567890", 123456789)

        assert cursor.execute.call_args.args[1] == {"patient_number": "1234567890", "intake_id": 123456789}
        assert result.value["INTAKEID"] == 123456789

    def test_column_precision(self, adapter, mock_oracledb):
        mock_oracledb["cursor"].fetchone.return_value = (10,)
        with adapter.session() as session:
            assert session.fetch_column_precision("TBLPATINTAKE", "INTAKEID").value == 10
