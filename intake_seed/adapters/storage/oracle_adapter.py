"""Oracle Storage Adapter.

This adapter implements the StoragePort contract against the intake schema
(TBLPATIENT, TBLPATINTAKEPLAN, TBLPATINTAKE) using python-oracledb.

Security Impact:
    - Connection credentials are managed via DatabaseConfig and never logged
    - All statements use bind variables; identifiers are never interpolated here
    - Each creation attempt is a single transaction (autocommit is off)

Architecture:
    - Implements StoragePort / SessionPort (Hexagonal Architecture)
    - One adapter (and one connection pool) per environment
    - A session wraps exactly one pooled connection for one API call
    - Failures are returned as Result values, classified by error_type
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

import oracledb

from intake_seed.domain.models import ColumnMetadata, IntakeCandidate
from intake_seed.domain.ports import (
    UNIQUE_VIOLATION,
    Result,
    SessionPort,
    StorageError,
    StoragePort,
)
from intake_seed.domain.service_catalog import INTAKE_PLAN_TABLE, INTAKE_TABLE, PATIENT_TABLE
from intake_seed.infrastructure.config_manager import DatabaseConfig

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_CODE = "ORA-00001"

INSERT_PATIENT_SQL = f"""
    INSERT INTO {PATIENT_TABLE} (PATIENTNUMBER, FIRSTNAME, LASTNAME, PHONE, DOB)
    VALUES (:patient_number, :first_name, :last_name, :phone, TO_DATE(:dob, 'MM/DD/YYYY'))
"""

INSERT_INTAKE_PLAN_SQL = f"""
    INSERT INTO {INTAKE_PLAN_TABLE} (PATIENTNUMBER, INTAKEID, OPCENTERCODE, PLANLEVELCODE)
    VALUES (:patient_number, :intake_id, :op_center_code, :plan_level_code)
"""

INSERT_INTAKE_SQL = f"""
    INSERT INTO {INTAKE_TABLE} (PATIENTNUMBER, INTAKEID, OPCENTERCODE, PLANLEVELCODE, INTAKEDATE)
    VALUES (:patient_number, :intake_id, :op_center_code, :plan_level_code, SYSDATE)
"""

READ_BACK_SQL = f"""
    SELECT p.PATIENTNUMBER, p.FIRSTNAME, p.LASTNAME, p.PHONE, p.DOB,
           i.INTAKEID, i.OPCENTERCODE, i.PLANLEVELCODE, i.INTAKEDATE
    FROM {PATIENT_TABLE} p
    JOIN {INTAKE_PLAN_TABLE} ip ON ip.PATIENTNUMBER = p.PATIENTNUMBER
    JOIN {INTAKE_TABLE} i ON i.PATIENTNUMBER = ip.PATIENTNUMBER AND i.INTAKEID = ip.INTAKEID
    WHERE p.PATIENTNUMBER = :patient_number AND i.INTAKEID = :intake_id
"""

# (statement, bind names) in dependency order
_INTAKE_INSERTS = (
    (INSERT_PATIENT_SQL, ("patient_number", "first_name", "last_name", "phone", "dob")),
    (INSERT_INTAKE_PLAN_SQL, ("patient_number", "intake_id", "op_center_code", "plan_level_code")),
    (INSERT_INTAKE_SQL, ("patient_number", "intake_id", "op_center_code", "plan_level_code")),
)


def _driver_error(exc: BaseException) -> Any:
    return exc.args[0] if exc.args else None


def driver_message(exc: BaseException) -> str:
    """Driver-provided message (e.g. "ORA-00001: unique constraint ... violated")."""
    error = _driver_error(exc)
    message = getattr(error, "message", None)
    return message if message else str(exc)


def is_unique_violation(exc: BaseException) -> bool:
    """True when the driver rejected a write with ORA-00001."""
    if not isinstance(exc, oracledb.DatabaseError):
        return False
    full_code = getattr(_driver_error(exc), "full_code", None)
    if full_code:
        return full_code == UNIQUE_VIOLATION_CODE
    return UNIQUE_VIOLATION_CODE in str(exc)


class OracleSession(SessionPort):
    """Operations bound to one pooled connection.

    Parameters:
        connection: Connection acquired from the pool
        schema_owner: Owner filter for catalog queries (None searches all owners)
    """

    def __init__(self, connection, schema_owner: Optional[str] = None):
        self._conn = connection
        self.schema_owner = schema_owner

    def _rollback(self) -> None:
        try:
            self._conn.rollback()
        except oracledb.Error as e:
            logger.warning(f"Rollback failed: {driver_message(e)}")

    def _failure(self, message: str, operation: str, exc: BaseException) -> Result:
        detail = driver_message(exc)
        logger.error(f"{message}: {detail}")
        return Result.failure_result(
            StorageError(message, operation=operation, details=detail),
            error_type="StorageError"
        )

    def ping(self) -> Result[float]:
        cursor = None
        try:
            start_time = time.time()
            cursor = self._conn.cursor()
            cursor.execute("SELECT 1 FROM DUAL")
            cursor.fetchone()
            return Result.success_result(round((time.time() - start_time) * 1000, 2))
        except oracledb.Error as e:
            return self._failure("Database ping failed", "ping", e)
        finally:
            if cursor is not None:
                cursor.close()

    def fetch_table_columns(self, table_names: Sequence[str]) -> Result[list[ColumnMetadata]]:
        """List catalog columns for the given tables.

        Columns come back grouped in the order the tables were given, then by
        column id. When no schema owner is configured and a table exists under
        several owners, the first occurrence of each column wins.

        Parameters:
            table_names: Table names (case-insensitive)

        Returns:
            Result[list[ColumnMetadata]]: Columns, empty when no table matched
        """
        names = [name.upper() for name in table_names]
        if not names:
            return Result.success_result([])

        binds: dict[str, Any] = {f"t{index}": name for index, name in enumerate(names)}
        placeholders = ", ".join(f":t{index}" for index in range(len(names)))
        sql = f"""
            SELECT table_name, column_name, data_type, data_length, data_precision, nullable
            FROM all_tab_columns
            WHERE table_name IN ({placeholders})
        """
        if self.schema_owner:
            sql += " AND owner = :owner"
            binds["owner"] = self.schema_owner
        sql += " ORDER BY column_id"

        cursor = None
        try:
            cursor = self._conn.cursor()
            cursor.execute(sql, binds)
            rows = cursor.fetchall()
        except oracledb.Error as e:
            return self._failure("Failed to read column metadata", "fetch_table_columns", e)
        finally:
            if cursor is not None:
                cursor.close()

        seen = set()
        columns = []
        for table_name, column_name, data_type, data_length, data_precision, nullable in rows:
            if (table_name, column_name) in seen:
                continue
            seen.add((table_name, column_name))
            columns.append(ColumnMetadata(
                table_name=table_name,
                column_name=column_name,
                data_type=data_type,
                data_length=data_length,
                data_precision=data_precision,
                is_nullable=nullable or "Y",
            ))

        columns.sort(key=lambda column: names.index(column.table_name))
        return Result.success_result(columns)

    def fetch_column_precision(self, table_name: str, column_name: str) -> Result[Optional[int]]:
        sql = """
            SELECT data_precision
            FROM all_tab_columns
            WHERE table_name = :table_name AND column_name = :column_name
        """
        binds: dict[str, Any] = {"table_name": table_name.upper(), "column_name": column_name.upper()}
        if self.schema_owner:
            sql += " AND owner = :owner"
            binds["owner"] = self.schema_owner
        sql += " FETCH FIRST 1 ROWS ONLY"

        cursor = None
        try:
            cursor = self._conn.cursor()
            cursor.execute(sql, binds)
            row = cursor.fetchone()
            return Result.success_result(row[0] if row else None)
        except oracledb.Error as e:
            return self._failure("Failed to read column precision", "fetch_column_precision", e)
        finally:
            if cursor is not None:
                cursor.close()

    def query_one(self, sql: str, params: dict[str, Any]) -> Result[Optional[dict[str, Any]]]:
        """Execute a SELECT and return the first row keyed by column name."""
        cursor = None
        try:
            cursor = self._conn.cursor()
            cursor.execute(sql, params)
            row = cursor.fetchone()
            if row is None:
                return Result.success_result(None)
            columns = [description[0] for description in cursor.description]
            return Result.success_result(dict(zip(columns, row)))
        except oracledb.Error as e:
            return self._failure("Query failed", "query_one", e)
        finally:
            if cursor is not None:
                cursor.close()

    def persist_intake_set(self, candidate: IntakeCandidate) -> Result[None]:
        """Insert the patient, intake plan and intake rows, then commit.

        Returns:
            Result[None]: Success once committed. On failure the transaction is
            rolled back; ORA-00001 is reported as UNIQUE_VIOLATION, anything
            else as StorageError.
        """
        params = candidate.as_bind_params()
        cursor = None
        try:
            cursor = self._conn.cursor()
            for statement, bind_names in _INTAKE_INSERTS:
                cursor.execute(statement, {name: params[name] for name in bind_names})
            self._conn.commit()
            logger.debug(
                f"Committed intake set (patient_number={candidate.patient_number}, "
                f"intake_id={candidate.intake_id})"
            )
            return Result.success_result(None)

        except oracledb.Error as e:
            self._rollback()
            detail = driver_message(e)
            if is_unique_violation(e):
                return Result.failure_result(
                    StorageError("Unique constraint violated", operation="persist_intake_set", details=detail),
                    error_type=UNIQUE_VIOLATION
                )
            return self._failure("Failed to create intake data", "persist_intake_set", e)
        finally:
            if cursor is not None:
                cursor.close()

    def fetch_intake(self, patient_number: str, intake_id: int) -> Result[Optional[dict[str, Any]]]:
        return self.query_one(READ_BACK_SQL, {"patient_number": patient_number, "intake_id": intake_id})


class OracleAdapter(StoragePort):
    """Oracle implementation of StoragePort for one environment.

    The connection pool is created lazily on first use and closed by
    ``close()``; the owning StorageRegistry closes it at shutdown.

    Parameters:
        db_config: DatabaseConfig for the environment

    Example Usage:
        ```python
        adapter = OracleAdapter(config_manager.get_database_config(Environment.Q1))
        with adapter.session() as session:
            result = session.fetch_table_columns(["TBLPATIENT"])
        adapter.close()
        ```
    """

    def __init__(self, db_config: DatabaseConfig):
        self.db_config = db_config
        self._connection_pool: Optional[oracledb.ConnectionPool] = None
        self._pool_lock = threading.Lock()

    @property
    def environment(self):
        return self.db_config.environment

    def _get_connection_pool(self) -> oracledb.ConnectionPool:
        """Get or create the connection pool.

        Raises:
            StorageError: If the pool cannot be created
        """
        with self._pool_lock:
            if self._connection_pool is None:
                try:
                    self._connection_pool = oracledb.create_pool(**self.db_config.get_pool_params())
                    logger.info(
                        f"Created Oracle connection pool for {self.environment.value} "
                        f"(host={self.db_config.host or 'N/A'}, min={self.db_config.pool_min}, "
                        f"max={self.db_config.pool_max})"
                    )
                except oracledb.Error as e:
                    raise StorageError(
                        f"Failed to create Oracle connection pool for {self.environment.value}",
                        operation="connect",
                        details=driver_message(e)
                    )
            return self._connection_pool

    def _get_connection(self):
        """Acquire a connection from the pool.

        Raises:
            StorageError: If a connection cannot be obtained
        """
        pool = self._get_connection_pool()
        try:
            return pool.acquire()
        except oracledb.Error as e:
            raise StorageError(
                f"Failed to get connection for {self.environment.value}",
                operation="get_connection",
                details=driver_message(e)
            )

    def _return_connection(self, conn) -> None:
        """Release a connection to the pool; failures are logged, not raised."""
        try:
            self._get_connection_pool().release(conn)
        except (oracledb.Error, StorageError) as e:
            logger.warning(f"Error returning connection to pool: {str(e)}")

    @contextmanager
    def session(self) -> Iterator[OracleSession]:
        """Acquire one connection for the duration of the block."""
        conn = self._get_connection()
        try:
            yield OracleSession(conn, schema_owner=self.db_config.schema_owner)
        finally:
            self._return_connection(conn)

    def close(self) -> None:
        """Close the connection pool and release resources."""
        with self._pool_lock:
            if self._connection_pool is not None:
                try:
                    self._connection_pool.close(force=True)
                    logger.info(f"Closed Oracle connection pool for {self.environment.value}")
                except oracledb.Error as e:
                    logger.warning(f"Error closing connection pool: {driver_message(e)}")
                finally:
                    self._connection_pool = None
