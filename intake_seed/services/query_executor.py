"""Single-row lookup over a service's fixed join.

The caller picks the projection and equality filters by column name. Both
are checked against the catalog columns of the joined tables, so identifiers
reaching the SQL text are always known catalog names; filter values are
always bind variables.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from intake_seed.domain.models import ColumnMetadata
from intake_seed.domain.ports import Result, SessionPort, ValidationError
from intake_seed.domain.service_catalog import ServiceDefinition

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data found"


@dataclass(frozen=True)
class QueryOutcome:
    """At most one row, plus the message shown to the caller."""

    row: Optional[dict[str, Any]]
    message: str


def build_allow_list(service: ServiceDefinition, columns: Sequence[ColumnMetadata]) -> dict[str, str]:
    """Map each known column name to the alias of the first table that has it.

    The base table wins for columns present on both sides of the join.
    """
    allow_list: dict[str, str] = {}
    for table in service.tables:
        for column in columns:
            if column.table_name == table.name:
                allow_list.setdefault(column.column_name, table.alias)
    return allow_list


def _qualified(alias: str, column: str) -> str:
    return f'{alias}."{column}"'


class QueryExecutor:
    """Builds and runs the lookup query for one service.

    Parameters:
        service: Fixed join definition
    """

    def __init__(self, service: ServiceDefinition):
        self.service = service

    def _resolve(self, name: str, allow_list: Mapping[str, str]) -> Optional[str]:
        key = (name or "").strip().upper()
        alias = allow_list.get(key)
        return _qualified(alias, key) if alias else None

    def build_query(
        self,
        selected_columns: Sequence[str],
        filters: Optional[Mapping[str, Any]],
        allow_list: Mapping[str, str]
    ) -> tuple[str, dict[str, Any]]:
        """Compose the SELECT text and its bind parameters.

        Parameters:
            selected_columns: Projection, in order; duplicates are dropped
            filters: Column -> value equality predicates; blank values are ignored
            allow_list: Known column -> table alias

        Returns:
            (sql, binds)

        Raises:
            ValidationError: Empty projection or an unknown column name
        """
        if not selected_columns:
            raise ValidationError("selectedColumnNames must contain at least one column")

        unknown = [name for name in selected_columns if self._resolve(name, allow_list) is None]
        unknown += [name for name in (filters or {}) if self._resolve(name, allow_list) is None]
        if unknown:
            raise ValidationError(
                "Unknown column name(s)",
                details=", ".join(sorted(set(str(name) for name in unknown)))
            )

        projection = []
        for name in selected_columns:
            qualified = self._resolve(name, allow_list)
            if qualified not in projection:
                projection.append(qualified)

        base, joined = self.service.base_table, self.service.joined_table
        join = self.service.join_column
        predicates = [f"{_qualified(alias, column)} IS NOT NULL" for alias, column in self.service.required_columns]

        binds: dict[str, Any] = {}
        for name, value in (filters or {}).items():
            if value is None or str(value).strip() == "":
                continue
            bind_name = f"f{len(binds)}"
            predicates.append(f"{self._resolve(name, allow_list)} = :{bind_name}")
            binds[bind_name] = str(value).strip()

        order_alias, order_column = self.service.order_column
        sql = (
            f"SELECT {', '.join(projection)} "
            f"FROM {base.name} {base.alias} "
            f"JOIN {joined.name} {joined.alias} "
            f"ON {_qualified(base.alias, join)} = {_qualified(joined.alias, join)} "
            f"WHERE {' AND '.join(predicates)} "
            f"ORDER BY {_qualified(order_alias, order_column)} DESC "
            f"FETCH FIRST 1 ROWS ONLY"
        )
        return sql, binds

    def execute(
        self,
        session: SessionPort,
        selected_columns: Sequence[str],
        filters: Optional[Mapping[str, Any]] = None
    ) -> Result[QueryOutcome]:
        """Run the lookup.

        Returns:
            Result[QueryOutcome]: The first matching row, or ``row=None`` with
            NO_DATA_MESSAGE when nothing matched
        """
        columns_result = session.fetch_table_columns(self.service.table_names)
        if columns_result.is_failure():
            return columns_result

        allow_list = build_allow_list(self.service, columns_result.value)
        try:
            sql, binds = self.build_query(selected_columns, filters, allow_list)
        except ValidationError as e:
            return Result.failure_result(e)

        logger.debug(f"Executing {self.service.service_type} lookup with {len(binds)} filter(s)")
        row_result = session.query_one(sql, binds)
        if row_result.is_failure():
            return row_result

        if row_result.value is None:
            return Result.success_result(QueryOutcome(row=None, message=NO_DATA_MESSAGE))
        return Result.success_result(
            QueryOutcome(row=row_result.value, message=f"Data fetched for {self.service.service_type}")
        )
