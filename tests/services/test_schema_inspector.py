"""Tests for table and service schema descriptions."""

import pytest

from intake_seed.domain.service_catalog import INTAKE_OVERRIDE_COLUMNS, PATIENT_REST_SERVICES
from intake_seed.services.schema_inspector import infer_field_type, service_schema, table_schema


class TestInferFieldType:
    @pytest.mark.parametrize("column,data_type,expected", [
        ("PHONE", "VARCHAR2", ("phone", "(###) ###-####")),
        ("FIRSTNAME", "VARCHAR2", ("names", "First name")),
        ("LASTNAME", "VARCHAR2", ("names", "Last name")),
        ("DOB", "DATE", ("date", "MM/DD/YYYY")),
        ("INTAKEDATE", "DATE", ("date", "DD-MON-YY")),
        ("EMAIL_ADDRESS", "VARCHAR2", ("email", "Standard")),
        ("ZIPCODE", "VARCHAR2", ("postal", "5 digit")),
        ("INTAKEID", "NUMBER", ("number", "1-100")),
        ("OPCENTERCODE", "VARCHAR2", ("alphanumeric", "10 chars")),
        ("COMMENTS", "VARCHAR2", ("text", "Sentence")),
    ])
    def test_inference(self, column, data_type, expected):
        assert infer_field_type(column, data_type) == expected


class TestTableSchema:
    def test_lists_catalog_columns(self, fake_session):
        result = table_schema(fake_session, "tblpatient")

        assert result.is_success()
        assert result.value[0] == {
            "column_name": "PATIENTNUMBER",
            "data_type": "VARCHAR2",
            "data_length": 10,
            "data_precision": None,
            "is_nullable": "Y",
        }
        assert len(result.value) == 5

    def test_missing_table_is_not_found(self, fake_session):
        result = table_schema(fake_session, "TBLMISSING")
        assert result.error_type == "NotFoundError"

    def test_malformed_name_is_rejected(self, fake_session):
        result = table_schema(fake_session, "TBLPATIENT; DROP TABLE X")
        assert result.error_type == "ValidationError"


class TestServiceSchema:
    def test_query_mode_lists_join_columns_once(self, fake_session):
        result = service_schema(fake_session, PATIENT_REST_SERVICES, "query")

        names = [entry["propertyName"] for entry in result.value]
        assert names.count("PATIENTNUMBER") == 1
        assert "INTAKEID" in names and "DOB" in names
        first = result.value[0]
        assert set(first) == {"id", "type", "propertyName", "option", "checked"}
        assert first["checked"] is True

    def test_create_intake_mode_lists_override_columns(self, fake_session):
        result = service_schema(fake_session, PATIENT_REST_SERVICES, "create-intake")

        assert [entry["propertyName"] for entry in result.value] == list(INTAKE_OVERRIDE_COLUMNS)
        assert all("example" in entry for entry in result.value)

    def test_unknown_mode(self, fake_session):
        result = service_schema(fake_session, PATIENT_REST_SERVICES, "delete")
        assert result.error_type == "ValidationError"
