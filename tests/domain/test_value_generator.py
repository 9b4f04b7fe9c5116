"""Tests for the synthetic value generator.

Generation is random, so these tests check shapes with a seeded source
rather than exact values.
"""

import random
import re
from datetime import date

import pytest

from intake_seed.domain.models import DataField
from intake_seed.domain.value_generator import (
    DATA_TYPES,
    default_option,
    format_date,
    generate_phone,
    generate_rows,
    generate_value,
)


@pytest.fixture
def rng():
    return random.Random(1234)


class TestValueShapes:
    """Each type tag produces values of its documented shape."""

    def test_default_phone_shape(self, rng):
        for _ in range(50):
            assert re.fullmatch(r"\(\d{3}\) \d{3}-\d{4}", generate_value("phone", "", rng))

    @pytest.mark.parametrize("option,pattern", [
        ("+1 ###-###-####", r"\+1 \d{3}-\d{3}-\d{4}"),
        ("+44 #### ######", r"\+44 \d{4} \d{6}"),
        ("###-####", r"\d{3}-\d{4}"),
    ])
    def test_phone_options(self, rng, option, pattern):
        assert re.fullmatch(pattern, generate_phone(option, rng))

    def test_default_date_shape(self, rng):
        for _ in range(50):
            assert re.fullmatch(r"\d{2}-[A-Z]{3}-\d{2}", generate_value("date", "", rng))

    @pytest.mark.parametrize("option,pattern", [
        ("YYYY-MM-DD", r"\d{4}-\d{2}-\d{2}"),
        ("MM/DD/YYYY", r"\d{2}/\d{2}/\d{4}"),
        ("DD/MM/YYYY", r"\d{2}/\d{2}/\d{4}"),
    ])
    def test_date_options(self, rng, option, pattern):
        assert re.fullmatch(pattern, generate_value("date", option, rng))

    def test_currency_has_symbol_and_two_decimals(self, rng):
        for option, symbol in [("USD", "$"), ("EUR", "€"), ("GBP", "£"), ("JPY", "¥")]:
            value = generate_value("currency", option, rng)
            assert value.startswith(symbol)
            assert re.fullmatch(r"\d+\.\d{2}", value[len(symbol):])
            assert 1.0 <= float(value[len(symbol):]) <= 999.99

    def test_email_shape(self, rng):
        assert re.fullmatch(r"[a-z]+\d{1,3}@[a-z.]+", generate_value("email", "Standard", rng))

    def test_names_options(self, rng):
        assert " " in generate_value("names", "Full name", rng)
        assert " " not in generate_value("names", "First name", rng)
        assert " " not in generate_value("names", "Last name", rng)

    def test_number_range(self, rng):
        values = [int(generate_value("number", "1-100", rng)) for _ in range(200)]
        assert min(values) >= 1 and max(values) <= 100

    def test_subscriber_id_and_postal(self, rng):
        assert re.fullmatch(r"[A-Z]{3}\d{7}", generate_value("subscriber_id", "", rng))
        assert re.fullmatch(r"\d{5}", generate_value("postal", "", rng))

    def test_password_length(self, rng):
        assert len(generate_value("password", "16 chars", rng)) == 16
        assert len(generate_value("password", "", rng)) == 8

    def test_credit_card_shape(self, rng):
        assert re.fullmatch(r"4\d{3}-\d{4}-\d{4}-\d{4}", generate_value("creditcard", "Visa", rng))

    def test_every_listed_type_generates_text(self, rng):
        for tag in DATA_TYPES:
            assert isinstance(generate_value(tag, default_option(tag), rng), str)


class TestFallbacks:
    def test_unknown_type_yields_empty_string(self, rng):
        assert generate_value("no-such-type", "", rng) == ""

    def test_constant_yields_empty_string(self, rng):
        assert generate_value("constant", "", rng) == ""

    def test_same_seed_same_values(self):
        first = [generate_value("names", "", random.Random(7)) for _ in range(3)]
        second = [generate_value("names", "", random.Random(7)) for _ in range(3)]
        assert first == second


class TestFormatDate:
    def test_oracle_style_month(self):
        assert format_date(date(2024, 3, 5), "DD-MON-YY") == "05-MAR-24"

    def test_us_format(self):
        assert format_date(date(1985, 12, 1), "MM/DD/YYYY") == "12/01/1985"


class TestGenerateRows:
    def test_only_checked_fields_are_included(self, rng):
        fields = [
            DataField(type="names", property_name="name", checked=True),
            DataField(type="email", property_name="email", checked=False),
        ]
        rows = generate_rows(fields, 3, rng)

        assert len(rows) == 3
        assert all(list(row) == ["name"] for row in rows)

    def test_literal_value_wins(self, rng):
        fields = [DataField(type="phone", property_name="phone", value="555-0000")]
        rows = generate_rows(fields, 5, rng)
        assert {row["phone"] for row in rows} == {"555-0000"}

    def test_key_falls_back_to_type(self, rng):
        rows = generate_rows([DataField(type="postal")], 1, rng)
        assert "postal" in rows[0]
