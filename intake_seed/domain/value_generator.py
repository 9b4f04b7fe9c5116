"""Synthetic field value generation.

Maps a field type tag and a chosen option to a freshly randomized literal.
Every function takes an optional ``random.Random`` so callers (and tests) can
seed generation; without one the module-level generator is used.

Security Impact:
    - Generates synthetic test data only (never real PII)
"""

import random
import string
from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from intake_seed.domain.models import DataField

# Sample data pools
FIRST_NAMES = [
    "James", "Emma", "Michael", "Olivia", "William", "Ava", "Alexander", "Sophia",
    "Daniel", "Isabella", "David", "Mia", "Joseph", "Charlotte", "Andrew", "Amelia",
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Rodriguez", "Martinez", "Hernandez", "Lopez", "Wilson", "Anderson", "Thomas", "Taylor",
]

DOMAINS = ["gmail.com", "yahoo.com", "outlook.com", "example.com", "test.org", "company.io"]
STREETS = ["Main St", "Oak Ave", "Maple Dr", "Cedar Ln", "Pine Rd", "Elm Blvd", "Park Way", "Lake View"]
CITIES = ["New York", "Los Angeles", "Chicago", "Houston", "Phoenix", "Philadelphia", "San Antonio", "San Diego"]
COUNTRIES = ["United States", "Canada", "United Kingdom", "Germany", "France", "Australia", "Japan", "Brazil"]
REGIONS = ["California", "Texas", "Florida", "New York", "Pennsylvania", "Illinois", "Ohio", "Georgia"]
LOREM = ["Lorem", "ipsum", "dolor", "sit", "amet", "consectetur", "adipiscing", "elit", "sed", "do", "eiusmod", "tempor"]

# Oracle's default NLS month abbreviations; independent of the process locale.
MONTHS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "JPY": "¥"}

ALPHANUMERIC = string.ascii_letters + string.digits
PASSWORD_CHARS = ALPHANUMERIC + "!@#$%"

# Type tag -> (label, options). The first option is the default.
DATA_TYPES: dict[str, tuple[str, list[str]]] = {
    "names": ("Names", ["Full name", "First name", "Last name"]),
    "phone": ("Phone", ["(###) ###-####", "+1 ###-###-####", "+44 #### ######", "###-####"]),
    "email": ("Email", ["Standard"]),
    "text": ("Text", ["Sentence"]),
    "address": ("Street Address", ["Street"]),
    "postal": ("Postal / Zip", ["5 digit"]),
    "region": ("Region", ["State"]),
    "country": ("Country", ["Name"]),
    "alphanumeric": ("Alphanumeric", ["10 chars"]),
    "subscriber_id": ("Subscriber ID", ["AAA#######"]),
    "number": ("Number Range", ["1-100", "1-1000"]),
    "currency": ("Currency", ["USD", "EUR", "GBP", "JPY"]),
    "date": ("Date", ["DD-MON-YY", "YYYY-MM-DD", "MM/DD/YYYY", "DD/MM/YYYY"]),
    "constant": ("Constant Value", []),
    "creditcard": ("Credit Card", ["Visa"]),
    "password": ("Password", ["8 chars", "12 chars", "16 chars"]),
}


def default_option(field_type: str) -> str:
    """Return the default option for a type tag ("" when it has none)."""
    _, options = DATA_TYPES.get(field_type, ("", []))
    return options[0] if options else ""


def random_digits(n: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or random
    return "".join(rng.choice(string.digits) for _ in range(n))


def random_letters(n: int, rng: Optional[random.Random] = None) -> str:
    """Uppercase ASCII letters."""
    rng = rng or random
    return "".join(rng.choice(string.ascii_uppercase) for _ in range(n))


def format_date(value: date, option: str) -> str:
    """Render a date in one of the supported textual formats."""
    if option == "YYYY-MM-DD":
        return value.isoformat()
    if option == "MM/DD/YYYY":
        return f"{value.month:02d}/{value.day:02d}/{value.year}"
    if option == "DD/MM/YYYY":
        return f"{value.day:02d}/{value.month:02d}/{value.year}"
    return f"{value.day:02d}-{MONTHS[value.month - 1]}-{value.year % 100:02d}"


def generate_phone(option: str = "", rng: Optional[random.Random] = None) -> str:
    if option == "+1 ###-###-####":
        return f"+1 {random_digits(3, rng)}-{random_digits(3, rng)}-{random_digits(4, rng)}"
    if option == "+44 #### ######":
        return f"+44 {random_digits(4, rng)} {random_digits(6, rng)}"
    if option == "###-####":
        return f"{random_digits(3, rng)}-{random_digits(4, rng)}"
    return f"({random_digits(3, rng)}) {random_digits(3, rng)}-{random_digits(4, rng)}"


def _names(option: str, rng) -> str:
    first = rng.choice(FIRST_NAMES)
    last = rng.choice(LAST_NAMES)
    if option == "First name":
        return first
    if option == "Last name":
        return last
    return f"{first} {last}"


def _email(option: str, rng) -> str:
    name = f"{rng.choice(FIRST_NAMES).lower()}{rng.randint(1, 999)}"
    return f"{name}@{rng.choice(DOMAINS)}"


def _text(option: str, rng) -> str:
    return " ".join(rng.choice(LOREM) for _ in range(rng.randint(5, 12)))


def _address(option: str, rng) -> str:
    return f"{rng.randint(100, 9999)} {rng.choice(STREETS)}, {rng.choice(CITIES)}"


def _number(option: str, rng) -> str:
    upper = 1000 if option == "1-1000" else 100
    return str(rng.randint(1, upper))


def _currency(option: str, rng) -> str:
    amount = rng.randint(100, 99999) / 100
    return f"{CURRENCY_SYMBOLS.get(option, '$')}{amount:.2f}"


def _date(option: str, rng) -> str:
    value = date.today() - timedelta(days=rng.randint(0, 365 * 5))
    return format_date(value, option)


def _password(option: str, rng) -> str:
    length = {"16 chars": 16, "12 chars": 12}.get(option, 8)
    return "".join(rng.choice(PASSWORD_CHARS) for _ in range(length))


_GENERATORS: dict[str, Callable[[str, random.Random], str]] = {
    "names": _names,
    "phone": lambda option, rng: generate_phone(option, rng),
    "email": _email,
    "text": _text,
    "address": _address,
    "postal": lambda option, rng: random_digits(5, rng),
    "region": lambda option, rng: rng.choice(REGIONS),
    "country": lambda option, rng: rng.choice(COUNTRIES),
    "alphanumeric": lambda option, rng: "".join(rng.choice(ALPHANUMERIC) for _ in range(10)),
    "subscriber_id": lambda option, rng: random_letters(3, rng) + random_digits(7, rng),
    "number": _number,
    "currency": _currency,
    "date": _date,
    # Constant values come from the field's own value.
    "constant": lambda option, rng: "",
    "creditcard": lambda option, rng: (
        f"4{random_digits(3, rng)}-{random_digits(4, rng)}-{random_digits(4, rng)}-{random_digits(4, rng)}"
    ),
    "password": _password,
}


def generate_value(field_type: str, option: str = "", rng: Optional[random.Random] = None) -> str:
    """Generate one random literal for a field type.

    Parameters:
        field_type: Type tag (names, phone, email, date, currency, ...)
        option: Generator option; the type's default applies when empty or unknown
        rng: Random source (module-level generator when omitted)

    Returns:
        Generated value, or "" for unknown type tags
    """
    generator = _GENERATORS.get((field_type or "").strip().lower())
    if generator is None:
        return ""
    return generator(option or "", rng or random)


def generate_rows(
    fields: Iterable[DataField],
    row_count: int,
    rng: Optional[random.Random] = None
) -> list[dict[str, str]]:
    """Generate rows for the checked fields.

    A field carrying a literal value repeats it on every row; every other
    field is generated independently per row.

    Parameters:
        fields: Form fields; unchecked ones are skipped
        row_count: Number of rows to produce
        rng: Random source

    Returns:
        One dict per row keyed by each field's property name
    """
    active = [f for f in fields if f.checked]
    rows = []
    for _ in range(row_count):
        row = {}
        for data_field in active:
            if data_field.has_value:
                row[data_field.key] = data_field.value
            else:
                row[data_field.key] = generate_value(data_field.type, data_field.option, rng)
        rows.append(row)
    return rows
