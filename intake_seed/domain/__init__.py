"""Domain layer for intake-seed.

This module contains the request/record models, the value generator, the
output formatters and the storage contracts. Nothing here imports the Oracle
driver or the web framework.
"""

from .models import (
    ColumnMetadata,
    DataField,
    Environment,
    IntakeCandidate,
    IntakeCreationResult,
)

__all__ = [
    "ColumnMetadata",
    "DataField",
    "Environment",
    "IntakeCandidate",
    "IntakeCreationResult",
]
