"""Offline data generation endpoints."""

import logging
import random

from fastapi import APIRouter, Response

from intake_seed.api.models import DataTypeInfo, GeneratedDataResponse, GenerateDataRequest
from intake_seed.domain.formatters import SUPPORTED_FORMATS, file_extension, format_rows
from intake_seed.domain.ports import ValidationError
from intake_seed.domain.value_generator import DATA_TYPES, generate_rows

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["generation"])

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "xml": "application/xml",
}


@router.get("/data-types", response_model=list[DataTypeInfo])
def list_data_types() -> list[DataTypeInfo]:
    """Supported generator type tags with their options (first is the default)."""
    return [
        DataTypeInfo(type=tag, label=label, options=options)
        for tag, (label, options) in DATA_TYPES.items()
    ]


@router.post("/generate-data", response_model=GeneratedDataResponse)
def generate_data(body: GenerateDataRequest):
    """Generate rows and serialize them.

    With ``download`` set the content is returned as an attachment named
    ``generated_data.<extension>``.
    """
    active = [data_field for data_field in body.fields if data_field.checked]
    if not active:
        raise ValidationError("At least one field must be checked")

    rng = random.Random(body.seed) if body.seed is not None else None
    rows = generate_rows(active, body.row_count, rng)
    fmt = (body.format or "json").lower()
    if fmt not in SUPPORTED_FORMATS:
        fmt = "json"
    content = format_rows(rows, fmt, headers=[data_field.key for data_field in active], table_name=body.table_name)
    extension = file_extension(fmt)
    logger.info(f"Generated {len(rows)} rows as {fmt}")

    if body.download:
        return Response(
            content=content,
            media_type=MEDIA_TYPES.get(fmt, "text/plain"),
            headers={"Content-Disposition": f'attachment; filename="generated_data.{extension}"'},
        )

    return GeneratedDataResponse(format=fmt, extension=extension, row_count=len(rows), content=content)
