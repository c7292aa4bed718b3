"""
Report CSV Export

Serializes the currently loaded report page to CSV. Works only on rows the
controller already holds; exporting another page requires loading it first.

Author: Survey Console Team
"""

import csv
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from .models import ReportRow, SurveyStatus
from .notifications import Notifier

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv;charset=utf-8"
EMPTY_CELL = "-"
NO_DATA_MESSAGE = "No hay datos para exportar"
EXPORT_DONE_MESSAGE = "Archivo CSV descargado exitosamente"

CSV_HEADERS = [
    "N°",
    "Nombre Completo",
    "Identificación",
    "Email",
    "Teléfono",
    "Género",
    "Edad",
    "Estrato",
    "Departamento",
    "Ciudad",
    "Región",
    "Barrio",
    "Defensor Patria",
    "Estado Encuesta",
    "Dispuesto Responder",
    "Socializador",
    "Fecha Creación",
]


@dataclass(frozen=True)
class CsvExport:
    filename: str
    content: bytes
    media_type: str = CSV_MEDIA_TYPE


def export_filename(start_date: str, end_date: str) -> str:
    return f"reporte_encuestas_{start_date}_{end_date}.csv"


def yes_no(flag: bool) -> str:
    return "Sí" if flag else "No"


def status_label(status: SurveyStatus) -> str:
    return "Exitosa" if status == SurveyStatus.successful else "No Exitosa"


def format_timestamp(value: datetime, tz_name: str = "America/Bogota") -> str:
    """
    Render a timestamp like the es-CO locale does: 15/01/2024, 02:30 p. m.

    Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(ZoneInfo(tz_name))
    meridiem = "a. m." if local.hour < 12 else "p. m."
    hour = local.hour % 12 or 12
    return f"{local:%d/%m/%Y}, {hour:02d}:{local:%M} {meridiem}"


def _cell(value) -> str:
    if value is None or value == "":
        return EMPTY_CELL
    return str(value)


def row_cells(index: int, row: ReportRow, tz_name: str = "America/Bogota") -> List[str]:
    """CSV cells for one row; `index` is the 1-based position on the current page"""
    return [
        str(index),
        row.full_name,
        _cell(row.identification),
        _cell(row.email),
        _cell(row.phone),
        _cell(row.gender),
        _cell(row.age_range),
        _cell(row.stratum),
        _cell(row.department),
        _cell(row.city),
        _cell(row.region),
        _cell(row.neighborhood),
        yes_no(row.is_patria_defender),
        status_label(row.survey_status),
        yes_no(row.willing_to_respond),
        _cell(row.socializer.full_name if row.socializer else None),
        format_timestamp(row.created_at, tz_name),
    ]


def render_csv(rows: Sequence[ReportRow], tz_name: str = "America/Bogota") -> str:
    """Header line followed by one fully quoted line per row"""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADERS) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerows(row_cells(idx, row, tz_name) for idx, row in enumerate(rows, start=1))
    # No newline after the last row; every data line ends in a quote
    return buffer.getvalue().rstrip("\n")


def export_csv(
    rows: Iterable[ReportRow],
    start_date: str,
    end_date: str,
    notifier: Notifier,
    tz_name: str = "America/Bogota",
) -> Optional[CsvExport]:
    """
    Export the loaded page to CSV.

    Returns None and emits one warning when there is nothing to export.
    """
    rows = list(rows)
    if not rows:
        notifier.warn(NO_DATA_MESSAGE)
        return None

    content = render_csv(rows, tz_name).encode("utf-8")
    export = CsvExport(filename=export_filename(start_date, end_date), content=content)
    logger.info(f"Exported {len(rows)} report rows to {export.filename}")
    notifier.success(EXPORT_DONE_MESSAGE)
    return export
