"""
================================================================================
Survey Console - Report CSV Export Unit Tests
================================================================================
Description:
    Unit tests for CSV export of the currently loaded report page: header
    layout, quoting, placeholders, labels, timestamps, filename and the
    empty-page warning.

Test Coverage:
    - Empty page exports nothing and warns once
    - One header line plus one line per row
    - Quoting of commas and embedded quotes
    - Survey status and yes/no labels
    - es-CO timestamp rendering in the display timezone
    - Page-relative row numbering
================================================================================
"""
import csv
import io
from datetime import datetime

import pytest

from survey_console.reports.export import (
    CSV_HEADERS,
    CSV_MEDIA_TYPE,
    EXPORT_DONE_MESSAGE,
    NO_DATA_MESSAGE,
    export_csv,
    export_filename,
    format_timestamp,
    render_csv,
)
from survey_console.reports.models import ReportRow
from survey_console.reports.notifications import ToastLevel


@pytest.fixture
def make_rows(row_payload):
    def _make(*overrides):
        return [ReportRow.model_validate(row_payload(i, **o)) for i, o in enumerate(overrides, start=1)]
    return _make


def parse(content: str):
    return list(csv.reader(io.StringIO(content)))


class TestExportCsv:
    """Test the export entry point"""

    def test_empty_page_warns_once(self, notifier):
        """Test nothing is produced for an empty page"""
        assert export_csv([], "2024-01-01", "2024-01-31", notifier) is None
        toasts = notifier.drain()
        assert len(toasts) == 1
        assert toasts[0].level == ToastLevel.WARNING
        assert toasts[0].message == NO_DATA_MESSAGE

    def test_export_produces_file(self, notifier, make_rows):
        """Test a loaded page becomes a named UTF-8 CSV file"""
        rows = make_rows({}, {}, {})
        export = export_csv(rows, "2024-01-01", "2024-01-31", notifier)

        assert export.filename == "reporte_encuestas_2024-01-01_2024-01-31.csv"
        assert export.media_type == CSV_MEDIA_TYPE
        lines = export.content.decode("utf-8").split("\n")
        assert len(lines) == 4
        assert [t.message for t in notifier.drain()] == [EXPORT_DONE_MESSAGE]

    def test_filename(self):
        assert export_filename("2024-02-01", "2024-02-29") == "reporte_encuestas_2024-02-01_2024-02-29.csv"


class TestRenderCsv:
    """Test CSV layout and cell formatting"""

    def test_header_line_first_and_unquoted(self, make_rows):
        """Test the header is the first line, written without quotes"""
        content = render_csv(make_rows({}))
        first_line = content.split("\n")[0]
        assert first_line == ",".join(CSV_HEADERS)
        assert len(CSV_HEADERS) == 17

    def test_data_lines_fully_quoted(self, make_rows):
        """Test every data cell is quoted and there is no trailing newline"""
        content = render_csv(make_rows({}, {}))
        lines = content.split("\n")
        assert len(lines) == 3
        for line in lines[1:]:
            assert line.startswith('"')
            assert line.endswith('"')
        assert not content.endswith("\n")

    def test_commas_and_quotes_escaped(self, make_rows):
        """Test a name with a comma and quotes stays one cell"""
        content = render_csv(make_rows({"fullName": 'Gómez, Ana "La Profe"'}))
        line = content.split("\n")[1]
        assert '"Gómez, Ana ""La Profe"""' in line
        parsed = parse(content)
        assert parsed[1][1] == 'Gómez, Ana "La Profe"'
        assert len(parsed[1]) == 17

    def test_status_and_flag_labels(self, make_rows):
        """Test survey status and yes/no columns"""
        rows = make_rows(
            {"surveyStatus": "successful", "isPatriaDefender": True, "willingToRespond": True},
            {"surveyStatus": "unsuccessful", "isPatriaDefender": False, "willingToRespond": False},
        )
        parsed = parse(render_csv(rows))
        defender, status, willing = CSV_HEADERS.index("Defensor Patria"), CSV_HEADERS.index("Estado Encuesta"), CSV_HEADERS.index("Dispuesto Responder")

        assert parsed[1][status] == "Exitosa"
        assert parsed[2][status] == "No Exitosa"
        assert parsed[1][defender] == "Sí"
        assert parsed[2][defender] == "No"
        assert parsed[1][willing] == "Sí"
        assert parsed[2][willing] == "No"

    def test_missing_values_use_placeholder(self, make_rows):
        """Test absent optional fields render as '-'"""
        rows = make_rows({"email": None, "stratum": None, "neighborhood": "", "socializer": None})
        cells = parse(render_csv(rows))[1]
        assert cells[CSV_HEADERS.index("Email")] == "-"
        assert cells[CSV_HEADERS.index("Estrato")] == "-"
        assert cells[CSV_HEADERS.index("Barrio")] == "-"
        assert cells[CSV_HEADERS.index("Socializador")] == "-"

    def test_row_values(self, make_rows):
        """Test the mapping of row fields to columns"""
        cells = parse(render_csv(make_rows({})))[1]
        assert cells[0] == "1"
        assert cells[1] == "Persona 1"
        assert cells[CSV_HEADERS.index("Identificación")] == "100001"
        assert cells[CSV_HEADERS.index("Estrato")] == "3"
        assert cells[CSV_HEADERS.index("Socializador")] == "Carlos Ruiz"
        assert cells[CSV_HEADERS.index("Fecha Creación")] == "15/01/2024, 02:30 p. m."

    def test_numbering_restarts_per_export(self, make_rows):
        """Test the N° column counts rows of the exported page from 1"""
        parsed = parse(render_csv(make_rows({}, {}, {})))
        assert [r[0] for r in parsed[1:]] == ["1", "2", "3"]


class TestFormatTimestamp:
    """Test es-CO timestamp rendering"""

    def test_morning(self):
        value = datetime.fromisoformat("2024-03-05T13:05:00+00:00")
        assert format_timestamp(value) == "05/03/2024, 08:05 a. m."

    def test_noon_and_midnight(self):
        assert format_timestamp(datetime.fromisoformat("2024-03-05T17:00:00+00:00")) == "05/03/2024, 12:00 p. m."
        assert format_timestamp(datetime.fromisoformat("2024-03-05T05:00:00+00:00")) == "05/03/2024, 12:00 a. m."

    def test_naive_is_utc(self):
        """Test naive datetimes are treated as UTC"""
        assert format_timestamp(datetime(2024, 1, 1, 3, 0)) == "31/12/2023, 10:00 p. m."

    def test_other_timezone(self):
        value = datetime.fromisoformat("2024-01-15T19:30:00+00:00")
        assert format_timestamp(value, "UTC") == "15/01/2024, 07:30 p. m."
