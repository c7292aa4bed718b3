"""
Report Filters

Query building for the tabular survey report. Turns the string-valued filter
panel state plus pagination into the normalized request understood by the
survey backend.

Author: Survey Console Team
"""

from dataclasses import fields
from typing import Dict

from .models import ReportQuery
from .state import FilterState, TriState, TRI_STATE_FIELDS


def build_report_query(filters: FilterState, page: int = 1, per_page: int = 50) -> ReportQuery:
    """
    Build the report request for one page.

    Args:
        filters: Current filter panel state
        page: 1-based page number
        per_page: Fixed page size for the session

    Returns:
        ReportQuery where empty filters are unset, tri-state filters are
        booleans (or unset) and sortOrder always carries a value.

    Date presence is not validated here; callers check it before submitting.
    """
    values = {}
    for f in fields(FilterState):
        raw = getattr(filters, f.name)
        if f.name in TRI_STATE_FIELDS:
            value = TriState.parse(raw).to_bool()
        else:
            value = raw if raw != "" else None
        if value is not None:
            values[f.name] = value

    values["sort_order"] = filters.sort_order or "asc"

    return ReportQuery(page=page, per_page=per_page, **values)


def query_params(query: ReportQuery) -> Dict[str, str]:
    """
    Flatten a ReportQuery into URL query parameters.

    Booleans are sent as 'true'/'false' and unset fields are left out.
    """
    params = {}
    for key, value in query.to_payload().items():
        if isinstance(value, bool):
            params[key] = "true" if value else "false"
        else:
            params[key] = str(value)
    return params
