"""
Report Router (API Layer)

FastAPI routes for the tabular survey report screen: the JSON API used by
the filter panel and the server-rendered page with the results table,
pagination controls and CSV download.

Author: Survey Console Team
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from ..config import config
from .export import export_csv, format_timestamp
from .models import FilterUpdate, ReportRow, ReportState, SurveyStatus
from .service import ReportWorkspace
from .state import FilterState

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/reports", tags=["reports"])
pages_router = APIRouter(prefix="/reports", tags=["report pages"])

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "web" / "templates"))


# Select options shown in the filter panel
FILTER_OPTIONS: Dict[str, List[Dict[str, str]]] = {
    "surveyStatus": [
        {"value": "", "label": "Todos"},
        {"value": "successful", "label": "✓ Exitosas"},
        {"value": "unsuccessful", "label": "✗ No Exitosas"},
    ],
    "willingToRespond": [
        {"value": "", "label": "Todos"},
        {"value": "true", "label": "Sí"},
        {"value": "false", "label": "No"},
    ],
    "isPatriaDefender": [
        {"value": "", "label": "Todos"},
        {"value": "true", "label": "Sí"},
        {"value": "false", "label": "No"},
    ],
    "gender": [
        {"value": "", "label": "Todos"},
        {"value": "Masculino", "label": "Masculino"},
        {"value": "Femenino", "label": "Femenino"},
        {"value": "Otro", "label": "Otro"},
    ],
    "ageRange": [
        {"value": "", "label": "Todos"},
        {"value": "18-24", "label": "18-24 años"},
        {"value": "25-34", "label": "25-34 años"},
        {"value": "35-44", "label": "35-44 años"},
        {"value": "45-54", "label": "45-54 años"},
        {"value": "55+", "label": "55+ años"},
    ],
    "stratum": [
        {"value": "", "label": "Todos"},
        {"value": "1", "label": "1 - Bajo"},
        {"value": "2", "label": "2 - Bajo-Medio"},
        {"value": "3", "label": "3 - Medio"},
        {"value": "4", "label": "4 - Medio-Alto"},
        {"value": "5", "label": "5 - Alto"},
        {"value": "6", "label": "6 - Muy Alto"},
    ],
    "idType": [
        {"value": "", "label": "Todos"},
        {"value": "CC", "label": "Cédula de Ciudadanía"},
        {"value": "TI", "label": "Tarjeta de Identidad"},
        {"value": "CE", "label": "Cédula de Extranjería"},
        {"value": "PA", "label": "Pasaporte"},
    ],
    "sortOrder": [
        {"value": "asc", "label": "Ascendente"},
        {"value": "desc", "label": "Descendente"},
    ],
}


def get_workspace() -> ReportWorkspace:
    """Get the report workspace created by the app lifespan"""
    from ..app import app_state
    workspace = app_state.get("workspace")
    if workspace is None:
        raise HTTPException(status_code=503, detail="Report workspace not initialized")
    return workspace


# ============================================================================
# VIEW HELPERS
# ============================================================================

def pagination_view(state: ReportState, loading: bool) -> Dict[str, Any]:
    """Pagination numbers and button states for the results footer"""
    total_items = state.total_items
    current = state.current_page
    per_page = state.per_page
    return {
        "current_page": current,
        "total_pages": state.total_pages,
        "total_items": total_items,
        "prev_page": current - 1,
        "next_page": current + 1,
        "prev_disabled": current <= 1 or loading,
        "next_disabled": current >= state.total_pages or loading,
        "showing_from": (current - 1) * per_page + 1 if total_items else 0,
        "showing_to": min(current * per_page, total_items),
    }


def table_row_view(row: ReportRow, index: int) -> Dict[str, Any]:
    """Display values for one results table row"""
    successful = row.survey_status == SurveyStatus.successful
    return {
        "key": row.id,
        "index": index,
        "name": row.full_name,
        "identification": row.identification or "—",
        "gender": row.gender or "—",
        "age_range": row.age_range or "—",
        "stratum": str(row.stratum) if row.stratum else "—",
        "location": row.city or row.department or "N/A",
        "region": row.region or "",
        "status": "✓ Exitosa" if successful else "✗ No Exitosa",
        "status_ok": successful,
        "response": "Sí" if row.willing_to_respond else "No",
        "response_ok": row.willing_to_respond,
        "defender": "★ Sí" if row.is_patria_defender else "—",
        "socializer": row.socializer.full_name if row.socializer and row.socializer.full_name else "N/A",
        "socializer_id": row.socializer.id_number if row.socializer else "",
        "created_at": format_timestamp(row.created_at, config.reports.display_timezone),
    }


def table_rows_view(state: ReportState) -> List[Dict[str, Any]]:
    # Table numbering continues across pages; the CSV export restarts at 1
    offset = (state.current_page - 1) * state.per_page
    return [table_row_view(row, offset + idx) for idx, row in enumerate(state.rows, start=1)]


def state_payload(workspace: ReportWorkspace) -> Dict[str, Any]:
    """JSON snapshot of filters, controller state and queued notifications"""
    controller = workspace.controller
    state = controller.state()
    toasts = workspace.notifier.drain()
    return {
        "filters": workspace.filters.snapshot().to_wire(),
        "active_filters": workspace.filters.active_count(),
        "report": state.model_dump(mode="json", by_alias=True),
        "pagination": pagination_view(state, controller.is_loading),
        "has_data": bool(state.rows),
        "notifications": [t.to_dict() for t in toasts],
    }


def _apply_filters(workspace: ReportWorkspace, values: Dict[str, Optional[str]]):
    """Apply filter values all-or-nothing, mapping lookup and validation errors to HTTP errors"""
    try:
        workspace.filters.update({field: value or "" for field, value in values.items()})
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# JSON API
# ============================================================================

@router.get("/state")
async def get_report_state(workspace: ReportWorkspace = Depends(get_workspace)):
    """Get filters, report state and pending notifications"""
    return state_payload(workspace)


@router.get("/filter-options")
async def get_filter_options():
    """Get the select options offered by the filter panel"""
    return FILTER_OPTIONS


@router.get("/filters")
async def get_filters(workspace: ReportWorkspace = Depends(get_workspace)):
    """Get current filter values"""
    return {
        "filters": workspace.filters.snapshot().to_wire(),
        "active_filters": workspace.filters.active_count(),
    }


@router.put("/filters/{field}")
async def update_filter(field: str, update: FilterUpdate, workspace: ReportWorkspace = Depends(get_workspace)):
    """Set one filter field"""
    _apply_filters(workspace, {field: update.value})
    return {
        "filters": workspace.filters.snapshot().to_wire(),
        "active_filters": workspace.filters.active_count(),
    }


@router.post("/filters/clear")
async def clear_filters(workspace: ReportWorkspace = Depends(get_workspace)):
    """Reset all filters and drop the loaded report"""
    workspace.filters.clear()
    return state_payload(workspace)


@router.post("/generate")
async def generate_report(workspace: ReportWorkspace = Depends(get_workspace)):
    """Generate page 1 of the report for the current filters"""
    if workspace.controller.is_loading:
        raise HTTPException(status_code=409, detail="Report generation already in progress")
    await workspace.controller.generate(1)
    return state_payload(workspace)


@router.post("/page/{page}")
async def change_page(page: int, workspace: ReportWorkspace = Depends(get_workspace)):
    """Load another page of the current report"""
    controller = workspace.controller
    if controller.is_loading:
        raise HTTPException(status_code=409, detail="Report generation already in progress")
    if not controller.can_change_page(page):
        raise HTTPException(status_code=400, detail=f"Page {page} is out of range (1-{controller.total_pages})")
    await controller.change_page(page)
    return state_payload(workspace)


@router.get("/export")
async def export_report_csv(workspace: ReportWorkspace = Depends(get_workspace)):
    """Download the currently loaded page as CSV"""
    filters: FilterState = workspace.filters.snapshot()
    export = export_csv(
        workspace.controller.state().rows,
        filters.start_date,
        filters.end_date,
        workspace.notifier,
        tz_name=config.reports.display_timezone,
    )
    if export is None:
        return JSONResponse(status_code=409, content=state_payload(workspace))

    workspace.notifier.drain()
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )


# ============================================================================
# HTML PAGE
# ============================================================================

@pages_router.get("/generate", response_class=HTMLResponse)
async def report_page(request: Request, workspace: ReportWorkspace = Depends(get_workspace)):
    """Tabular report page: filter panel, results table and pagination"""
    controller = workspace.controller
    state = controller.state()
    filters = workspace.filters.snapshot()
    return templates.TemplateResponse(request, "reports_generate.html", {
        "title": "Reportes - Generar Reporte Tabular",
        "filters": filters.to_wire(),
        "active_filters": workspace.filters.active_count(),
        "options": FILTER_OPTIONS,
        "loading": controller.is_loading,
        "error": state.error,
        "has_data": bool(state.rows),
        "rows": table_rows_view(state),
        "pagination": pagination_view(state, controller.is_loading),
        "toasts": workspace.notifier.drain(),
    })


@pages_router.post("/generate")
async def submit_report_form(request: Request, workspace: ReportWorkspace = Depends(get_workspace)):
    """Apply the submitted filter panel and generate page 1"""
    form = await request.form()
    _apply_filters(workspace, {field: form.get(field) for field in FilterState().to_wire() if field in form})
    if not workspace.controller.is_loading:
        await workspace.controller.generate(1)
    return RedirectResponse(url="/reports/generate", status_code=303)


@pages_router.post("/page/{page}")
async def submit_page_change(page: int, workspace: ReportWorkspace = Depends(get_workspace)):
    """Pagination buttons"""
    if workspace.controller.can_change_page(page):
        await workspace.controller.change_page(page)
    else:
        logger.warning(f"Rejected page change to {page}")
    return RedirectResponse(url="/reports/generate", status_code=303)


@pages_router.post("/clear")
async def submit_clear(workspace: ReportWorkspace = Depends(get_workspace)):
    """Clear filters and results"""
    workspace.filters.clear()
    return RedirectResponse(url="/reports/generate", status_code=303)
