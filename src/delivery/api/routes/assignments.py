"""Assignment endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse

from ...persistence.filesystem import FileSink
from ...schemas.assignment import (
    AssignmentRunRequest,
    AssignmentRunResponse,
    DriverSummariesResponse,
    ExportResponse,
)
from ...services.assignment import AssignmentService, RunSupersededError
from ...services.outputs.formatter import assignment_run_to_json, driver_summaries

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assignments", tags=["assignments"])


@lru_cache()
def get_assignment_service() -> AssignmentService:
    """Process-wide service; holds the geocode cache and the latest published run."""
    return AssignmentService()


def get_file_sink() -> FileSink:
    return FileSink()


@router.post("/run", response_model=AssignmentRunResponse, status_code=status.HTTP_200_OK)
def run_assignments(
    payload: AssignmentRunRequest | None = None,
    service: AssignmentService = Depends(get_assignment_service),
) -> AssignmentRunResponse:
    payload = payload or AssignmentRunRequest()
    try:
        run = service.run(geocode=payload.geocode)
    except RunSupersededError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error running assignments: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to run assignments: {str(exc)}",
        ) from exc
    return AssignmentRunResponse.model_validate(assignment_run_to_json(run))


@router.get("", response_model=AssignmentRunResponse, status_code=status.HTTP_200_OK)
def get_current_assignments(service: AssignmentService = Depends(get_assignment_service)) -> AssignmentRunResponse:
    run = service.current()
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No assignment run available.")
    return AssignmentRunResponse.model_validate(assignment_run_to_json(run))


@router.delete("", status_code=status.HTTP_200_OK)
def clear_assignments(service: AssignmentService = Depends(get_assignment_service)) -> dict:
    service.clear()
    return {"success": True, "message": "Assignments cleared"}


@router.get("/drivers", response_model=DriverSummariesResponse, status_code=status.HTTP_200_OK)
def get_driver_summaries(service: AssignmentService = Depends(get_assignment_service)) -> DriverSummariesResponse:
    """Orders grouped by driver, plus the orders left unassigned."""
    run = service.current()
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No assignment run available.")
    return DriverSummariesResponse.model_validate(driver_summaries(run.assignments, run.orders, run.drivers))


@router.get("/export.csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def export_assignments_csv(service: AssignmentService = Depends(get_assignment_service)) -> PlainTextResponse:
    return PlainTextResponse(service.export_csv(), media_type="text/csv")


@router.post("/export", response_model=ExportResponse, status_code=status.HTTP_200_OK)
def export_assignments(
    service: AssignmentService = Depends(get_assignment_service),
    sink: FileSink = Depends(get_file_sink),
) -> ExportResponse:
    outcome = service.deliver(sink)
    return ExportResponse(delivered=outcome.delivered, location=outcome.location, error=outcome.error)
