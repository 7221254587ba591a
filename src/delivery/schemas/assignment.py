"""Pydantic request/response models for assignment endpoints."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AssignmentRunRequest(BaseModel):
    geocode: bool = Field(
        default=True,
        description="Resolve driver and order addresses before matching. Disable to use city/address fallbacks only.",
    )


class CoordinatesModel(BaseModel):
    latitude: float
    longitude: float


class OrderMatchModel(BaseModel):
    order_id: str
    driver_id: Optional[str] = None
    tier: Optional[str] = Field(default=None, description="Matching tier that selected the driver.")
    distance_km: Optional[float] = None
    order_coordinates: Optional[CoordinatesModel] = None


class AssignmentRunResponse(BaseModel):
    run_id: int
    started_at: str
    completed_at: str
    geocoded: bool
    errors: List[str]
    assignments: Dict[str, str]
    loads: Dict[str, int]
    unassigned: List[str]
    matches: List[OrderMatchModel]


class OrderSummaryModel(BaseModel):
    order_id: str
    title: str
    customer: str
    address: str
    status: str


class DriverSummaryModel(BaseModel):
    driver_id: str
    name: str
    phone: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    order_count: int
    orders: List[OrderSummaryModel]


class DriverSummariesResponse(BaseModel):
    drivers: List[DriverSummaryModel]
    unassigned: List[OrderSummaryModel]


class ExportResponse(BaseModel):
    delivered: bool
    location: Optional[str] = None
    error: Optional[str] = None
