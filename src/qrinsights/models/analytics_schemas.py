"""Pydantic schemas for the analytics API.

Field names follow Python conventions; aliases carry the JSON keys the
dashboard front-end reads.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportModel(BaseModel):
    """Base for response rows: accepts field names, serializes aliases."""

    model_config = ConfigDict(populate_by_name=True)


class StatsSummary(ReportModel):
    """Headline numbers for the selected window."""

    total_qr_codes: int = Field(..., alias="totalQRCodes")
    total_batches: int = Field(..., alias="totalBatches")
    qr_percentage_change: float = Field(
        ..., alias="qrPercentageChange", description="Change vs. previous window, 1 decimal"
    )
    batch_percentage_change: float = Field(..., alias="batchPercentageChange")


class TimeseriesPoint(ReportModel):
    date: str = Field(..., description="Calendar date, YYYY-MM-DD")
    codes: int


class LocationTotal(ReportModel):
    state: str
    codes: int


class RecentBatch(ReportModel):
    """A batch row for the recent activity feed."""

    id: int
    state: Optional[str] = None
    state_code: Optional[str] = Field(None, alias="stateCode")
    brand: Optional[str] = None
    qr_count: int = Field(0, alias="qrCount")
    created_at: datetime = Field(..., alias="createdAt")
    time: str = Field(..., description='Relative label such as "5m ago"')


class BatchDetail(ReportModel):
    """A batch row for the batch table, with its serial range.

    The table reads both `created_at` and `createdAt`, so both are emitted.
    """

    id: int
    state: Optional[str] = None
    state_code: Optional[str] = None
    brand: Optional[str] = None
    qr_count: int = Field(0, alias="qrCount")
    created_at: datetime
    created_at_camel: datetime = Field(..., alias="createdAt")
    start_serial: Optional[int] = Field(None, alias="startSerial")
    end_serial: Optional[int] = Field(None, alias="endSerial")


class BrandTotal(ReportModel):
    name: str
    qr_count: int = Field(0, alias="qrCount")


class SearchState(ReportModel):
    id: Optional[int] = None
    name: Optional[str] = None
    code: Optional[str] = None


class SearchBrand(ReportModel):
    id: Optional[int] = None
    name: Optional[str] = None


class SearchBatch(ReportModel):
    id: Optional[int] = None
    code: Optional[str] = None
    total_codes: Optional[int] = Field(None, alias="totalCodes")


class QRCodeDetail(ReportModel):
    """A single code with its state, brand and batch denormalized."""

    id: int
    serial_number: str = Field(..., alias="serialNumber")
    serial_number_num: Optional[int] = Field(None, alias="serialNumberNum")
    code: Optional[str] = None
    state: SearchState
    brand: SearchBrand
    batch: SearchBatch
    created_at: datetime = Field(..., alias="createdAt")
    exists: bool = True


class QRSearchFound(ReportModel):
    found: Literal[True] = True
    search_time: str = Field(..., alias="searchTime")
    data: QRCodeDetail


class QRSearchNotFound(ReportModel):
    found: Literal[False] = False
    message: str = "QR code not found"
    search_time: str = Field(..., alias="searchTime")
