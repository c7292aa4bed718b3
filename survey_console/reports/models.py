"""
Report Models

Pydantic models for the tabular survey report: the normalized request sent to
the backend, the paginated result it returns, and the serializable snapshot
of the report controller exposed to the web layer.

Author: Survey Console Team
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SurveyStatus(str, Enum):
    successful = "successful"
    unsuccessful = "unsuccessful"


class ReportStatus(str, Enum):
    """Report controller lifecycle"""
    idle = "idle"
    loading = "loading"
    success = "success"
    failed = "failed"


class ReportErrorKind(str, Enum):
    validation = "validation"
    fetch = "fetch"


class _WireModel(BaseModel):
    """Models exchanged with the backend use camelCase names on the wire"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ReportQuery(_WireModel):
    """Normalized report request. Unset fields are None and never serialized."""
    page: int = Field(1, description="1-based page number")
    per_page: int = Field(50, alias="perPage")
    start_date: Optional[str] = Field(None, alias="startDate", description="Start date (YYYY-MM-DD)")
    end_date: Optional[str] = Field(None, alias="endDate", description="End date (YYYY-MM-DD)")
    q: Optional[str] = Field(None, description="Name or identification search")
    survey_status: Optional[str] = Field(None, alias="surveyStatus")
    willing_to_respond: Optional[bool] = Field(None, alias="willingToRespond")
    is_patria_defender: Optional[bool] = Field(None, alias="isPatriaDefender")
    department: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    neighborhood: Optional[str] = None
    gender: Optional[str] = None
    age_range: Optional[str] = Field(None, alias="ageRange")
    stratum: Optional[str] = None
    id_type: Optional[str] = Field(None, alias="idType")
    sort_by: Optional[str] = Field(None, alias="sortBy")
    sort_order: str = Field("asc", alias="sortOrder")

    def to_payload(self) -> Dict[str, Any]:
        """Wire payload with unset fields omitted entirely"""
        return self.model_dump(by_alias=True, exclude_none=True)


class SocializerRef(_WireModel):
    """Field agent the survey is attributed to"""
    id: Optional[str] = Field(None, alias="_id")
    full_name: str = Field("", alias="fullName")
    id_number: Optional[str] = Field(None, alias="idNumber")
    phone: Optional[str] = None


class AuthorRef(_WireModel):
    """Account that owns the survey record"""
    id: Optional[str] = Field(None, alias="_id")
    email: Optional[str] = None
    role: Optional[str] = None


class LabeledReason(_WireModel):
    value: str
    label: str


class GeoPoint(_WireModel):
    type: str = "Point"
    coordinates: Tuple[float, float]


class ReportRow(_WireModel):
    """One survey record as returned by the backend"""
    id: str = Field(..., alias="_id")
    full_name: str = Field("", alias="fullName")
    id_type: Optional[str] = Field(None, alias="idType")
    identification: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    age_range: Optional[str] = Field(None, alias="ageRange")
    region: Optional[str] = None
    department: Optional[str] = None
    city: Optional[str] = None
    gender: Optional[str] = None
    stratum: Optional[int] = None
    neighborhood: Optional[str] = None
    visit_address: Optional[str] = Field(None, alias="visitAddress")
    survey_status: SurveyStatus = Field(..., alias="surveyStatus")
    willing_to_respond: bool = Field(False, alias="willingToRespond")
    is_patria_defender: bool = Field(False, alias="isPatriaDefender")
    recording_authorization: bool = Field(False, alias="recordingAuthorization")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
    socializer: Optional[SocializerRef] = None
    autor: Optional[AuthorRef] = None
    location: Optional[GeoPoint] = None
    audio_file_key: Optional[str] = Field(None, alias="audioFileKey")
    rejection_reason: Optional[LabeledReason] = Field(None, alias="rejectionReason")
    no_response_reason: Optional[LabeledReason] = Field(None, alias="noResponseReason")


class ReportResult(_WireModel):
    """One page of report rows plus pagination totals"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    current_page: int = Field(1, alias="currentPage")
    items_per_page: int = Field(50, alias="itemsPerPage")
    total_items: int = Field(0, alias="totalItems")
    total_pages: int = Field(0, alias="totalPages")
    rows: List[ReportRow] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _accept_surveys_key(cls, data: Any) -> Any:
        # The backend names the row list `surveys`
        if isinstance(data, dict) and "rows" not in data and "surveys" in data:
            data = {**data, "rows": data.get("surveys") or []}
        return data

    @model_validator(mode="after")
    def _check_pagination(self) -> "ReportResult":
        if len(self.rows) > self.items_per_page:
            raise ValueError(
                f"Page holds {len(self.rows)} rows but itemsPerPage is {self.items_per_page}"
            )
        if self.total_items > 0 and not 1 <= self.current_page <= self.total_pages:
            raise ValueError(
                f"currentPage {self.current_page} outside 1..{self.total_pages}"
            )
        return self


class ReportError(BaseModel):
    kind: ReportErrorKind
    message: str


class ReportState(BaseModel):
    """Serializable snapshot of the report controller"""
    status: ReportStatus = ReportStatus.idle
    current_page: int = 1
    per_page: int = 50
    result: Optional[ReportResult] = None
    error: Optional[ReportError] = None

    @property
    def rows(self) -> List[ReportRow]:
        return list(self.result.rows) if self.result else []

    @property
    def total_items(self) -> int:
        return self.result.total_items if self.result else 0

    @property
    def total_pages(self) -> int:
        return self.result.total_pages if self.result else 0


class FilterUpdate(BaseModel):
    """Request body for setting one filter field"""
    value: str = ""
