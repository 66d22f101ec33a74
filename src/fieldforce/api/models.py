"""Pydantic models for API request bodies."""

from datetime import date

from pydantic import BaseModel, Field

from fieldforce.domain.leaves import LeaveType
from fieldforce.domain.sites import SITE_CATEGORIES
from fieldforce.domain.tours import PoolRole, TourPlan, TransportMode, TravelType


class TourStartRequest(BaseModel):
    """Travel details chosen before the start selfie."""

    transport_mode: TransportMode
    travel_type: TravelType = TravelType.INDIVIDUAL
    pool_role: PoolRole | None = None
    project_id: str | None = None
    task_name: str | None = None
    task_description: str | None = None
    to_location: str | None = None
    bad_weather: bool = False
    surrounding_video_url: str | None = None

    def to_plan(self) -> TourPlan:
        return TourPlan(**self.model_dump())


class NewSiteRequest(BaseModel):
    """A destination defined on arrival."""

    name: str = Field(min_length=1)
    category: str = Field(default=SITE_CATEGORIES[0])


class TourCheckpointRequest(BaseModel):
    """Optional site definition sent with the arrival checkpoint."""

    new_site: NewSiteRequest | None = None


class ExpenseRequest(BaseModel):
    """One receipt line of a claim."""

    category: str = "Food"
    amount: float = Field(gt=0)
    description: str = ""
    receipt: str | None = None


class ClaimRequest(BaseModel):
    expenses: list[ExpenseRequest] = Field(default_factory=list)


class AdvanceRequest(BaseModel):
    amount: float = Field(gt=0)
    reason: str = Field(min_length=1)


class SessionCompleteRequest(BaseModel):
    remarks: str | None = None


class LeaveApplicationRequest(BaseModel):
    """A new leave application."""

    type: LeaveType
    start_date: date
    end_date: date
    reason: str = Field(min_length=1)
