from pydantic import Field, computed_field, field_validator, model_validator
from typing import Optional
from datetime import datetime

from app.models.hostel import HostelGender
from app.schemas.common import CamelModel


class HostelCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)
    gender: HostelGender
    type: str = "Regular"
    capacity: int = Field(..., ge=1)
    current_occupancy: int = Field(0, ge=0)
    floors: Optional[int] = Field(None, ge=1)
    rooms_per_floor: Optional[int] = Field(None, ge=1)
    incharge_id: Optional[str] = None

    @field_validator('code')
    @classmethod
    def uppercase_code(cls, v):
        return v.upper().strip()

    @model_validator(mode='after')
    def occupancy_within_capacity(self):
        if self.current_occupancy > self.capacity:
            raise ValueError("Current occupancy cannot exceed capacity")
        return self


class OccupancyUpdate(CamelModel):
    current_occupancy: int = Field(..., ge=0)


class HostelResponse(CamelModel):
    id: str
    name: str
    code: str
    gender: HostelGender
    type: str
    capacity: int
    current_occupancy: int
    available_capacity: int
    occupancy_percentage: float
    floors: Optional[int] = None
    rooms_per_floor: Optional[int] = None
    incharge_id: Optional[str] = None
    hostel_rep_id: Optional[str] = Field(None, exclude=True)
    mess_rep_id: Optional[str] = Field(None, exclude=True)
    is_active: bool
    created_at: datetime

    @computed_field
    @property
    def representatives(self) -> dict:
        return {"hostelRep": self.hostel_rep_id, "messRep": self.mess_rep_id}


class AssignHostelRequest(CamelModel):
    hostel_id: str = Field(..., min_length=1)


def hostel_to_dict(hostel) -> dict:
    return HostelResponse.model_validate(hostel).dump()
