"""
Registration Schemas - submission, payment completion and record views
"""

from pydantic import ConfigDict, EmailStr, Field, field_validator
from typing import Literal, Optional
from datetime import date, datetime
from enum import Enum

from app.models.temp_registration import RegistrationStatus
from app.schemas.common import CamelModel


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    TRANSGENDER = "transgender"


Category = Literal["FC", "BC", "MBC", "SC", "ST"]
MessPreference = Literal["VEG", "NON VEG"]


class ContactInfo(CamelModel):
    """Parent or guardian details"""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    occupation: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    pin: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)


class RegistrationSubmit(CamelModel):
    """POST /registration/submit body"""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    date_of_birth: date
    course: str = Field(..., min_length=1)
    year: int = Field(..., ge=1, le=4)
    gender: Gender
    category: Category
    mess_preference: MessPreference
    parent_info: ContactInfo
    guardian_info: ContactInfo
    profile_image_path: Optional[str] = None
    submitted_at: Optional[datetime] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()

    @field_validator('gender', mode='before')
    @classmethod
    def lowercase_gender(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class PaymentCompletion(CamelModel):
    """POST /registration/complete-payment body"""
    email: EmailStr
    payment_id: str = Field(..., min_length=1)
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    amount: Optional[int] = Field(None, ge=0)

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()


class TempRegistrationResponse(CamelModel):
    """Temporary registration without the password hash"""
    id: str
    name: str
    email: str
    date_of_birth: date
    course: str
    year: int
    gender: str
    category: str
    mess_preference: str
    parent_info: dict
    guardian_info: dict
    profile_image_path: Optional[str] = None
    status: RegistrationStatus
    payment_id: Optional[str] = None
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    payment_date: Optional[datetime] = None
    payment_amount: Optional[int] = None
    submitted_at: datetime
    expires_at: datetime
    created_at: datetime
