from pydantic import EmailStr, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime

from app.models.account import AccountPool
from app.modules.auth.roles import GenderScope, Role, is_student_role
from app.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    # Optional role hint from the login screen: "admin" or "student"
    role: Optional[str] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()


class AccountRegister(CamelModel):
    """Direct account creation (staff pool), bypassing the payment pipeline"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: str = Field(..., min_length=1, max_length=20)
    date_of_birth: Optional[date] = None
    role: str

    # Student fields
    register_number: Optional[str] = None
    course: Optional[str] = None
    year: Optional[int] = Field(None, ge=1, le=4)
    department: Optional[str] = None

    # Staff fields
    employee_id: Optional[str] = None
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    assigned_hostel: Optional[str] = None
    assigned_gender: Optional[GenderScope] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, v):
        return v.strip().lower()

    @model_validator(mode='after')
    def validate_student_fields(self):
        """Students need a date of birth"""
        if is_student_role(self.role) and self.date_of_birth is None:
            raise ValueError("Date of birth is required for students")
        return self


class ProfileUpdate(CamelModel):
    """
    Self-service profile fields. Anything else in the body (password, role,
    isActive, registerNumber, employeeId) is ignored.
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    profile_picture: Optional[str] = None
    course: Optional[str] = None
    year: Optional[int] = Field(None, ge=1, le=4)
    department: Optional[str] = None
    qualification: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    mess_preference: Optional[str] = None
    parent_contact: Optional[dict] = None
    emergency_contact: Optional[dict] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def name_not_null(cls, v):
        # May be omitted, never cleared
        if v is None:
            raise ValueError("Name cannot be empty")
        return v


class StaffUpdate(CamelModel):
    """
    Warden-tier edit of a staff member. Password, role, employeeId and the
    hostel assignment have their own endpoints and are ignored here.
    """
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[date] = None
    profile_picture: Optional[str] = None
    department: Optional[str] = None
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0)
    assigned_gender: Optional[GenderScope] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def name_not_null(cls, v):
        if v is None:
            raise ValueError("Name cannot be empty")
        return v


class StaffRoleUpdate(CamelModel):
    role: str = Field(..., min_length=1)
    assigned_gender: Optional[GenderScope] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


class AccountResponse(CamelModel):
    """Account as returned to clients (never includes the password hash)"""
    id: str
    pool: AccountPool
    role: Role
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    profile_picture: Optional[str] = None

    register_number: Optional[str] = None
    course: Optional[str] = None
    year: Optional[int] = None
    department: Optional[str] = None
    gender: Optional[str] = None
    category: Optional[str] = None
    mess_preference: Optional[str] = None
    parent_contact: Optional[dict] = None
    emergency_contact: Optional[dict] = None
    payment_details: Optional[dict] = None
    registration_data: Optional[dict] = None
    representative_info: Optional[dict] = None

    employee_id: Optional[str] = None
    date_of_joining: Optional[date] = None
    qualification: Optional[str] = None
    experience: Optional[int] = None
    assigned_hostel_id: Optional[str] = None
    assigned_gender: Optional[GenderScope] = None

    is_active: bool
    is_verified: bool
    is_staff: bool
    is_student: bool
    hostel_type: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


def account_to_dict(account) -> dict:
    """Serialize an Account row for a response body"""
    return AccountResponse.model_validate(account).dump()
