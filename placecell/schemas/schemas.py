"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator, model_validator
from typing import Annotated, Optional, List
from datetime import date, datetime, timezone
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "admin"
    coordinator = "coordinator"


class ProfileStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class CompanyStatus(str, Enum):
    active = "Active"
    blacklisted = "Blacklisted"


class RegistrationStatus(str, Enum):
    pending = "Pending"
    submitted = "Submitted"


class DriveStatus(str, Enum):
    scheduled = "scheduled"


class DateRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class TaskStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _naive_utc(value):
    """Store datetimes as naive UTC so they compare with datetime.utcnow()."""
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# Optional text where an empty form field means "not given"
OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]
UtcDatetime = Annotated[datetime, AfterValidator(_naive_utc)]


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100, pattern=r"^[A-Za-z0-9_.-]+$")
    display_name: str = Field(..., min_length=2, max_length=200)
    password: str = Field(..., min_length=8)
    phone: Optional[str] = None

class LoginRequest(BaseModel):
    username: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    role: str
    status: str

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: str
    phone: Optional[str] = None
    role: str
    status: str
    created_at: datetime

class CoordinatorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    display_name: str
    phone: Optional[str] = None


# ============================================================
# COMPANY SCHEMAS
# ============================================================

class JobPostingFields(BaseModel):
    """The six fields a registration form can fill in."""
    job_roles: Optional[str] = None
    package_offered: Optional[str] = None
    eligibility_criteria: Optional[str] = None
    bond_details: Optional[str] = None
    job_location: Optional[str] = None
    selection_process: Optional[str] = None

class CompanyCreate(JobPostingFields):
    name: str = Field(..., min_length=1, max_length=200)
    website: OptionalText = None
    industry: Optional[str] = None
    status: CompanyStatus = CompanyStatus.active
    registration_status: RegistrationStatus = RegistrationStatus.pending
    poc_1st: str = Field(..., min_length=1, max_length=200)
    poc_2nd: OptionalText = None
    hr_name: Optional[str] = None
    hr_phone: Optional[str] = None
    hr_email: OptionalEmail = None
    notes: Optional[str] = None

    @field_validator("name", "poc_1st")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @model_validator(mode="after")
    def distinct_pocs(self):
        if self.poc_2nd and self.poc_2nd.strip() == self.poc_1st:
            raise ValueError("poc_2nd must differ from poc_1st")
        return self

class CompanyUpdate(JobPostingFields):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    website: Optional[str] = None
    industry: Optional[str] = None
    status: Optional[CompanyStatus] = None
    registration_status: Optional[RegistrationStatus] = None
    poc_1st: Optional[str] = Field(None, min_length=1, max_length=200)
    poc_2nd: Optional[str] = None
    hr_name: Optional[str] = None
    hr_phone: Optional[str] = None
    hr_email: OptionalEmail = None
    notes: Optional[str] = None

class BlacklistRequest(BaseModel):
    reason: str = ""

class CompanyResponse(JobPostingFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    status: str
    registration_status: str
    poc_1st: str
    poc_2nd: Optional[str] = None
    hr_name: Optional[str] = None
    hr_phone: Optional[str] = None
    hr_email: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class RegistrationFormResponse(BaseModel):
    success: bool
    message: str
    filename: Optional[str] = None
    extracted: JobPostingFields
    company: CompanyResponse

class ParsedRegistrationFormResponse(BaseModel):
    id: str
    company_id: int
    raw_form_id: str
    fields: JobPostingFields
    created_at: datetime


# ============================================================
# CONTACT SCHEMAS
# ============================================================

class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    designation: Optional[str] = None
    phone: Optional[str] = None
    email: OptionalEmail = None
    is_primary: bool = False

class ContactUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    designation: Optional[str] = None
    phone: Optional[str] = None
    email: OptionalEmail = None
    is_primary: Optional[bool] = None

class ContactResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    name: str
    designation: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_primary: bool


# ============================================================
# SCHEDULING SCHEMAS
# ============================================================

class BlockedDateCreate(BaseModel):
    start_date: date
    end_date: date
    reason: str = ""

class BlockedDateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    start_date: date
    end_date: date
    reason: str
    created_by: str
    created_at: datetime

class DriveCreate(BaseModel):
    company_id: int
    drive_date: date
    drive_time: OptionalText = None
    venue: OptionalText = None
    notes: OptionalText = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    eligible_branches: Optional[str] = None
    # Justification used to file a date request when the date is blocked
    request_description: Optional[str] = None

class DriveUpdate(BaseModel):
    drive_time: Optional[str] = None
    venue: Optional[str] = None
    notes: Optional[str] = None
    min_cgpa: Optional[float] = Field(None, ge=0, le=10)
    eligible_branches: Optional[str] = None
    registered_count: Optional[int] = Field(None, ge=0)
    appeared_count: Optional[int] = Field(None, ge=0)
    selected_count: Optional[int] = Field(None, ge=0)

class DriveResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    company_name: Optional[str] = None
    coordinator_name: str
    drive_date: date
    drive_time: Optional[str] = None
    venue: Optional[str] = None
    notes: Optional[str] = None
    min_cgpa: Optional[float] = None
    eligible_branches: Optional[str] = None
    registered_count: int = 0
    appeared_count: int = 0
    selected_count: int = 0
    status: str
    created_at: datetime

class DateRequestCreate(BaseModel):
    requested_date: date
    company_id: Optional[int] = None
    description: str = ""

class DateRequestDecision(BaseModel):
    response: Optional[str] = None

class DateRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    requested_date: date
    coordinator_name: str
    description: str
    status: str
    admin_response: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime

class ScheduleOutcome(BaseModel):
    """Result of POST /drives: either a lock or a filed date request."""
    outcome: str  # "locked" or "request_created"
    message: str
    drive: Optional[DriveResponse] = None
    date_request: Optional[DateRequestResponse] = None

class AvailabilityResponse(BaseModel):
    date: date
    is_blocked: bool
    is_locked: bool
    blocked_by: Optional[BlockedDateResponse] = None
    locked_by: Optional[DriveResponse] = None

class CalendarDay(BaseModel):
    date: date
    is_blocked: bool
    is_locked: bool
    reason: Optional[str] = None
    locked_by: Optional[str] = None


# ============================================================
# TASK SCHEMAS
# ============================================================

class TaskCreate(BaseModel):
    title: str = ""
    due_date: UtcDatetime
    description: Optional[str] = None
    company_id: Optional[int] = None
    priority: TaskPriority = TaskPriority.medium

class TaskUpdate(BaseModel):
    title: Optional[str] = None
    due_date: Optional[UtcDatetime] = None
    description: Optional[str] = None
    company_id: Optional[int] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None

class TaskStatusUpdate(BaseModel):
    status: TaskStatus

class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    coordinator_name: str
    due_date: datetime
    priority: str
    status: str
    is_overdue: bool = False
    is_due_today: bool = False
    created_at: datetime


# ============================================================
# EMAIL SCHEMAS
# ============================================================

class Placeholder(BaseModel):
    key: str = Field(..., min_length=1, pattern=r"^[a-z0-9_]+$")
    label: str = Field(..., min_length=1)
    default: Optional[str] = None
    required: bool = False

class EmailTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1, max_length=500)
    body: str = Field(..., min_length=1)
    placeholders: List[Placeholder] = []

class EmailTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[str] = Field(None, min_length=1, max_length=500)
    body: Optional[str] = Field(None, min_length=1)
    placeholders: Optional[List[Placeholder]] = None

class EmailTemplateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    subject: str
    body: str
    placeholders: List[Placeholder] = []
    created_at: datetime

class EmailComposeRequest(BaseModel):
    company_id: int
    template_id: int
    values: dict[str, str] = {}

class EmailPreviewResponse(BaseModel):
    to: Optional[str] = None
    subject: str
    body: str

class EmailLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    template_id: Optional[int] = None
    company_name: str
    recipient_email: str
    subject: str
    body: str
    status: str
    sent_at: Optional[datetime] = None
    created_at: datetime

class EmailGenerateRequest(BaseModel):
    company_name: str = Field(..., min_length=1)
    hr_name: Optional[str] = None
    purpose: Optional[str] = None

class EmailDraftResponse(BaseModel):
    subject: str
    body: str


# ============================================================
# DASHBOARD SCHEMAS
# ============================================================

class DashboardSummary(BaseModel):
    total_companies: int
    active_companies: int
    blacklisted_companies: int
    registrations_submitted: int
    upcoming_drives: int
    pending_date_requests: int
    open_tasks: int
    overdue_tasks: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
