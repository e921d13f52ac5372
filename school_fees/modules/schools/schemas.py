"""Schemas for Schools module."""

from datetime import datetime

from school_fees.modules.invoices.schemas import InvoiceResponse
from school_fees.modules.plans.schemas import PlanResponse
from school_fees.modules.students.schemas import ParentBrief, StudentResponse
from school_fees.shared.schemas import BaseSchema


class SchoolResponse(BaseSchema):
    """Schema for school response."""

    id: int
    name: str
    address: str
    contact_email: str
    contact_phone: str
    is_approved: bool
    subscription_plan_id: int | None
    subscription_plan: PlanResponse | None = None
    created_at: datetime


class SchoolStatistics(BaseSchema):
    """Fee totals of a school."""

    total_students: int
    total_invoices: int
    total_amount: float
    paid_amount: float
    pending_amount: float
    overdue_amount: float
    remaining_amount: float


class SchoolDetailsResponse(BaseSchema):
    """School with its roster, invoices and fee totals."""

    school: SchoolResponse
    students: list[StudentResponse]
    invoices: list[InvoiceResponse]
    statistics: SchoolStatistics


class ParentNotification(BaseSchema):
    """Pending invoices of one parent."""

    parent: ParentBrief
    invoices: list[InvoiceResponse]
    total_amount: float


class ParentNotificationsResponse(BaseSchema):
    notifications: list[ParentNotification]
    total_pending_amount: float


class SchoolAdminContact(BaseSchema):
    name: str
    email: str


class SchoolNotificationResponse(BaseSchema):
    """Pending fee summary for the school admin."""

    school_admin: SchoolAdminContact
    pending_invoices_count: int
    total_pending_amount: float
