# NO: from __future__ import annotations (breaks SQLModel relationship/field resolution)
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


LEAD_TYPES = ("satis", "kiralama", "Tanımsız")
UNDEFINED = "Tanımsız"


class LeadBase(SQLModel):
    customer_name: str
    request_date: str = Field(default="", index=True)                   # ISO YYYY-MM-DD, "" = unknown
    lead_type: str = Field(default=UNDEFINED, index=True)               # 'satis' / 'kiralama' / 'Tanımsız'
    assigned_personnel: str = Field(default="", index=True)
    status: str = Field(default=UNDEFINED, index=True)                  # value of "SON GÖRÜŞME SONUCU"
    project_name: Optional[str] = Field(default=None, index=True)

    customer_id: Optional[str] = Field(default=None, index=True)
    contact_id: Optional[str] = Field(default=None, index=True)
    first_customer_source: Optional[str] = None                         # 'Instagram', 'Facebook', 'Referans', ...
    form_customer_source: Optional[str] = None
    web_form_note: Optional[str] = None
    info_form_location1: Optional[str] = None
    info_form_location2: Optional[str] = None
    info_form_location3: Optional[str] = None
    info_form_location4: Optional[str] = None
    reminder_personnel: Optional[str] = None
    was_called_back: Optional[str] = None
    web_form_pool_date: Optional[str] = None
    form_system_date: Optional[str] = None
    assignment_time_diff: Optional[str] = None
    response_time_diff: Optional[str] = None
    outgoing_call_system_date: Optional[str] = None
    customer_response_date: Optional[str] = None
    was_email_sent: Optional[str] = None
    customer_email_response_date: Optional[str] = None
    unreachable_by_phone: Optional[str] = None
    days_waiting_response: Optional[int] = None
    days_to_response: Optional[int] = None
    call_note: Optional[str] = None
    email_note: Optional[str] = None
    one_on_one_meeting: Optional[str] = None
    meeting_date: Optional[str] = None
    response_result: Optional[str] = None
    negative_reason: Optional[str] = None
    was_sale_made: Optional[str] = None
    sale_count: Optional[int] = None
    appointment_date: Optional[str] = None
    last_meeting_note: Optional[str] = None
    last_meeting_result: Optional[str] = None


class Lead(LeadBase, table=True):
    __tablename__ = "leads"
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LeadCreate(LeadBase):
    pass


class LeadUpdate(SQLModel):
    customer_name: Optional[str] = None
    request_date: Optional[str] = None
    lead_type: Optional[str] = None
    assigned_personnel: Optional[str] = None
    status: Optional[str] = None
    project_name: Optional[str] = None
    customer_id: Optional[str] = None
    contact_id: Optional[str] = None
    first_customer_source: Optional[str] = None
    form_customer_source: Optional[str] = None
    web_form_note: Optional[str] = None
    reminder_personnel: Optional[str] = None
    call_note: Optional[str] = None
    email_note: Optional[str] = None
    one_on_one_meeting: Optional[str] = None
    meeting_date: Optional[str] = None
    response_result: Optional[str] = None
    negative_reason: Optional[str] = None
    was_sale_made: Optional[str] = None
    sale_count: Optional[int] = None
    appointment_date: Optional[str] = None
    last_meeting_note: Optional[str] = None
    last_meeting_result: Optional[str] = None


class SalesRepBase(SQLModel):
    name: str = Field(index=True)
    monthly_target: int = Field(default=10, ge=0)
    is_active: bool = Field(default=True)


class SalesRep(SalesRepBase, table=True):
    __tablename__ = "sales_reps"
    id: Optional[int] = Field(default=None, primary_key=True)


class SalesRepCreate(SalesRepBase):
    pass


class SalesRepUpdate(SQLModel):
    name: Optional[str] = None
    monthly_target: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class Setting(SQLModel, table=True):
    __tablename__ = "settings"
    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True, unique=True)
    value: str
