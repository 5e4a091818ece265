"""Xero accounting entities as returned by the Accounting API.

Xero serialises fields in PascalCase and dates as ``/Date(1700000000000+0000)/``.
Only the fields the tools read are modelled; everything else is ignored.
"""

import re
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_pascal

_MS_DATE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")


def parse_xero_date(value: Any) -> Any:
    """Convert a Xero ``/Date(ms)/`` value to an ISO date string.

    ISO timestamps are cut down to the date part; anything else passes through.
    """
    if not isinstance(value, str):
        return value
    match = _MS_DATE.match(value)
    if match:
        millis = int(match.group(1))
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).date().isoformat()
    if len(value) >= 10 and value[4:5] == "-" and value[7:8] == "-":
        return value[:10]
    return value


class XeroModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
    )


class Address(XeroModel):
    address_type: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class Phone(XeroModel):
    phone_type: Optional[str] = None
    phone_number: Optional[str] = None


class Contact(XeroModel):
    contact_id: Optional[str] = Field(default=None, alias="ContactID")
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_address: Optional[str] = None
    contact_status: Optional[str] = None
    addresses: List[Address] = Field(default_factory=list)
    phones: List[Phone] = Field(default_factory=list)


class TrackingCategory(XeroModel):
    tracking_category_id: Optional[str] = Field(default=None, alias="TrackingCategoryID")
    name: Optional[str] = None
    option: Optional[str] = None


class LineItem(XeroModel):
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_amount: Optional[float] = None
    account_code: Optional[str] = None
    tax_type: Optional[str] = None
    item_code: Optional[str] = None
    tax_amount: Optional[float] = None
    line_amount: Optional[float] = None
    tracking: List[TrackingCategory] = Field(default_factory=list)


class _Dated(XeroModel):
    date: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> Any:
        return parse_xero_date(value)


class Invoice(_Dated):
    invoice_id: Optional[str] = Field(default=None, alias="InvoiceID")
    invoice_number: Optional[str] = None
    type: Optional[str] = None
    contact: Optional[Contact] = None
    due_date: Optional[str] = None
    reference: Optional[str] = None
    status: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
    sub_total: Optional[float] = None
    total_tax: Optional[float] = None
    total: Optional[float] = None
    currency_code: Optional[str] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _parse_due_date(cls, value: Any) -> Any:
        return parse_xero_date(value)


class CreditNote(_Dated):
    credit_note_id: Optional[str] = Field(default=None, alias="CreditNoteID")
    credit_note_number: Optional[str] = None
    type: Optional[str] = None
    contact: Optional[Contact] = None
    reference: Optional[str] = None
    status: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
    total: Optional[float] = None


class BankAccountRef(XeroModel):
    account_id: Optional[str] = Field(default=None, alias="AccountID")
    code: Optional[str] = None
    name: Optional[str] = None


class BankTransaction(_Dated):
    bank_transaction_id: Optional[str] = Field(default=None, alias="BankTransactionID")
    type: Optional[str] = None
    contact: Optional[Contact] = None
    bank_account: Optional[BankAccountRef] = None
    reference: Optional[str] = None
    status: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=list)
    total: Optional[float] = None


class ManualJournalLine(XeroModel):
    line_amount: Optional[float] = None
    account_code: Optional[str] = None
    description: Optional[str] = None
    tax_type: Optional[str] = None
    tax_amount: Optional[float] = None


class ManualJournal(_Dated):
    manual_journal_id: Optional[str] = Field(default=None, alias="ManualJournalID")
    narration: Optional[str] = None
    status: Optional[str] = None
    line_amount_types: Optional[str] = None
    journal_lines: List[ManualJournalLine] = Field(default_factory=list)
    url: Optional[str] = None
    show_on_cash_basis_reports: Optional[bool] = None


class Account(XeroModel):
    account_id: Optional[str] = Field(default=None, alias="AccountID")
    code: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    tax_type: Optional[str] = None
    enable_payments_to_account: Optional[bool] = None
    bank_account_number: Optional[str] = None
    bank_account_type: Optional[str] = None
    show_in_expense_claims: Optional[bool] = None
