"""Argument models for the agent tools.

These are the shapes an agent fills in; handlers turn them into Xero payloads.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class InvoiceType(str, Enum):
    ACCREC = "ACCREC"  # sales invoice
    ACCPAY = "ACCPAY"  # bill


class BankTransactionType(str, Enum):
    RECEIVE = "RECEIVE"
    SPEND = "SPEND"


class LineAmountType(str, Enum):
    EXCLUSIVE = "EXCLUSIVE"
    INCLUSIVE = "INCLUSIVE"
    NO_TAX = "NO_TAX"

    @property
    def xero_value(self) -> str:
        return {"EXCLUSIVE": "Exclusive", "INCLUSIVE": "Inclusive", "NO_TAX": "NoTax"}[self.value]


class ManualJournalStatus(str, Enum):
    DRAFT = "DRAFT"
    POSTED = "POSTED"
    DELETED = "DELETED"
    VOID = "VOID"
    ARCHIVED = "ARCHIVED"


class AccountType(str, Enum):
    BANK = "BANK"
    CURRENT = "CURRENT"
    CURRLIAB = "CURRLIAB"
    DEPRECIATN = "DEPRECIATN"
    DIRECTCOSTS = "DIRECTCOSTS"
    EQUITY = "EQUITY"
    EXPENSE = "EXPENSE"
    FIXED = "FIXED"
    INVENTORY = "INVENTORY"
    LIABILITY = "LIABILITY"
    NONCURRENT = "NONCURRENT"
    OTHERINCOME = "OTHERINCOME"
    OVERHEADS = "OVERHEADS"
    PREPAYMENT = "PREPAYMENT"
    REVENUE = "REVENUE"
    SALES = "SALES"
    TERMLIAB = "TERMLIAB"


class BankAccountType(str, Enum):
    BANK = "BANK"
    CREDITCARD = "CREDITCARD"
    PAYPAL = "PAYPAL"


class TrackingInput(BaseModel):
    name: str = Field(description="The name of the tracking category")
    option: str = Field(description="The name of the tracking option")
    tracking_category_id: str = Field(description="The ID of the tracking category")


class LineItemInput(BaseModel):
    """Line item for credit notes and bank transactions."""

    description: str = Field(description="The description of the line item")
    quantity: float = Field(description="The quantity of the line item")
    unit_amount: float = Field(description="The price per unit of the line item")
    account_code: str = Field(description="The account code of the line item")
    tax_type: str = Field(description="The tax type of the line item")


class InvoiceLineItemInput(LineItemInput):
    item_code: Optional[str] = Field(
        default=None,
        description="The item code of the line item. Leave empty if the item is not listed.",
    )
    tracking: Optional[List[TrackingInput]] = Field(
        default=None,
        description="Up to 2 tracking categories and options. Only use if prompted by the user.",
    )


class ManualJournalLineInput(BaseModel):
    line_amount: float = Field(
        description="Total for manual journal line. Debits are positive, credits are negative value",
    )
    account_code: str = Field(description="Account code for the journal line")
    description: Optional[str] = Field(default=None, description="Optional description for the line")
    tax_type: Optional[str] = Field(default=None, description="Optional tax type for the line")


class AddressInput(BaseModel):
    address_line1: str
    address_line2: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
