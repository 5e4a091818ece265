"""Pydantic models package.

Xero entities, tool arguments, attachment shapes, the handler envelope and
the tool result.
"""

from xero_agent.models.attachment import (
    AttachmentInput,
    AttachmentStatus,
    AttachmentUploadResult,
    InlineAttachment,
    ProcessedAttachment,
)
from xero_agent.models.inputs import (
    AccountType,
    AddressInput,
    BankAccountType,
    BankTransactionType,
    InvoiceLineItemInput,
    InvoiceType,
    LineAmountType,
    LineItemInput,
    ManualJournalLineInput,
    ManualJournalStatus,
    TrackingInput,
)
from xero_agent.models.response import XeroClientResponse, XeroFailure, XeroSuccess
from xero_agent.models.tool import TextContent, ToolResult
from xero_agent.models.xero import (
    Account,
    Address,
    BankAccountRef,
    BankTransaction,
    Contact,
    CreditNote,
    Invoice,
    LineItem,
    ManualJournal,
    ManualJournalLine,
    Phone,
    TrackingCategory,
)

__all__ = [
    "AttachmentInput",
    "AttachmentStatus",
    "AttachmentUploadResult",
    "InlineAttachment",
    "ProcessedAttachment",
    "AccountType",
    "AddressInput",
    "BankAccountType",
    "BankTransactionType",
    "InvoiceLineItemInput",
    "InvoiceType",
    "LineAmountType",
    "LineItemInput",
    "ManualJournalLineInput",
    "ManualJournalStatus",
    "TrackingInput",
    "XeroClientResponse",
    "XeroFailure",
    "XeroSuccess",
    "TextContent",
    "ToolResult",
    "Account",
    "Address",
    "BankAccountRef",
    "BankTransaction",
    "Contact",
    "CreditNote",
    "Invoice",
    "LineItem",
    "ManualJournal",
    "ManualJournalLine",
    "Phone",
    "TrackingCategory",
]
