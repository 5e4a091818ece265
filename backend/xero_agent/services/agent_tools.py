"""LangChain agent tools for Xero bookkeeping operations.

Each tool follows the same sequence:
- Call the entity handler (one Xero create/update/get call)
- On failure, report ``Error {action}: {error}`` and stop
- Upload attachments, only when the saved entity has an ID
- Build a deep link, only when the entity has an ID
- Join the non-empty report lines

Tools are bound to a ToolContext by get_all_tools(); there is no global
client.
"""

import logging
from functools import partial
from typing import List, Optional, Sequence

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, Field

from xero_agent.models.attachment import AttachmentInput, InlineAttachment
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
)
from xero_agent.models.xero import Account, ManualJournal
from xero_agent.services.attachments import (
    attach_files,
    attach_inline_files,
    describe_results,
)
from xero_agent.services.deep_links import DeepLinkType, get_deep_link
from xero_agent.services.handlers import (
    create_xero_account,
    create_xero_bank_transaction,
    create_xero_credit_note,
    create_xero_invoice,
    create_xero_manual_journal,
    get_xero_account,
    update_xero_bank_transaction,
    update_xero_contact,
    update_xero_credit_note,
    update_xero_invoice,
    update_xero_manual_journal,
)
from xero_agent.services.tool_factory import ToolContext, create_xero_tool
from xero_agent.services.xero_client import AttachmentEndpoint, XeroClient

logger = logging.getLogger(__name__)

FULL_LINE_ITEMS_NOTE = (
    "All line items must be provided. Any line items not provided will be removed, "
    "including existing line items. Do not modify line items that have not been "
    "specified by the user."
)

DEEP_LINK_NOTE = (
    "A deep link to the record in Xero is returned. "
    "This link should be displayed to the user."
)


# =============================================================================
# Tool Argument Schemas
# =============================================================================


class CreateInvoiceArgs(BaseModel):
    contact_id: str = Field(
        description="The ID of the contact to create the invoice for. Can be obtained from the list-contacts tool."
    )
    line_items: List[InvoiceLineItemInput]
    type: InvoiceType = Field(
        default=InvoiceType.ACCREC,
        description=(
            "ACCREC is for sales invoices or customer invoices. "
            "ACCPAY is for purchase invoices, supplier invoices or bills. Defaults to ACCREC."
        ),
    )
    reference: Optional[str] = Field(default=None, description="A reference number for the invoice.")
    date: Optional[str] = Field(
        default=None,
        description="The date the invoice was created (YYYY-MM-DD format). Defaults to today.",
    )
    attachments: Optional[List[InlineAttachment]] = Field(
        default=None, description="Array of file attachments"
    )


class UpdateInvoiceArgs(BaseModel):
    invoice_id: str = Field(description="The ID of the invoice to update.")
    line_items: Optional[List[InvoiceLineItemInput]] = Field(
        default=None, description=FULL_LINE_ITEMS_NOTE
    )
    reference: Optional[str] = Field(default=None, description="A reference number for the invoice.")
    due_date: Optional[str] = Field(default=None, description="The due date of the invoice (YYYY-MM-DD format).")
    date: Optional[str] = Field(default=None, description="The date of the invoice (YYYY-MM-DD format).")
    contact_id: Optional[str] = Field(
        default=None,
        description="The ID of the contact to update the invoice for. Can be obtained from the list-contacts tool.",
    )
    attachments: Optional[List[AttachmentInput]] = Field(
        default=None,
        description="Array of file attachments, each given by filePath or base64Content",
    )


class CreateCreditNoteArgs(BaseModel):
    contact_id: str = Field(description="The ID of the contact to create the credit note for.")
    line_items: List[LineItemInput]
    reference: Optional[str] = Field(default=None, description="A reference number for the credit note.")
    attachments: Optional[List[AttachmentInput]] = Field(
        default=None,
        description="Array of file attachments, each given by filePath or base64Content",
    )


class UpdateCreditNoteArgs(BaseModel):
    credit_note_id: str = Field(description="The ID of the credit note to update.")
    line_items: Optional[List[LineItemInput]] = Field(default=None, description=FULL_LINE_ITEMS_NOTE)
    reference: Optional[str] = Field(default=None, description="A reference number for the credit note.")
    contact_id: Optional[str] = Field(default=None, description="The ID of the contact for the credit note.")
    date: Optional[str] = Field(default=None, description="The date of the credit note (YYYY-MM-DD format).")
    attachments: Optional[List[InlineAttachment]] = Field(
        default=None, description="Array of file attachments"
    )


class CreateBankTransactionArgs(BaseModel):
    type: BankTransactionType
    bank_account_id: str = Field(description="The ID of the bank account the transaction belongs to.")
    contact_id: str
    line_items: List[LineItemInput]
    reference: Optional[str] = None
    date: Optional[str] = Field(
        default=None,
        description="If no date is provided, the date will default to today's date",
    )
    attachments: Optional[List[AttachmentInput]] = Field(
        default=None,
        description="Array of file attachments, each given by filePath or base64Content",
    )


class UpdateBankTransactionArgs(BaseModel):
    bank_transaction_id: str
    type: Optional[BankTransactionType] = None
    contact_id: Optional[str] = None
    line_items: Optional[List[LineItemInput]] = Field(default=None, description=FULL_LINE_ITEMS_NOTE)
    reference: Optional[str] = None
    date: Optional[str] = None
    attachments: Optional[List[AttachmentInput]] = Field(
        default=None,
        description="Array of file attachments, each given by filePath or base64Content",
    )


class _ManualJournalArgs(BaseModel):
    narration: str = Field(description="Description of manual journal being posted")
    manual_journal_lines: List[ManualJournalLineInput] = Field(
        description="At least two journal lines. Debits and credits must balance."
    )
    date: Optional[str] = Field(default=None, description="Optional date in YYYY-MM-DD format")
    line_amount_types: Optional[LineAmountType] = Field(
        default=None, description="Optional line amount types, NO_TAX by default"
    )
    status: Optional[ManualJournalStatus] = Field(
        default=None, description="Optional status of the manual journal, DRAFT by default"
    )
    url: Optional[str] = Field(default=None, description="Optional URL link to a source document")
    show_on_cash_basis_reports: Optional[bool] = Field(
        default=None, description="Optional boolean to show on cash basis reports, default is true"
    )
    attachments: Optional[List[InlineAttachment]] = Field(
        default=None, description="Array of file attachments"
    )


class CreateManualJournalArgs(_ManualJournalArgs):
    pass


class UpdateManualJournalArgs(_ManualJournalArgs):
    manual_journal_id: str = Field(description="ID of the manual journal to update")


class CreateAccountArgs(BaseModel):
    code: str = Field(max_length=10, description="Account code (max 10 characters)")
    name: str = Field(description="Account name")
    type: AccountType = Field(description="Account type")
    account_id: Optional[str] = Field(default=None, description="Account ID for updating existing account")
    description: Optional[str] = Field(default=None, description="Account description")
    tax_type: Optional[str] = Field(default=None, description="Tax type")
    enable_payments_to_account: Optional[bool] = Field(default=None, description="Enable payments to account")
    bank_account_number: Optional[str] = Field(default=None, description="Bank account number")
    bank_account_type: Optional[BankAccountType] = Field(default=None, description="Bank account type")
    show_in_expense_claims: Optional[bool] = Field(default=None, description="Show in expense claims")


class GetAccountArgs(BaseModel):
    account_id: str = Field(description="The ID of the account to retrieve")


class UpdateContactArgs(BaseModel):
    contact_id: str
    name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[AddressInput] = None


# =============================================================================
# Report Helpers
# =============================================================================


def _report(lines: Sequence[Optional[str]]) -> str:
    return "\n".join(line for line in lines if line)


def _or_none(value: object) -> str:
    return str(value) if value not in (None, "") else "None"


def _link_line(link: Optional[str]) -> Optional[str]:
    return f"Link to view: {link}" if link else None


def _describe_journal_lines(journal: ManualJournal) -> List[str]:
    if not journal.journal_lines:
        return ["No journal lines"]
    lines = []
    for line in journal.journal_lines:
        lines.append(
            "\n".join(
                [
                    f"Line Amount: {line.line_amount}",
                    f"Account Code: {line.account_code}" if line.account_code else "No account code",
                    f"Description: {line.description}" if line.description else "No description",
                    f"Tax Type: {line.tax_type}" if line.tax_type else "No tax type",
                    f"Tax Amount: {line.tax_amount}",
                ]
            )
        )
    return lines


def _describe_manual_journal(journal: ManualJournal, verb: str) -> List[Optional[str]]:
    return [
        f"Manual journal {verb}: {journal.narration} (ID: {journal.manual_journal_id})",
        f"Date: {journal.date}" if journal.date else None,
        f"Status: {journal.status}" if journal.status else "No status",
        *_describe_journal_lines(journal),
        f"Show on Cash Basis Reports: {journal.show_on_cash_basis_reports}",
    ]


# =============================================================================
# Invoice Tools
# =============================================================================


async def create_invoice(client: XeroClient, args: CreateInvoiceArgs) -> str:
    response = await create_xero_invoice(
        client, args.contact_id, args.line_items, args.type, args.reference, args.date
    )
    if response.is_error:
        return f"Error creating invoice: {response.error}"

    invoice = response.result
    results = await attach_inline_files(
        invoice.invoice_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.INVOICES, include_online=True),
    )
    link = None
    if invoice.invoice_id:
        link_type = DeepLinkType.INVOICE if invoice.type == InvoiceType.ACCREC.value else DeepLinkType.BILL
        link = await get_deep_link(client, link_type, invoice.invoice_id)

    return _report(
        [
            "Invoice created successfully:",
            f"ID: {invoice.invoice_id}",
            f"Contact: {invoice.contact.name if invoice.contact else None}",
            f"Type: {invoice.type}",
            f"Date: {invoice.date}",
            f"Reference: {_or_none(invoice.reference)}",
            f"Total: {invoice.total}",
            f"Status: {invoice.status}",
            describe_results(results),
            _link_line(link),
        ]
    )


async def update_invoice(client: XeroClient, args: UpdateInvoiceArgs) -> str:
    response = await update_xero_invoice(
        client,
        args.invoice_id,
        args.line_items,
        args.reference,
        args.due_date,
        args.date,
        args.contact_id,
    )
    if response.is_error:
        return f"Error updating invoice: {response.error}"

    invoice = response.result
    results = await attach_files(
        invoice.invoice_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.INVOICES, include_online=True),
    )
    link = None
    if invoice.invoice_id:
        link_type = DeepLinkType.INVOICE if invoice.type == InvoiceType.ACCREC.value else DeepLinkType.BILL
        link = await get_deep_link(client, link_type, invoice.invoice_id)

    return _report(
        [
            "Invoice updated successfully:",
            f"ID: {invoice.invoice_id}",
            f"Contact: {invoice.contact.name if invoice.contact else None}",
            f"Type: {invoice.type}",
            f"Reference: {_or_none(invoice.reference)}",
            f"Total: {invoice.total}",
            f"Status: {invoice.status}",
            describe_results(results),
            _link_line(link),
        ]
    )


# =============================================================================
# Credit Note Tools
# =============================================================================


async def create_credit_note(client: XeroClient, args: CreateCreditNoteArgs) -> str:
    response = await create_xero_credit_note(client, args.contact_id, args.line_items, args.reference)
    if response.is_error:
        return f"Error creating credit note: {response.error}"

    credit_note = response.result
    results = await attach_files(
        credit_note.credit_note_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.CREDIT_NOTES, include_online=True),
    )
    link = None
    if credit_note.credit_note_id:
        link = await get_deep_link(client, DeepLinkType.CREDIT_NOTE, credit_note.credit_note_id)

    return _report(
        [
            "Credit note created successfully:",
            f"ID: {credit_note.credit_note_id}",
            f"Contact: {credit_note.contact.name if credit_note.contact else None}",
            f"Total: {credit_note.total}",
            f"Status: {credit_note.status}",
            describe_results(results),
            _link_line(link),
        ]
    )


async def update_credit_note(client: XeroClient, args: UpdateCreditNoteArgs) -> str:
    response = await update_xero_credit_note(
        client,
        args.credit_note_id,
        args.line_items,
        args.reference,
        args.contact_id,
        args.date,
    )
    if response.is_error:
        return f"Error updating credit note: {response.error}"

    credit_note = response.result
    results = await attach_inline_files(
        credit_note.credit_note_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.CREDIT_NOTES, include_online=True),
    )
    link = None
    if credit_note.credit_note_id:
        link = await get_deep_link(client, DeepLinkType.CREDIT_NOTE, credit_note.credit_note_id)

    return _report(
        [
            "Credit note updated successfully:",
            f"ID: {credit_note.credit_note_id}",
            f"Contact: {credit_note.contact.name if credit_note.contact else None}",
            f"Total: {credit_note.total}",
            f"Status: {credit_note.status}",
            describe_results(results),
            _link_line(link),
        ]
    )


# =============================================================================
# Bank Transaction Tools
# =============================================================================


async def _bank_transaction_link(client: XeroClient, transaction) -> Optional[str]:
    account_id = transaction.bank_account.account_id if transaction.bank_account else None
    if not transaction.bank_transaction_id or not account_id:
        return None
    return await get_deep_link(
        client,
        DeepLinkType.BANK_TRANSACTION,
        transaction.bank_transaction_id,
        account_id=account_id,
    )


def _describe_bank_transaction(transaction, heading: str) -> List[Optional[str]]:
    return [
        heading,
        f"ID: {transaction.bank_transaction_id}",
        f"Date: {transaction.date}",
        f"Contact: {transaction.contact.name if transaction.contact else None}",
        f"Total: {transaction.total}",
        f"Status: {transaction.status}",
    ]


async def create_bank_transaction(client: XeroClient, args: CreateBankTransactionArgs) -> str:
    response = await create_xero_bank_transaction(
        client,
        args.type,
        args.bank_account_id,
        args.contact_id,
        args.line_items,
        args.reference,
        args.date,
    )
    if response.is_error:
        return f"Error creating bank transaction: {response.error}"

    transaction = response.result
    results = await attach_files(
        transaction.bank_transaction_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.BANK_TRANSACTIONS),
    )
    link = await _bank_transaction_link(client, transaction)

    return _report(
        [
            *_describe_bank_transaction(transaction, "Bank transaction created successfully:"),
            describe_results(results),
            _link_line(link),
        ]
    )


async def update_bank_transaction(client: XeroClient, args: UpdateBankTransactionArgs) -> str:
    response = await update_xero_bank_transaction(
        client,
        args.bank_transaction_id,
        args.type,
        args.contact_id,
        args.line_items,
        args.reference,
        args.date,
    )
    if response.is_error:
        return f"Error updating bank transaction: {response.error}"

    transaction = response.result
    results = await attach_files(
        transaction.bank_transaction_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.BANK_TRANSACTIONS),
    )
    link = await _bank_transaction_link(client, transaction)

    return _report(
        [
            *_describe_bank_transaction(transaction, "Bank transaction updated successfully:"),
            describe_results(results),
            _link_line(link),
        ]
    )


# =============================================================================
# Manual Journal Tools
# =============================================================================


async def create_manual_journal(client: XeroClient, args: CreateManualJournalArgs) -> str:
    response = await create_xero_manual_journal(
        client,
        args.narration,
        args.manual_journal_lines,
        args.date,
        args.line_amount_types,
        args.status,
        args.url,
        args.show_on_cash_basis_reports,
    )
    if response.is_error:
        return f"Error creating manual journal: {response.error}"

    journal = response.result
    results = await attach_inline_files(
        journal.manual_journal_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.MANUAL_JOURNALS),
    )
    link = None
    if journal.manual_journal_id:
        link = await get_deep_link(client, DeepLinkType.MANUAL_JOURNAL, journal.manual_journal_id)

    return _report(
        [
            *_describe_manual_journal(journal, "created"),
            describe_results(results),
            _link_line(link),
        ]
    )


async def update_manual_journal(client: XeroClient, args: UpdateManualJournalArgs) -> str:
    response = await update_xero_manual_journal(
        client,
        args.narration,
        args.manual_journal_id,
        args.manual_journal_lines,
        args.date,
        args.line_amount_types,
        args.status,
        args.url,
        args.show_on_cash_basis_reports,
    )
    if response.is_error:
        return f"Error updating manual journal: {response.error}"

    journal = response.result
    results = await attach_inline_files(
        journal.manual_journal_id,
        args.attachments,
        partial(client.upload_attachment, AttachmentEndpoint.MANUAL_JOURNALS),
    )
    link = None
    if journal.manual_journal_id:
        link = await get_deep_link(client, DeepLinkType.MANUAL_JOURNAL, journal.manual_journal_id)

    return _report(
        [
            *_describe_manual_journal(journal, "updated"),
            describe_results(results),
            _link_line(link),
        ]
    )


# =============================================================================
# Account Tools
# =============================================================================


async def create_account(client: XeroClient, args: CreateAccountArgs) -> str:
    verb = "updated" if args.account_id else "created"
    response = await create_xero_account(
        client,
        args.code,
        args.name,
        args.type,
        args.account_id,
        args.description,
        args.tax_type,
        args.enable_payments_to_account,
        args.bank_account_number,
        args.bank_account_type,
        args.show_in_expense_claims,
    )
    if response.is_error:
        action = "updating" if args.account_id else "creating"
        return f"Error {action} account: {response.error}"

    account: Account = response.result
    link = None
    if account.account_id:
        link = await get_deep_link(client, DeepLinkType.ACCOUNT, account.account_id)

    return _report(
        [
            f"Account {verb}: {account.name} (ID: {account.account_id})",
            f"Code: {account.code}",
            f"Type: {account.type}",
            _link_line(link),
        ]
    )


async def get_account(client: XeroClient, args: GetAccountArgs) -> str:
    response = await get_xero_account(client, args.account_id)
    if response.is_error:
        return f"Error retrieving account: {response.error}"

    account: Account = response.result
    link = None
    if account.account_id:
        link = await get_deep_link(client, DeepLinkType.ACCOUNT, account.account_id)

    return _report(
        [
            f"Account ID: {account.account_id}",
            f"Code: {account.code}",
            f"Name: {account.name}",
            f"Type: {account.type}",
            f"Description: {_or_none(account.description)}",
            f"Tax Type: {_or_none(account.tax_type)}",
            f"Bank Account Number: {_or_none(account.bank_account_number)}",
            f"Bank Account Type: {_or_none(account.bank_account_type)}",
            "Enable Payments: "
            + (str(account.enable_payments_to_account) if account.enable_payments_to_account is not None else "Not set"),
            "Show in Expense Claims: "
            + (str(account.show_in_expense_claims) if account.show_in_expense_claims is not None else "Not set"),
            f"Status: {account.status}",
            _link_line(link),
        ]
    )


# =============================================================================
# Contact Tools
# =============================================================================


async def update_contact(client: XeroClient, args: UpdateContactArgs) -> str:
    response = await update_xero_contact(
        client,
        args.contact_id,
        args.name,
        args.first_name,
        args.last_name,
        args.email,
        args.phone,
        args.address,
    )
    if response.is_error:
        return f"Error updating contact: {response.error}"

    contact = response.result
    link = None
    if contact.contact_id:
        link = await get_deep_link(client, DeepLinkType.CONTACT, contact.contact_id)

    return _report(
        [
            f"Contact updated: {contact.name} (ID: {contact.contact_id})",
            _link_line(link),
        ]
    )


# =============================================================================
# Tool Registration
# =============================================================================


def get_all_tools(context: ToolContext) -> List[StructuredTool]:
    """Get all agent tools bound to the given context."""
    bind = partial(create_xero_tool, context=context)
    return [
        bind(
            "create-invoice",
            f"Create an invoice in Xero. {DEEP_LINK_NOTE}",
            CreateInvoiceArgs,
            create_invoice,
            action="creating invoice",
        ),
        bind(
            "update-invoice",
            f"Update an invoice in Xero. Only works on draft invoices. {DEEP_LINK_NOTE}",
            UpdateInvoiceArgs,
            update_invoice,
            action="updating invoice",
        ),
        bind(
            "create-credit-note",
            f"Create a credit note in Xero. {DEEP_LINK_NOTE}",
            CreateCreditNoteArgs,
            create_credit_note,
            action="creating credit note",
        ),
        bind(
            "update-credit-note",
            f"Update a credit note in Xero. Only works on draft credit notes. {DEEP_LINK_NOTE}",
            UpdateCreditNoteArgs,
            update_credit_note,
            action="updating credit note",
        ),
        bind(
            "create-bank-transaction",
            f"Create a bank transaction in Xero. {DEEP_LINK_NOTE}",
            CreateBankTransactionArgs,
            create_bank_transaction,
            action="creating bank transaction",
        ),
        bind(
            "update-bank-transaction",
            f"Update a bank transaction in Xero. {DEEP_LINK_NOTE}",
            UpdateBankTransactionArgs,
            update_bank_transaction,
            action="updating bank transaction",
        ),
        bind(
            "create-manual-journal",
            "Create a manual journal in Xero. Make sure journal line pairs have "
            f"credit and debit balanced. {DEEP_LINK_NOTE}",
            CreateManualJournalArgs,
            create_manual_journal,
            action="creating manual journal",
        ),
        bind(
            "update-manual-journal",
            "Update a manual journal in Xero. Only works on draft manual journals. "
            "Do not modify line items or parameters that have not been specified by the user.",
            UpdateManualJournalArgs,
            update_manual_journal,
            action="updating manual journal",
        ),
        bind(
            "create-account",
            "Create or update an account in Xero. If account_id is provided, the account "
            f"will be updated; otherwise, a new account will be created. {DEEP_LINK_NOTE}",
            CreateAccountArgs,
            create_account,
            action="creating or updating account",
        ),
        bind(
            "get-account",
            "Retrieve a single account from Xero by its ID, with its code, name, type, "
            "description and other account properties.",
            GetAccountArgs,
            get_account,
            action="retrieving account",
        ),
        bind(
            "update-contact",
            f"Update a contact in Xero. {DEEP_LINK_NOTE}",
            UpdateContactArgs,
            update_contact,
            action="updating contact",
        ),
    ]
