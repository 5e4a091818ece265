"""Entity handlers: one Xero call per operation, wrapped in an envelope.

Every handler authenticates, builds the full payload, performs exactly one
create/update/get call and returns XeroSuccess or XeroFailure. Nothing is
retried and nothing is raised.

Collection fields are sent as given. Xero treats line items missing from an
update as deleted, so callers must pass the complete list.
"""

import logging
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from xero_agent.core.errors import format_error
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
from xero_agent.models.response import XeroClientResponse, XeroFailure, XeroSuccess
from xero_agent.services.xero_client import XeroClient, XeroError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAYMENT_TERMS_DAYS = 30


async def call_xero(
    client: XeroClient,
    operation: Callable[[], Awaitable[Optional[T]]],
    *,
    not_found_message: str,
) -> XeroClientResponse:
    """Authenticate, run one remote operation and wrap the outcome.

    Args:
        client: Shared Xero client
        operation: Zero-argument coroutine function performing the call
        not_found_message: Error to report when Xero returns no entity

    Returns:
        XeroSuccess with the entity, or XeroFailure with a readable message
    """
    try:
        await client.authenticate()
        result = await operation()
        if result is None:
            raise XeroError(not_found_message)
        return XeroSuccess(result=result)
    except Exception as e:
        error = format_error(e)
        logger.error(f"Xero call failed: {error}")
        return XeroFailure(error=error)


# =============================================================================
# Payload helpers
# =============================================================================


def _compact(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def _today() -> str:
    return date.today().isoformat()


def _contact_ref(contact_id: Optional[str]) -> Optional[Dict[str, str]]:
    return {"ContactID": contact_id} if contact_id else None


def _line_item_payload(line: LineItemInput) -> Dict[str, Any]:
    payload = {
        "Description": line.description,
        "Quantity": line.quantity,
        "UnitAmount": line.unit_amount,
        "AccountCode": line.account_code,
        "TaxType": line.tax_type,
    }
    if isinstance(line, InvoiceLineItemInput):
        payload["ItemCode"] = line.item_code
        if line.tracking:
            payload["Tracking"] = [
                {
                    "Name": tracking.name,
                    "Option": tracking.option,
                    "TrackingCategoryID": tracking.tracking_category_id,
                }
                for tracking in line.tracking
            ]
    return _compact(payload)


def _line_items_payload(lines: Optional[Sequence[LineItemInput]]) -> Optional[List[Dict[str, Any]]]:
    if lines is None:
        return None
    return [_line_item_payload(line) for line in lines]


def _journal_lines_payload(lines: Sequence[ManualJournalLineInput]) -> List[Dict[str, Any]]:
    return [
        _compact(
            {
                "LineAmount": line.line_amount,
                "AccountCode": line.account_code,
                "Description": line.description,
                "TaxType": line.tax_type,
            }
        )
        for line in lines
    ]


def _manual_journal_payload(
    narration: str,
    lines: Sequence[ManualJournalLineInput],
    journal_date: Optional[str],
    line_amount_types: Optional[LineAmountType],
    status: Optional[ManualJournalStatus],
    url: Optional[str],
    show_on_cash_basis_reports: Optional[bool],
) -> Dict[str, Any]:
    return _compact(
        {
            "Narration": narration,
            "JournalLines": _journal_lines_payload(lines),
            "Date": journal_date,
            "LineAmountTypes": line_amount_types.xero_value if line_amount_types else None,
            "Status": status.value if status else None,
            "Url": url,
            "ShowOnCashBasisReports": show_on_cash_basis_reports,
        }
    )


# =============================================================================
# Invoices
# =============================================================================


async def create_xero_invoice(
    client: XeroClient,
    contact_id: str,
    line_items: Sequence[InvoiceLineItemInput],
    invoice_type: InvoiceType = InvoiceType.ACCREC,
    reference: Optional[str] = None,
    invoice_date: Optional[str] = None,
) -> XeroClientResponse:
    """Create a draft invoice (ACCREC) or bill (ACCPAY).

    The date defaults to today and the due date to 30 days after it.
    """

    async def operation():
        issued = date.fromisoformat(invoice_date) if invoice_date else date.today()
        payload = _compact(
            {
                "Type": invoice_type.value,
                "Contact": _contact_ref(contact_id),
                "LineItems": _line_items_payload(line_items),
                "Date": issued.isoformat(),
                "DueDate": (issued + timedelta(days=DEFAULT_PAYMENT_TERMS_DAYS)).isoformat(),
                "Reference": reference,
                "Status": "DRAFT",
            }
        )
        invoices = await client.create_invoices([payload])
        return invoices[0] if invoices else None

    return await call_xero(client, operation, not_found_message="Invoice creation failed.")


async def update_xero_invoice(
    client: XeroClient,
    invoice_id: str,
    line_items: Optional[Sequence[InvoiceLineItemInput]] = None,
    reference: Optional[str] = None,
    due_date: Optional[str] = None,
    invoice_date: Optional[str] = None,
    contact_id: Optional[str] = None,
) -> XeroClientResponse:
    """Update a draft invoice. Line items replace the existing ones."""
    payload = _compact(
        {
            "LineItems": _line_items_payload(line_items),
            "Reference": reference,
            "DueDate": due_date,
            "Date": invoice_date,
            "Contact": _contact_ref(contact_id),
        }
    )
    return await call_xero(
        client,
        lambda: client.update_invoice(invoice_id, payload),
        not_found_message="Invoice update failed.",
    )


# =============================================================================
# Credit Notes
# =============================================================================


async def create_xero_credit_note(
    client: XeroClient,
    contact_id: str,
    line_items: Sequence[LineItemInput],
    reference: Optional[str] = None,
) -> XeroClientResponse:
    payload = _compact(
        {
            "Type": "ACCRECCREDIT",
            "Contact": _contact_ref(contact_id),
            "LineItems": _line_items_payload(line_items),
            "Date": _today(),
            "Reference": reference,
            "Status": "DRAFT",
        }
    )

    async def operation():
        credit_notes = await client.create_credit_notes([payload])
        return credit_notes[0] if credit_notes else None

    return await call_xero(client, operation, not_found_message="Credit note creation failed.")


async def update_xero_credit_note(
    client: XeroClient,
    credit_note_id: str,
    line_items: Optional[Sequence[LineItemInput]] = None,
    reference: Optional[str] = None,
    contact_id: Optional[str] = None,
    credit_note_date: Optional[str] = None,
) -> XeroClientResponse:
    payload = _compact(
        {
            "LineItems": _line_items_payload(line_items),
            "Reference": reference,
            "Contact": _contact_ref(contact_id),
            "Date": credit_note_date,
        }
    )
    return await call_xero(
        client,
        lambda: client.update_credit_note(credit_note_id, payload),
        not_found_message="Credit note update failed.",
    )


# =============================================================================
# Bank Transactions
# =============================================================================


async def create_xero_bank_transaction(
    client: XeroClient,
    transaction_type: BankTransactionType,
    bank_account_id: str,
    contact_id: str,
    line_items: Sequence[LineItemInput],
    reference: Optional[str] = None,
    transaction_date: Optional[str] = None,
) -> XeroClientResponse:
    """Create a spend or receive money transaction. The date defaults to today."""
    payload = _compact(
        {
            "Type": transaction_type.value,
            "BankAccount": {"AccountID": bank_account_id},
            "Contact": _contact_ref(contact_id),
            "LineItems": _line_items_payload(line_items),
            "Reference": reference,
            "Date": transaction_date or _today(),
        }
    )

    async def operation():
        transactions = await client.create_bank_transactions([payload])
        return transactions[0] if transactions else None

    return await call_xero(client, operation, not_found_message="Bank transaction creation failed.")


async def update_xero_bank_transaction(
    client: XeroClient,
    bank_transaction_id: str,
    transaction_type: Optional[BankTransactionType] = None,
    contact_id: Optional[str] = None,
    line_items: Optional[Sequence[LineItemInput]] = None,
    reference: Optional[str] = None,
    transaction_date: Optional[str] = None,
) -> XeroClientResponse:
    payload = _compact(
        {
            "Type": transaction_type.value if transaction_type else None,
            "Contact": _contact_ref(contact_id),
            "LineItems": _line_items_payload(line_items),
            "Reference": reference,
            "Date": transaction_date,
        }
    )
    return await call_xero(
        client,
        lambda: client.update_bank_transaction(bank_transaction_id, payload),
        not_found_message="Bank transaction update failed.",
    )


# =============================================================================
# Manual Journals
# =============================================================================


async def create_xero_manual_journal(
    client: XeroClient,
    narration: str,
    manual_journal_lines: Sequence[ManualJournalLineInput],
    journal_date: Optional[str] = None,
    line_amount_types: Optional[LineAmountType] = None,
    status: Optional[ManualJournalStatus] = None,
    url: Optional[str] = None,
    show_on_cash_basis_reports: Optional[bool] = None,
) -> XeroClientResponse:
    """Create a manual journal. Lines are sent as given; balancing is up to the caller."""
    payload = _manual_journal_payload(
        narration,
        manual_journal_lines,
        journal_date or _today(),
        line_amount_types,
        status,
        url,
        show_on_cash_basis_reports,
    )

    async def operation():
        journals = await client.create_manual_journals([payload])
        return journals[0] if journals else None

    return await call_xero(client, operation, not_found_message="Manual journal creation failed.")


async def update_xero_manual_journal(
    client: XeroClient,
    narration: str,
    manual_journal_id: str,
    manual_journal_lines: Sequence[ManualJournalLineInput],
    journal_date: Optional[str] = None,
    line_amount_types: Optional[LineAmountType] = None,
    status: Optional[ManualJournalStatus] = None,
    url: Optional[str] = None,
    show_on_cash_basis_reports: Optional[bool] = None,
) -> XeroClientResponse:
    payload = _manual_journal_payload(
        narration,
        manual_journal_lines,
        journal_date,
        line_amount_types,
        status,
        url,
        show_on_cash_basis_reports,
    )
    return await call_xero(
        client,
        lambda: client.update_manual_journal(manual_journal_id, payload),
        not_found_message="Manual journal update failed.",
    )


# =============================================================================
# Accounts
# =============================================================================


async def create_xero_account(
    client: XeroClient,
    code: str,
    name: str,
    account_type: AccountType,
    account_id: Optional[str] = None,
    description: Optional[str] = None,
    tax_type: Optional[str] = None,
    enable_payments_to_account: Optional[bool] = None,
    bank_account_number: Optional[str] = None,
    bank_account_type: Optional[BankAccountType] = None,
    show_in_expense_claims: Optional[bool] = None,
) -> XeroClientResponse:
    """Create an account, or update it when ``account_id`` is given."""
    payload = _compact(
        {
            "Code": code,
            "Name": name,
            "Type": account_type.value,
            "Description": description,
            "TaxType": tax_type,
            "EnablePaymentsToAccount": enable_payments_to_account,
            "BankAccountNumber": bank_account_number,
            "BankAccountType": bank_account_type.value if bank_account_type else None,
            "ShowInExpenseClaims": show_in_expense_claims,
        }
    )

    if account_id:
        operation = lambda: client.update_account(account_id, payload)  # noqa: E731
    else:
        operation = lambda: client.create_account(payload)  # noqa: E731

    return await call_xero(client, operation, not_found_message="Account creation/update failed.")


async def get_xero_account(client: XeroClient, account_id: str) -> XeroClientResponse:
    return await call_xero(
        client,
        lambda: client.get_account(account_id),
        not_found_message=f"No account found with ID: {account_id}",
    )


# =============================================================================
# Contacts
# =============================================================================


async def update_xero_contact(
    client: XeroClient,
    contact_id: str,
    name: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    address: Optional[AddressInput] = None,
) -> XeroClientResponse:
    payload = _compact(
        {
            "Name": name,
            "FirstName": first_name,
            "LastName": last_name,
            "EmailAddress": email,
            "Phones": [{"PhoneType": "MOBILE", "PhoneNumber": phone}] if phone else None,
            "Addresses": (
                [
                    _compact(
                        {
                            "AddressType": "STREET",
                            "AddressLine1": address.address_line1,
                            "AddressLine2": address.address_line2,
                            "City": address.city,
                            "Region": address.region,
                            "PostalCode": address.postal_code,
                            "Country": address.country,
                        }
                    )
                ]
                if address
                else None
            ),
        }
    )
    return await call_xero(
        client,
        lambda: client.update_contact(contact_id, payload),
        not_found_message="Contact update failed.",
    )
