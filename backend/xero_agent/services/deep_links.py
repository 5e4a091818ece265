"""Links that open Xero records directly in the Xero web app."""

import logging
from enum import Enum
from typing import Optional
from urllib.parse import quote

from xero_agent.services.xero_client import XeroClient

logger = logging.getLogger(__name__)

XERO_WEB_URL = "https://go.xero.com"


class DeepLinkType(str, Enum):
    CONTACT = "contact"
    INVOICE = "invoice"
    BILL = "bill"
    CREDIT_NOTE = "credit_note"
    MANUAL_JOURNAL = "manual_journal"
    ACCOUNT = "account"
    BANK_TRANSACTION = "bank_transaction"


_REDIRECT_PATHS = {
    DeepLinkType.CONTACT: "/Contacts/View/{id}",
    DeepLinkType.INVOICE: "/AccountsReceivable/View.aspx?InvoiceID={id}",
    DeepLinkType.BILL: "/AccountsPayable/View.aspx?InvoiceID={id}",
    DeepLinkType.CREDIT_NOTE: "/AccountsReceivable/ViewCreditNote.aspx?creditNoteID={id}",
    DeepLinkType.MANUAL_JOURNAL: "/Journal/View.aspx?invoiceID={id}",
    DeepLinkType.ACCOUNT: "/GeneralLedger/EditAccount.aspx?accountID={id}",
}


def build_deep_link(
    short_code: Optional[str],
    link_type: DeepLinkType,
    entity_id: str,
    *,
    account_id: Optional[str] = None,
) -> str:
    """Build the URL of a record in the Xero web app.

    With a short code the link goes through Xero's organisation login so it
    opens in the right organisation. Bank transaction links need the ID of
    the bank account the transaction belongs to.
    """
    if link_type == DeepLinkType.BANK_TRANSACTION:
        if not account_id:
            raise ValueError("account_id is required for bank transaction links")
        path = f"/Bank/ViewTransaction.aspx?bankTransactionID={entity_id}&accountID={account_id}"
    else:
        path = _REDIRECT_PATHS[link_type].format(id=entity_id)

    if not short_code:
        return f"{XERO_WEB_URL}{path}"
    return (
        f"{XERO_WEB_URL}/organisationlogin/default.aspx?shortcode={short_code}"
        f"&redirecturl={quote(path, safe='/')}"
    )


async def get_deep_link(
    client: XeroClient,
    link_type: DeepLinkType,
    entity_id: str,
    *,
    account_id: Optional[str] = None,
) -> Optional[str]:
    """Build a deep link using the organisation short code from Xero.

    Falls back to a link without the organisation login when the short code
    cannot be fetched.
    """
    try:
        short_code = await client.get_short_code()
    except Exception as e:
        logger.warning(f"Could not fetch organisation short code: {e}")
        short_code = None
    return build_deep_link(short_code, link_type, entity_id, account_id=account_id)
