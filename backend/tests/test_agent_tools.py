"""Unit tests for agent tools.

Tests the LangChain tools end to end against a fake XeroClient: entity call,
attachment uploads, deep links and the text report.
"""

import base64
from unittest.mock import AsyncMock

import pytest
from langchain_core.tools import StructuredTool
from pydantic import BaseModel

from xero_agent.models.xero import (
    Account,
    BankAccountRef,
    BankTransaction,
    Contact,
    CreditNote,
    Invoice,
    ManualJournal,
    ManualJournalLine,
)
from xero_agent.services.agent_tools import get_all_tools
from xero_agent.services.tool_factory import ToolContext, create_xero_tool
from xero_agent.services.xero_client import (
    AttachmentEndpoint,
    XeroClient,
    XeroServerError,
    XeroValidationError,
)

LINE_ITEM = {
    "description": "Consulting",
    "quantity": 1,
    "unit_amount": 100.0,
    "account_code": "200",
    "tax_type": "OUTPUT",
}


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def text_of(result) -> str:
    assert set(result) == {"content"}
    assert result["content"][0]["type"] == "text"
    return result["content"][0]["text"]


def acme_invoice(**overrides) -> Invoice:
    values = {
        "invoice_id": "inv-1",
        "type": "ACCREC",
        "contact": Contact(contact_id="c-1", name="Acme Ltd"),
        "date": "2024-01-15",
        "total": 115.0,
        "status": "DRAFT",
    }
    values.update(overrides)
    return Invoice(**values)


def bank_transaction(**overrides) -> BankTransaction:
    values = {
        "bank_transaction_id": "bt-1",
        "bank_account": BankAccountRef(account_id="bank-1"),
        "contact": Contact(name="Fuel Co"),
        "date": "2024-02-01",
        "total": 80.0,
        "status": "AUTHORISED",
    }
    values.update(overrides)
    return BankTransaction(**values)


# =============================================================================
# Registration
# =============================================================================


class TestToolRegistration:
    """Tests for get_all_tools."""

    def test_all_tools_registered(self, tool_context):
        names = [tool.name for tool in get_all_tools(tool_context)]

        assert names == [
            "create-invoice",
            "update-invoice",
            "create-credit-note",
            "update-credit-note",
            "create-bank-transaction",
            "update-bank-transaction",
            "create-manual-journal",
            "update-manual-journal",
            "create-account",
            "get-account",
            "update-contact",
        ]

    def test_tools_are_structured_tools_with_descriptions(self, tools):
        for tool in tools.values():
            assert isinstance(tool, StructuredTool)
            assert tool.description

    @pytest.mark.asyncio
    async def test_tools_use_their_own_context(self, fake_client):
        other_client = AsyncMock(spec=XeroClient)
        other_client.get_account.return_value = Account(account_id="acc-2")
        other_client.get_short_code.return_value = ""
        other_tools = {tool.name: tool for tool in get_all_tools(ToolContext(other_client))}

        await other_tools["get-account"].ainvoke({"account_id": "acc-2"})

        other_client.get_account.assert_awaited_once_with("acc-2")
        fake_client.get_account.assert_not_awaited()


# =============================================================================
# Invoice Tools
# =============================================================================


class TestCreateInvoiceTool:
    """Tests for create-invoice."""

    @pytest.mark.asyncio
    async def test_invoice_without_attachments(self, tools, fake_client):
        fake_client.create_invoices.return_value = [acme_invoice()]

        result = await tools["create-invoice"].ainvoke({"contact_id": "c-1", "line_items": [LINE_ITEM]})

        text = text_of(result)
        assert text.startswith("Invoice created successfully:")
        assert "ID: inv-1" in text
        assert "Contact: Acme Ltd" in text
        assert "Total: 115.0" in text
        assert "Status: DRAFT" in text
        assert "Reference: None" in text
        assert "Attachments:" not in text
        assert "Link to view: https://go.xero.com/organisationlogin/default.aspx?shortcode=!abc12" in text
        assert "AccountsReceivable" in text
        fake_client.upload_attachment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bill_links_to_accounts_payable(self, tools, fake_client):
        fake_client.create_invoices.return_value = [acme_invoice(type="ACCPAY")]

        result = await tools["create-invoice"].ainvoke(
            {"contact_id": "c-1", "line_items": [LINE_ITEM], "type": "ACCPAY"}
        )

        assert "AccountsPayable" in text_of(result)

    @pytest.mark.asyncio
    async def test_inline_attachments_are_uploaded_online(self, tools, fake_client):
        fake_client.create_invoices.return_value = [acme_invoice()]

        result = await tools["create-invoice"].ainvoke(
            {
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [{"fileName": "timesheet.pdf", "base64Content": b64(b"hours")}],
            }
        )

        assert "Attachments: timesheet.pdf (success)" in text_of(result)
        fake_client.upload_attachment.assert_awaited_once_with(
            AttachmentEndpoint.INVOICES, "inv-1", "timesheet.pdf", b"hours", include_online=True
        )

    @pytest.mark.asyncio
    async def test_handler_failure_is_reported(self, tools, fake_client):
        fake_client.create_invoices.side_effect = XeroValidationError("Validation error: Contact is required")

        result = await tools["create-invoice"].ainvoke({"contact_id": "c-1", "line_items": [LINE_ITEM]})

        assert text_of(result) == "Error creating invoice: Validation error: Contact is required"
        fake_client.get_short_code.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_reported(self, tools, fake_client):
        result = await tools["create-invoice"].ainvoke({"line_items": [LINE_ITEM]})

        text = text_of(result)
        assert text.startswith("Error creating invoice: ")
        assert "contact_id" in text
        fake_client.create_invoices.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_id_skips_attachments_and_link(self, tools, fake_client):
        fake_client.create_invoices.return_value = [acme_invoice(invoice_id=None)]

        result = await tools["create-invoice"].ainvoke(
            {
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [{"fileName": "a.pdf", "base64Content": b64(b"a")}],
            }
        )

        text = text_of(result)
        assert "Attachments:" not in text
        assert "Link to view" not in text
        fake_client.upload_attachment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_short_code_failure_keeps_success_report(self, tools, fake_client):
        fake_client.create_invoices.return_value = [acme_invoice()]
        fake_client.get_short_code.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")

        result = await tools["create-invoice"].ainvoke(
            {
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [{"fileName": "timesheet.pdf", "base64Content": b64(b"hours")}],
            }
        )

        text = text_of(result)
        assert text.startswith("Invoice created successfully:")
        assert "Attachments: timesheet.pdf (success)" in text
        assert "Link to view: https://go.xero.com/AccountsReceivable/View.aspx?InvoiceID=inv-1" in text
        assert "Error" not in text


class TestUpdateInvoiceTool:
    """Tests for update-invoice."""

    @pytest.mark.asyncio
    async def test_attachment_by_path(self, tools, fake_client, receipt_file):
        fake_client.update_invoice.return_value = acme_invoice(reference="PO-7")

        result = await tools["update-invoice"].ainvoke(
            {"invoice_id": "inv-1", "reference": "PO-7", "attachments": [{"filePath": str(receipt_file)}]}
        )

        text = text_of(result)
        assert text.startswith("Invoice updated successfully:")
        assert "Reference: PO-7" in text
        assert "Attachments: receipt.pdf (success)" in text
        fake_client.upload_attachment.assert_awaited_once_with(
            AttachmentEndpoint.INVOICES, "inv-1", "receipt.pdf", b"%PDF-1.4 receipt", include_online=True
        )

    @pytest.mark.asyncio
    async def test_attachment_with_two_sources_is_rejected(self, tools, fake_client, receipt_file):
        result = await tools["update-invoice"].ainvoke(
            {
                "invoice_id": "inv-1",
                "attachments": [{"filePath": str(receipt_file), "base64Content": b64(b"x"), "fileName": "x.pdf"}],
            }
        )

        assert text_of(result).startswith("Error updating invoice: ")
        fake_client.update_invoice.assert_not_awaited()


# =============================================================================
# Credit Note Tools
# =============================================================================


class TestCreditNoteTools:
    """Tests for create-credit-note and update-credit-note."""

    @pytest.mark.asyncio
    async def test_create_credit_note(self, tools, fake_client):
        fake_client.create_credit_notes.return_value = [
            CreditNote(credit_note_id="cn-1", contact=Contact(name="Acme Ltd"), total=20.0, status="DRAFT")
        ]

        result = await tools["create-credit-note"].ainvoke(
            {
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [{"base64Content": b64(b"note"), "fileName": "refund.txt"}],
            }
        )

        text = text_of(result)
        assert "Credit note created successfully:" in text
        assert "ID: cn-1" in text
        assert "Attachments: refund.txt (success)" in text
        assert "ViewCreditNote.aspx" in text
        assert fake_client.upload_attachment.await_args.args[0] == AttachmentEndpoint.CREDIT_NOTES

    @pytest.mark.asyncio
    async def test_update_credit_note(self, tools, fake_client):
        fake_client.update_credit_note.return_value = CreditNote(credit_note_id="cn-1", status="DRAFT")

        result = await tools["update-credit-note"].ainvoke({"credit_note_id": "cn-1", "reference": "CN-2"})

        assert "Credit note updated successfully:" in text_of(result)


# =============================================================================
# Bank Transaction Tools
# =============================================================================


class TestBankTransactionTools:
    """Tests for create-bank-transaction and update-bank-transaction."""

    @pytest.mark.asyncio
    async def test_missing_file_is_reported_but_transaction_created(self, tools, fake_client, tmp_path):
        fake_client.create_bank_transactions.return_value = [bank_transaction()]
        missing = tmp_path / "missing.pdf"

        result = await tools["create-bank-transaction"].ainvoke(
            {
                "type": "SPEND",
                "bank_account_id": "bank-1",
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [{"filePath": str(missing)}],
            }
        )

        text = text_of(result)
        assert "Bank transaction created successfully:" in text
        assert "ID: bt-1" in text
        assert "Attachments: unknown (failed: Processing failed: " in text
        assert f"File not found: {missing}" in text
        assert "bankTransactionID%3Dbt-1%26accountID%3Dbank-1" in text
        fake_client.upload_attachment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_one_failed_upload_among_three(self, tools, fake_client):
        fake_client.create_bank_transactions.return_value = [bank_transaction()]
        fake_client.upload_attachment.side_effect = [{}, XeroServerError("Server error (500): down"), {}]

        result = await tools["create-bank-transaction"].ainvoke(
            {
                "type": "SPEND",
                "bank_account_id": "bank-1",
                "contact_id": "c-1",
                "line_items": [LINE_ITEM],
                "attachments": [
                    {"fileName": "a.pdf", "base64Content": b64(b"a")},
                    {"fileName": "b.pdf", "base64Content": b64(b"b")},
                    {"fileName": "c.pdf", "base64Content": b64(b"c")},
                ],
            }
        )

        text = text_of(result)
        assert "Attachments: a.pdf (success), b.pdf (failed: Server error (500): down), c.pdf (success)" in text
        assert "Status: AUTHORISED" in text
        assert fake_client.upload_attachment.await_count == 3

    @pytest.mark.asyncio
    async def test_no_link_without_bank_account(self, tools, fake_client):
        fake_client.update_bank_transaction.return_value = bank_transaction(bank_account=None)

        result = await tools["update-bank-transaction"].ainvoke({"bank_transaction_id": "bt-1"})

        text = text_of(result)
        assert "Bank transaction updated successfully:" in text
        assert "Link to view" not in text


# =============================================================================
# Manual Journal Tools
# =============================================================================


class TestManualJournalTools:
    """Tests for create-manual-journal and update-manual-journal."""

    @pytest.mark.asyncio
    async def test_update_lists_each_line(self, tools, fake_client):
        fake_client.update_manual_journal.return_value = ManualJournal(
            manual_journal_id="mj-1",
            narration="Prepaid insurance",
            status="DRAFT",
            journal_lines=[
                ManualJournalLine(line_amount=250.0, account_code="620"),
                ManualJournalLine(line_amount=-250.0, account_code="090"),
            ],
        )

        result = await tools["update-manual-journal"].ainvoke(
            {
                "narration": "Prepaid insurance",
                "manual_journal_id": "mj-1",
                "manual_journal_lines": [
                    {"line_amount": 250.0, "account_code": "620"},
                    {"line_amount": -250.0, "account_code": "090"},
                ],
            }
        )

        text = text_of(result)
        assert "Manual journal updated: Prepaid insurance (ID: mj-1)" in text
        assert "Line Amount: 250.0" in text
        assert "Line Amount: -250.0" in text
        assert "Account Code: 620" in text
        assert "Account Code: 090" in text
        manual_journal_id, payload = fake_client.update_manual_journal.await_args.args
        assert manual_journal_id == "mj-1"
        assert [line["LineAmount"] for line in payload["JournalLines"]] == [250.0, -250.0]

    @pytest.mark.asyncio
    async def test_create_uploads_inline_attachment(self, tools, fake_client):
        fake_client.create_manual_journals.return_value = [
            ManualJournal(manual_journal_id="mj-2", narration="Depreciation")
        ]

        result = await tools["create-manual-journal"].ainvoke(
            {
                "narration": "Depreciation",
                "manual_journal_lines": [
                    {"line_amount": 10.0, "account_code": "416"},
                    {"line_amount": -10.0, "account_code": "711"},
                ],
                "attachments": [{"fileName": "schedule.xlsx", "base64Content": b64(b"sheet")}],
            }
        )

        text = text_of(result)
        assert "Manual journal created: Depreciation (ID: mj-2)" in text
        assert "No journal lines" in text
        assert "Attachments: schedule.xlsx (success)" in text
        fake_client.upload_attachment.assert_awaited_once_with(
            AttachmentEndpoint.MANUAL_JOURNALS, "mj-2", "schedule.xlsx", b"sheet"
        )


# =============================================================================
# Account and Contact Tools
# =============================================================================


class TestAccountTools:
    """Tests for create-account and get-account."""

    @pytest.mark.asyncio
    async def test_create_account(self, tools, fake_client):
        fake_client.create_account.return_value = Account(
            account_id="acc-1", code="201", name="Online Sales", type="REVENUE"
        )

        result = await tools["create-account"].ainvoke({"code": "201", "name": "Online Sales", "type": "REVENUE"})

        text = text_of(result)
        assert text.startswith("Account created: Online Sales (ID: acc-1)")
        assert "Code: 201" in text
        assert "EditAccount.aspx" in text

    @pytest.mark.asyncio
    async def test_update_error_wording(self, tools, fake_client):
        fake_client.update_account.side_effect = XeroValidationError("Validation error: Code in use")

        result = await tools["create-account"].ainvoke(
            {"code": "201", "name": "Online Sales", "type": "REVENUE", "account_id": "acc-1"}
        )

        assert text_of(result) == "Error updating account: Validation error: Code in use"

    @pytest.mark.asyncio
    async def test_code_longer_than_ten_characters(self, tools, fake_client):
        result = await tools["create-account"].ainvoke(
            {"code": "12345678901", "name": "Too long", "type": "EXPENSE"}
        )

        assert text_of(result).startswith("Error creating or updating account: ")
        fake_client.create_account.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_account(self, tools, fake_client):
        fake_client.get_account.return_value = Account(
            account_id="acc-1", code="090", name="Business Bank", type="BANK", status="ACTIVE"
        )

        result = await tools["get-account"].ainvoke({"account_id": "acc-1"})

        text = text_of(result)
        assert "Account ID: acc-1" in text
        assert "Description: None" in text
        assert "Enable Payments: Not set" in text
        assert "Status: ACTIVE" in text

    @pytest.mark.asyncio
    async def test_get_missing_account(self, tools, fake_client):
        fake_client.get_account.return_value = None

        result = await tools["get-account"].ainvoke({"account_id": "acc-404"})

        assert text_of(result) == "Error retrieving account: No account found with ID: acc-404"


class TestContactTools:
    """Tests for update-contact."""

    @pytest.mark.asyncio
    async def test_update_contact(self, tools, fake_client):
        fake_client.update_contact.return_value = Contact(contact_id="c-1", name="Acme Ltd")

        result = await tools["update-contact"].ainvoke(
            {"contact_id": "c-1", "name": "Acme Ltd", "address": {"address_line1": "1 Queen St"}}
        )

        text = text_of(result)
        assert text.startswith("Contact updated: Acme Ltd (ID: c-1)")
        assert "/Contacts/View/c-1" in text


# =============================================================================
# Tool Factory
# =============================================================================


class TestCreateXeroTool:
    """Tests for create_xero_tool."""

    @pytest.mark.asyncio
    async def test_handler_receives_client_and_args(self, tool_context, fake_client):
        class EchoArgs(BaseModel):
            word: str
            times: int = 1

        async def echo(client, args):
            assert client is fake_client
            return " ".join([args.word] * args.times)

        tool = create_xero_tool("echo", "Echo a word.", EchoArgs, echo, action="echoing", context=tool_context)

        assert await tool.ainvoke({"word": "hi"}) == {"content": [{"type": "text", "text": "hi"}]}
        assert text_of(await tool.ainvoke({"word": "hi", "times": 2})) == "hi hi"
        assert text_of(await tool.ainvoke({"times": "many"})).startswith("Error echoing: ")

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_reported(self, tool_context):
        class EmptyArgs(BaseModel):
            pass

        async def explode(client, args):
            raise RuntimeError("organisation lookup exploded")

        tool = create_xero_tool("explode", "Always fails.", EmptyArgs, explode, action="exploding", context=tool_context)

        assert text_of(await tool.ainvoke({})) == "Error exploding: organisation lookup exploded"
