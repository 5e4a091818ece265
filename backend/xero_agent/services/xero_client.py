"""Xero Accounting API client.

This module provides the XeroClient class for talking to the Xero Accounting
API over HTTP. It includes:
- OAuth2 client-credentials authentication with token caching
- Tenant resolution through the connections endpoint
- Error translation from HTTP status codes to XeroError subclasses
- Create/update/get calls for the entities the agent tools manage
- Attachment uploads by file name

Requests are not retried; a failure is raised to the caller.
"""

import logging
import time
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from xero_agent.core.config import Settings, settings
from xero_agent.core.errors import ErrorCode
from xero_agent.models.xero import (
    Account,
    BankTransaction,
    Contact,
    CreditNote,
    Invoice,
    ManualJournal,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# =============================================================================
# Exceptions
# =============================================================================


class XeroError(Exception):
    """Base exception for Xero API errors."""

    error_code = ErrorCode.REMOTE_CALL_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class XeroConnectionError(XeroError):
    """Raised when Xero cannot be reached or the request times out."""
    pass


class XeroAuthenticationError(XeroError):
    """Raised when authentication fails (401) or no tenant is available."""
    pass


class XeroForbiddenError(XeroError):
    """Raised when access is forbidden (403)."""
    pass


class XeroNotFoundError(XeroError):
    """Raised when a resource is not found (404)."""
    pass


class XeroValidationError(XeroError):
    """Raised when Xero rejects the payload (400)."""
    pass


class XeroRateLimitError(XeroError):
    """Raised when rate limited (429)."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class XeroServerError(XeroError):
    """Raised when Xero returns a 5xx error."""
    pass


class AttachmentEndpoint(str, Enum):
    """Accounting API collections that accept attachments."""

    INVOICES = "Invoices"
    CREDIT_NOTES = "CreditNotes"
    BANK_TRANSACTIONS = "BankTransactions"
    MANUAL_JOURNALS = "ManualJournals"


# =============================================================================
# Xero Client
# =============================================================================


class XeroClient:
    """Client for the Xero Accounting API.

    Create one per process with from_settings() and pass it to handlers and
    tools. Call authenticate() before each operation; it only talks to the
    identity server when the cached token is missing or about to expire.

    Example:
        ```python
        async with XeroClient.from_settings() as client:
            await client.authenticate()
            invoices = await client.create_invoices([payload])
        ```
    """

    TOKEN_EXPIRY_MARGIN = 60  # seconds
    REQUEST_TIMEOUT = 30.0  # seconds
    USER_AGENT = "xero-agent-tools/0.1.0"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        tenant_id: Optional[str] = None,
        api_base_url: str = "https://api.xero.com/api.xro/2.0",
        identity_url: str = "https://identity.xero.com/connect/token",
        connections_url: str = "https://api.xero.com/connections",
        scopes: Optional[str] = None,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize XeroClient.

        Args:
            client_id: Custom connection client ID
            client_secret: Custom connection client secret
            tenant_id: Xero tenant ID. Resolved on first authentication if None.
            api_base_url: Accounting API base URL
            identity_url: OAuth2 token endpoint
            connections_url: Endpoint listing the tenants the token can access
            scopes: Space separated OAuth2 scopes to request
            timeout: Request timeout in seconds
            http_client: Optional preconfigured httpx client (mainly for tests)
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_base_url = api_base_url.rstrip("/")
        self.identity_url = identity_url
        self.connections_url = connections_url
        self.scopes = scopes
        self.timeout = timeout if timeout is not None else self.REQUEST_TIMEOUT

        self._tenant_id = tenant_id or None
        self._client = http_client
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0
        self._short_code: Optional[str] = None

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "XeroClient":
        """Build a client from application settings."""
        return cls(
            client_id=config.xero_client_id,
            client_secret=config.xero_client_secret,
            tenant_id=config.xero_tenant_id or None,
            api_base_url=config.xero_api_base_url,
            identity_url=config.xero_identity_url,
            connections_url=config.xero_connections_url,
            scopes=config.xero_scopes,
            timeout=config.request_timeout,
        )

    @property
    def tenant_id(self) -> Optional[str]:
        return self._tenant_id

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.USER_AGENT,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "XeroClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # =========================================================================
    # Authentication
    # =========================================================================

    def _token_valid(self) -> bool:
        return (
            self._access_token is not None
            and time.monotonic() < self._token_expires_at - self.TOKEN_EXPIRY_MARGIN
        )

    async def authenticate(self) -> None:
        """Make sure a valid access token and tenant ID are available.

        Raises:
            XeroAuthenticationError: If credentials are rejected or no tenant
                is connected to them
            XeroConnectionError: If the identity server cannot be reached
        """
        if self._token_valid() and self._tenant_id:
            return

        if not self._token_valid():
            await self._fetch_token()

        if not self._tenant_id:
            self._tenant_id = await self._fetch_tenant_id()

    async def _fetch_token(self) -> None:
        if not self.client_id or not self.client_secret:
            raise XeroAuthenticationError(
                "Xero client credentials are not configured. "
                "Set XERO_CLIENT_ID and XERO_CLIENT_SECRET."
            )

        client = await self._get_client()
        data = {"grant_type": "client_credentials"}
        if self.scopes:
            data["scope"] = self.scopes

        try:
            response = await client.post(
                self.identity_url,
                data=data,
                auth=(self.client_id, self.client_secret),
            )
        except httpx.TransportError as e:
            raise XeroConnectionError(f"Cannot reach Xero identity server: {e}") from e

        self._handle_response_error(response)
        payload = self._parse_json(response)

        self._access_token = payload["access_token"]
        self._token_expires_at = time.monotonic() + float(payload.get("expires_in", 1800))
        logger.info("Obtained Xero access token")

    async def _fetch_tenant_id(self) -> str:
        client = await self._get_client()
        try:
            response = await client.get(
                self.connections_url,
                headers={"Authorization": f"Bearer {self._access_token}"},
            )
        except httpx.TransportError as e:
            raise XeroConnectionError(f"Cannot reach Xero connections endpoint: {e}") from e

        self._handle_response_error(response)
        connections = self._parse_json(response) or []
        if not connections:
            raise XeroAuthenticationError("No Xero organisation is connected to these credentials")

        tenant_id = connections[0].get("tenantId")
        logger.info(f"Using Xero tenant {tenant_id}")
        return tenant_id

    # =========================================================================
    # HTTP Request Methods
    # =========================================================================

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str:
        try:
            detail = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        if not isinstance(detail, dict):
            return response.text or f"HTTP {response.status_code}"

        # Validation errors are nested per element
        messages: List[str] = []
        for element in detail.get("Elements") or []:
            for validation_error in element.get("ValidationErrors") or []:
                if validation_error.get("Message"):
                    messages.append(validation_error["Message"])
        if messages:
            return "; ".join(messages)

        for key in ("Detail", "Message", "detail", "error_description", "error", "Title"):
            if detail.get(key):
                return str(detail[key])
        return response.text or f"HTTP {response.status_code}"

    def _handle_response_error(self, response: httpx.Response) -> None:
        """Raise the XeroError subclass matching an error response.

        Raises:
            XeroValidationError: For 400 responses
            XeroAuthenticationError: For 401 responses
            XeroForbiddenError: For 403 responses
            XeroNotFoundError: For 404 responses
            XeroRateLimitError: For 429 responses
            XeroServerError: For 5xx responses
            XeroError: For other error responses
        """
        if response.is_success:
            return

        status = response.status_code
        message = self._extract_error_message(response)

        if status == 400:
            raise XeroValidationError(f"Validation error: {message}", status_code=status)
        elif status == 401:
            raise XeroAuthenticationError(
                f"Authentication failed: {message}. Check your Xero credentials.",
                status_code=status,
            )
        elif status == 403:
            raise XeroForbiddenError(
                f"Access forbidden: {message}. The connection may lack the required scopes.",
                status_code=status,
            )
        elif status == 404:
            raise XeroNotFoundError(f"Resource not found: {message}", status_code=status)
        elif status == 429:
            retry_after = response.headers.get("Retry-After")
            raise XeroRateLimitError(
                f"Rate limited: {message}",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        elif status >= 500:
            raise XeroServerError(f"Server error ({status}): {message}", status_code=status)
        else:
            raise XeroError(f"API error ({status}): {message}", status_code=status)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_data: Optional[Any] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> httpx.Response:
        """Make an authenticated, tenant-scoped request to the Accounting API.

        Args:
            method: HTTP method (GET, POST, PUT)
            endpoint: Path relative to the API base URL
            params: Optional query parameters
            json_data: Optional JSON body
            content: Optional raw body
            content_type: Content-Type for a raw body

        Returns:
            HTTP response

        Raises:
            XeroError: If the request fails
        """
        await self.authenticate()

        url = f"{self.api_base_url}/{endpoint.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "xero-tenant-id": self._tenant_id or "",
        }
        if content_type:
            headers["Content-Type"] = content_type

        client = await self._get_client()
        try:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                content=content,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise XeroConnectionError(f"Request to Xero timed out: {e}") from e
        except httpx.TransportError as e:
            raise XeroConnectionError(f"Cannot connect to Xero at {self.api_base_url}: {e}") from e

        self._handle_response_error(response)
        return response

    @staticmethod
    def _parse_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise XeroError(
                f"Invalid JSON response from Xero (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from e

    async def _get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        response = await self._request("GET", endpoint, params=params)
        return self._parse_json(response)

    async def _post(self, endpoint: str, data: Any, params: Optional[dict] = None) -> Any:
        response = await self._request("POST", endpoint, params=params, json_data=data)
        return self._parse_json(response)

    async def _put(self, endpoint: str, data: Any, params: Optional[dict] = None) -> Any:
        response = await self._request("PUT", endpoint, params=params, json_data=data)
        return self._parse_json(response)

    @staticmethod
    def _parse_list(data: Any, key: str, model: Type[M]) -> List[M]:
        items = data.get(key) if isinstance(data, dict) else None
        return [model.model_validate(item) for item in items or []]

    def _first(self, data: Any, key: str, model: Type[M]) -> Optional[M]:
        items = self._parse_list(data, key, model)
        return items[0] if items else None

    # =========================================================================
    # Invoices
    # =========================================================================

    async def create_invoices(self, invoices: List[dict]) -> List[Invoice]:
        data = await self._put("/Invoices", {"Invoices": invoices})
        return self._parse_list(data, "Invoices", Invoice)

    async def update_invoice(self, invoice_id: str, invoice: dict) -> Optional[Invoice]:
        data = await self._post(f"/Invoices/{invoice_id}", {"Invoices": [invoice]})
        return self._first(data, "Invoices", Invoice)

    # =========================================================================
    # Credit Notes
    # =========================================================================

    async def create_credit_notes(self, credit_notes: List[dict]) -> List[CreditNote]:
        data = await self._put("/CreditNotes", {"CreditNotes": credit_notes})
        return self._parse_list(data, "CreditNotes", CreditNote)

    async def update_credit_note(self, credit_note_id: str, credit_note: dict) -> Optional[CreditNote]:
        data = await self._post(f"/CreditNotes/{credit_note_id}", {"CreditNotes": [credit_note]})
        return self._first(data, "CreditNotes", CreditNote)

    # =========================================================================
    # Bank Transactions
    # =========================================================================

    async def create_bank_transactions(self, bank_transactions: List[dict]) -> List[BankTransaction]:
        data = await self._put("/BankTransactions", {"BankTransactions": bank_transactions})
        return self._parse_list(data, "BankTransactions", BankTransaction)

    async def update_bank_transaction(
        self,
        bank_transaction_id: str,
        bank_transaction: dict,
    ) -> Optional[BankTransaction]:
        data = await self._post(
            f"/BankTransactions/{bank_transaction_id}",
            {"BankTransactions": [bank_transaction]},
        )
        return self._first(data, "BankTransactions", BankTransaction)

    # =========================================================================
    # Manual Journals
    # =========================================================================

    async def create_manual_journals(self, manual_journals: List[dict]) -> List[ManualJournal]:
        data = await self._put("/ManualJournals", {"ManualJournals": manual_journals})
        return self._parse_list(data, "ManualJournals", ManualJournal)

    async def update_manual_journal(
        self,
        manual_journal_id: str,
        manual_journal: dict,
    ) -> Optional[ManualJournal]:
        data = await self._post(
            f"/ManualJournals/{manual_journal_id}",
            {"ManualJournals": [manual_journal]},
        )
        return self._first(data, "ManualJournals", ManualJournal)

    # =========================================================================
    # Accounts
    # =========================================================================

    async def create_account(self, account: dict) -> Optional[Account]:
        data = await self._put("/Accounts", account)
        return self._first(data, "Accounts", Account)

    async def update_account(self, account_id: str, account: dict) -> Optional[Account]:
        data = await self._post(f"/Accounts/{account_id}", {"Accounts": [account]})
        return self._first(data, "Accounts", Account)

    async def get_account(self, account_id: str) -> Optional[Account]:
        data = await self._get(f"/Accounts/{account_id}")
        return self._first(data, "Accounts", Account)

    # =========================================================================
    # Contacts
    # =========================================================================

    async def update_contact(self, contact_id: str, contact: dict) -> Optional[Contact]:
        data = await self._post(f"/Contacts/{contact_id}", {"Contacts": [contact]})
        return self._first(data, "Contacts", Contact)

    # =========================================================================
    # Attachments
    # =========================================================================

    async def upload_attachment(
        self,
        endpoint: AttachmentEndpoint,
        resource_id: str,
        file_name: str,
        content: bytes,
        include_online: bool = False,
    ) -> dict:
        """Attach a file to a resource.

        Args:
            endpoint: Collection the resource belongs to
            resource_id: ID of the resource
            file_name: Name the file is stored under in Xero
            content: Raw file bytes
            include_online: Show the file to the customer in online invoices
                and credit notes

        Returns:
            The attachment record Xero created
        """
        params = {"IncludeOnline": "true"} if include_online else None
        response = await self._request(
            "PUT",
            f"/{endpoint.value}/{resource_id}/Attachments/{quote(file_name, safe='')}",
            params=params,
            content=content,
            content_type="application/octet-stream",
        )
        data = self._parse_json(response)
        attachments = data.get("Attachments") if isinstance(data, dict) else None
        return attachments[0] if attachments else {}

    # =========================================================================
    # Organisation
    # =========================================================================

    async def get_organisation(self) -> dict:
        data = await self._get("/Organisation")
        organisations = data.get("Organisations") if isinstance(data, dict) else None
        if not organisations:
            raise XeroNotFoundError("Organisation details not returned by Xero")
        return organisations[0]

    async def get_short_code(self) -> str:
        """Return the organisation short code used in deep links (cached)."""
        if self._short_code is None:
            organisation = await self.get_organisation()
            self._short_code = organisation.get("ShortCode") or ""
        return self._short_code
