"""
Draft API client

Saves and loads draft documents through the registration draft API:

    POST {base}/api/registrations/drafts/{draftId}/tickets   save (upsert by draft id)
    GET  {base}/api/registrations/drafts/{draftId}/tickets   load -> {success, draftData}

Connection-level failures are retried with exponential backoff. Anything
still failing surfaces as PersistenceError; the caller's in-memory
selections are never touched by this module.
"""

import http
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel

from lodgetix_registration.kernel.errors import DraftNotFound, PersistenceError
from lodgetix_registration.kernel.logging import LogOperation, get_logger
from lodgetix_registration.kernel.metrics import track_draft_request
from lodgetix_registration.kernel.policy import EnginePolicy
from lodgetix_registration.kernel.retry import retry_on_transient_http_error
from lodgetix_registration.persistence.codec import DraftDocument, parse_document

logger = get_logger(__name__)

# Gateway errors usually clear on their own; other statuses need a human
_RETRYABLE_STATUSES = {
    http.HTTPStatus.TOO_MANY_REQUESTS,
    http.HTTPStatus.BAD_GATEWAY,
    http.HTTPStatus.SERVICE_UNAVAILABLE,
    http.HTTPStatus.GATEWAY_TIMEOUT,
}


class DraftSaveResult(BaseModel):
    """Acknowledgement returned by the draft API after a save"""

    success: bool
    draft_id: str
    attendee_count: int = 0
    message: str | None = None


class DraftClient:
    """
    HTTP client for the registration draft API

    Args:
        base_url: Root URL of the draft API (defaults to policy.draft_api_base_url)
        policy: Engine policy supplying timeout and retry settings
        api_token: Optional bearer token
        transport: httpx transport override (tests pass httpx.MockTransport)

    Example::

        client = DraftClient("https://lodgetix.example")
        client.save_draft("draft_1718441000000_a1b2c3d", serialize_state(state))
        document = client.load_draft("draft_1718441000000_a1b2c3d")
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        policy: EnginePolicy | None = None,
        api_token: str = "",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.policy = policy or EnginePolicy()
        self.base_url = (base_url or self.policy.draft_api_base_url).rstrip("/")
        self.transport = transport

        self.headers: dict[str, str] = {"Accept": "application/json"}
        if api_token:
            self.headers["Authorization"] = f"Bearer {api_token}"

        self._send = retry_on_transient_http_error(
            max_attempts=self.policy.retry_attempts,
            min_wait_ms=self.policy.retry_min_wait_ms,
            max_wait_ms=self.policy.retry_max_wait_ms,
        )(self._send_once)

    def draft_url(self, draft_id: str) -> str:
        return f"{self.base_url}/api/registrations/drafts/{draft_id}/tickets"

    def _send_once(
        self, method: str, url: str, payload: Mapping[str, Any] | None = None
    ) -> httpx.Response:
        with httpx.Client(
            timeout=self.policy.http_timeout_seconds,
            headers=self.headers,
            transport=self.transport,
        ) as client:
            logger.debug("Draft API request", method=method, url=url)
            return client.request(method, url, json=payload)

    def _request(
        self,
        method: str,
        draft_id: str,
        payload: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        url = self.draft_url(draft_id)
        try:
            response = self._send(method, url, payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status == http.HTTPStatus.NOT_FOUND and method == "GET":
                raise DraftNotFound(draft_id) from exc
            msg = f"Draft API request failed: {status} for URL {exc.request.url}"
            raise PersistenceError(
                msg, draft_id=draft_id, retryable=status in _RETRYABLE_STATUSES
            ) from exc
        except httpx.RequestError as exc:
            msg = f"Draft API connection error for URL {url}: {exc}"
            raise PersistenceError(msg, draft_id=draft_id) from exc
        return response

    @staticmethod
    def _json(response: httpx.Response, draft_id: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise PersistenceError(
                "Draft API returned a non-JSON response", draft_id=draft_id
            ) from exc
        if not isinstance(body, dict):
            raise PersistenceError("Draft API returned an unexpected response", draft_id=draft_id)
        return body

    @track_draft_request("save")
    def save_draft(self, draft_id: str, document: Mapping[str, Any]) -> DraftSaveResult:
        """
        Save (upsert) a draft document

        Args:
            draft_id: Draft identifier
            document: Serialized draft document (camelCase JSON dict)

        Returns:
            DraftSaveResult acknowledgement

        Raises:
            PersistenceError: If the API is unreachable or rejects the save
        """
        with LogOperation(logger, "save_draft", draft_id=draft_id) as op:
            response = self._request("POST", draft_id, document)
            body = self._json(response, draft_id)
            if not body.get("success", False):
                raise PersistenceError(
                    body.get("error") or "Draft API did not acknowledge the save",
                    draft_id=draft_id,
                )
            result = DraftSaveResult(
                success=True,
                draft_id=body.get("draftId", draft_id),
                attendee_count=body.get("attendeeCount", 0),
                message=body.get("message"),
            )
            op.annotate(attendee_count=result.attendee_count)
            return result

    @track_draft_request("load")
    def load_draft(self, draft_id: str) -> DraftDocument:
        """
        Load and decode a draft document

        Raises:
            DraftNotFound: If the API has no draft with this id
            DraftDecodeError: If the stored document fails validation
            PersistenceError: If the API is unreachable or errors
        """
        with LogOperation(logger, "load_draft", draft_id=draft_id):
            response = self._request("GET", draft_id)
            body = self._json(response, draft_id)
            draft_data = body.get("draftData")
            if not body.get("success", False) or draft_data is None:
                raise DraftNotFound(draft_id)
            return parse_document(draft_data, draft_id=draft_id)
