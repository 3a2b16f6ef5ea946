"""Async HTTP client for the cobalt media-processing API.

WHY: Callers (CLI, scripts, tests) need to submit a media URL to a
cobalt instance, tell the five response variants apart, and optionally
fetch the finished file, without knowing HTTP details or the API's
unusual rules about which signal wins when status code and payload
disagree.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Every public method
opens its own AsyncClient for the length of the call, so a CobaltClient
holds nothing but its base URL, optional key and optional transport,
and can be shared by concurrent tasks. The transport is injected through
the constructor (tests pass httpx.MockTransport). Responses are
interpreted by _interpret_process_response and parsed into the typed
variants in models.py.

RULES:
- Base URL loses exactly one trailing slash at construction time
- Authorization (``Api-Key <key>``) is sent on POST / only, never on
  GET / or tunnel downloads
- An ``error`` payload always fails the call, even with a 2xx status
- A non-2xx status always fails the call, even with a well-formed payload
- Undecodable body: non-2xx reports the HTTP status, 2xx reports the
  decode error
- No retries, no internal timeout: callers wrap calls in asyncio.wait_for
- Every public method raises CobaltRequestError, prefixed with the
  operation that failed
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from cobalt_client.api.models import (
    CobaltRequest,
    CobaltResponse,
    ErrorContext,
    InstanceInfo,
    ProcessResult,
    TunnelRedirectResponse,
    parse_response,
)
from cobalt_client.config import AUTH_SCHEME, load_api_key, load_base_url

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Operation prefixes
# ---------------------------------------------------------------------------

PROCESS_OPERATION = "Failed to process request"
INSTANCE_INFO_OPERATION = "Failed to get instance info"
DOWNLOAD_OPERATION = "Failed to download from tunnel"

_DECODE_ERRORS = (json.JSONDecodeError, UnicodeDecodeError)


class CobaltError(Exception):
    """Base class for every error raised by this package."""


class CobaltHTTPError(CobaltError):
    """Raised when a response status code is outside the 2xx range.

    RULES:
    - status_code is always set
    - Message embeds the numeric status: ``HTTP error! status: 500``
    """

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP error! status: {status_code}")


class CobaltAPIError(CobaltError):
    """Raised when the instance answers with an ``error`` variant.

    WHY: The machine-readable code (e.g. ``error.api.link.invalid``) is
    the most specific diagnostic available, so it wins over any status
    code.

    HOW: Keeps the code, the context exactly as decoded (raw_context) and,
    when that is an object, its parsed ErrorContext. The message embeds the
    code verbatim and, when present, the decoded context re-serialized as
    JSON with every key in the order the instance sent it.

    RULES:
    - context is None unless the decoded context is a JSON object
    - raw_context keeps keys ErrorContext does not model
    """

    def __init__(self, code: str, context: Any = None) -> None:
        self.code = code
        self.raw_context = context
        self.context: ErrorContext | None = (
            ErrorContext.from_dict(context) if isinstance(context, dict) else None
        )
        message = f"Cobalt API error: {code}"
        if context is not None:
            message += f" (context: {json.dumps(context)})"
        super().__init__(message)


class CobaltRequestError(CobaltError):
    """Raised by every public CobaltClient method when the call fails.

    WHY: Callers get a single exception type to catch, with a message that
    already says which step failed (processing, instance info, tunnel
    download) and why, so it can be logged without digging into causes.

    HOW: Wraps the underlying failure (also chained as __cause__). HTTP
    status and API error code are lifted onto the wrapper when the cause
    carries them. Failures that are not HTTP, API, decode or transport
    errors are reported as unknown errors.

    RULES:
    - Message is ``<operation>: <cause message>``
    - status_code is None unless the cause was a CobaltHTTPError
    - error_code is None unless the cause was a CobaltAPIError
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        self.status_code: int | None = getattr(cause, "status_code", None)
        self.error_code: str | None = (
            cause.code if isinstance(cause, CobaltAPIError) else None
        )
        super().__init__(f"{operation}: {_describe(cause)}")


def _describe(exc: BaseException) -> str:
    if isinstance(exc, (CobaltHTTPError, CobaltAPIError) + _DECODE_ERRORS):
        return str(exc)
    if isinstance(exc, httpx.HTTPError):
        return str(exc) or type(exc).__name__
    return f"Unknown error ({type(exc).__name__}: {exc})"


class CobaltClient:
    """Async client for a cobalt API instance.

    WHY: Provides a typed interface over the three calls the API offers:
    process a media URL, read instance info, and download a tunnel.

    HOW: Holds only immutable configuration. Each method builds its
    headers, opens a per-call httpx.AsyncClient on the injected transport
    (or httpx's default), and interprets the response.

    RULES:
    - api_key is optional; public instances need none
    - transport is optional; pass httpx.MockTransport in tests
    - Redirects are followed, matching what browsers and fetch() do
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.removesuffix("/")
        self._api_key = api_key or None
        self._transport = transport

    @classmethod
    def from_env(
        cls,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> CobaltClient:
        """Build a client from COBALT_API and COBALT_API_KEY."""
        return cls(load_base_url(), load_api_key(), transport=transport)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def endpoint(self) -> str:
        """URL of the API root, used by both POST / and GET /."""
        return f"{self._base_url}/"

    def __repr__(self) -> str:
        return "CobaltClient(base_url={!r}, api_key={})".format(
            self._base_url, "set" if self._api_key else None
        )

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._transport,
            timeout=None,
            follow_redirects=True,
        )

    def _auth_header(self) -> str | None:
        return f"{AUTH_SCHEME} {self._api_key}" if self._api_key else None

    # ------------------------------------------------------------------
    # POST /
    # ------------------------------------------------------------------

    async def process(self, request: CobaltRequest | Mapping[str, Any]) -> CobaltResponse:
        """Submit a media URL for processing and return the response variant.

        WHY: This is the main call of the API. The returned variant tells
        the caller what to do next: download a tunnel, combine local
        streams, or let the user pick from several items.

        HOW: Serializes the request (absent fields omitted), POSTs it to
        the API root with JSON headers and the optional Authorization
        header, then interprets the response.

        RULES:
        - A plain mapping is accepted; its None values are dropped
        - Never returns an ErrorResponse: ``error`` payloads raise
        - Raises CobaltRequestError prefixed "Failed to process request"

        Args:
            request: A CobaltRequest, or a mapping already using wire names.

        Returns:
            A TunnelRedirectResponse, LocalProcessingResponse or PickerResponse.
        """
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        auth = self._auth_header()
        if auth:
            headers["Authorization"] = auth

        try:
            body = _request_body(request)
            logger.debug("POST %s", self.endpoint)
            async with self._http() as client:
                resp = await client.post(self.endpoint, headers=headers, json=body)
            return _interpret_process_response(resp)
        except Exception as exc:
            logger.debug("process() failed: %s", exc)
            raise CobaltRequestError(PROCESS_OPERATION, exc) from exc

    # ------------------------------------------------------------------
    # GET /
    # ------------------------------------------------------------------

    async def get_instance_info(self) -> InstanceInfo:
        """Fetch version, services and git details of the instance.

        Never cached and never authenticated, even when an API key is
        configured. Raises CobaltRequestError prefixed
        "Failed to get instance info".
        """
        headers = {"Accept": "application/json"}

        try:
            logger.debug("GET %s", self.endpoint)
            async with self._http() as client:
                resp = await client.get(self.endpoint, headers=headers)
            if not resp.is_success:
                raise CobaltHTTPError(resp.status_code)
            return InstanceInfo.from_dict(resp.json())
        except Exception as exc:
            logger.debug("get_instance_info() failed: %s", exc)
            raise CobaltRequestError(INSTANCE_INFO_OPERATION, exc) from exc

    # ------------------------------------------------------------------
    # GET {tunnel}
    # ------------------------------------------------------------------

    async def download_from_tunnel(self, tunnel_url: str) -> bytes:
        """Download the raw bytes behind a tunnel or redirect URL.

        WHY: Tunnel URLs are short-lived and may point at any origin, so
        the download carries no API headers at all.

        RULES:
        - No Authorization header, whatever the client was built with
        - Any body is accepted as-is, including an empty one
        - Raises CobaltRequestError prefixed "Failed to download from tunnel"

        Args:
            tunnel_url: ``url`` of a tunnel/redirect response, or one of
                the ``tunnel`` entries of a local-processing response.

        Returns:
            The response body.
        """
        try:
            logger.debug("GET %s", tunnel_url)
            async with self._http() as client:
                resp = await client.get(tunnel_url)
            if not resp.is_success:
                raise CobaltHTTPError(resp.status_code)
            return resp.content
        except Exception as exc:
            logger.debug("download_from_tunnel() failed: %s", exc)
            raise CobaltRequestError(DOWNLOAD_OPERATION, exc) from exc

    # ------------------------------------------------------------------
    # POST / then GET {tunnel}
    # ------------------------------------------------------------------

    async def process_and_download(
        self, request: CobaltRequest | Mapping[str, Any]
    ) -> ProcessResult:
        """Process a URL and download the result when it is a tunnel or redirect.

        RULES:
        - tunnel/redirect: two network calls, ProcessResult.file is the body
        - any other variant: one network call, ProcessResult.file is None
        - Errors from either step propagate with that step's prefix
        """
        response = await self.process(request)

        if isinstance(response, TunnelRedirectResponse):
            file = await self.download_from_tunnel(response.url)
            return ProcessResult(response=response, file=file)

        return ProcessResult(response=response)


# ---------------------------------------------------------------------------
# Request/response helpers (module-private)
# ---------------------------------------------------------------------------


def _request_body(request: CobaltRequest | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(request, CobaltRequest):
        return request.to_dict()
    return {key: value for key, value in request.items() if value is not None}


def _interpret_process_response(resp: httpx.Response) -> CobaltResponse:
    """Decide whether a POST / response is a usable variant or a failure.

    WHY: The API's status code and payload can disagree. The order of the
    checks below is the contract callers rely on.

    HOW:
    1. Decode JSON. If that fails, a non-2xx status is reported as an
       HTTP error; with a 2xx status the decode error is re-raised.
    2. ``status == "error"`` raises CobaltAPIError, whatever the status code.
       An ``error`` member that is not an object gives code ``unknown``.
    3. Any other payload with a non-2xx status raises CobaltHTTPError.
    4. Otherwise the payload is parsed into its variant.
    """
    ok = resp.is_success

    try:
        data = resp.json()
    except _DECODE_ERRORS:
        if not ok:
            raise CobaltHTTPError(resp.status_code)
        raise

    if isinstance(data, dict) and data.get("status") == "error":
        error = data.get("error")
        if isinstance(error, dict):
            raise CobaltAPIError(error.get("code", "unknown"), error.get("context"))
        raise CobaltAPIError("unknown")

    if not ok:
        raise CobaltHTTPError(resp.status_code)

    return parse_response(data)
