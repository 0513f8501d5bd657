"""
Device Tag Client

Create-or-update of a key/value tag on this device's record in the
device management API. The API has no upsert, so a create is tried
first and a 409 falls through to a filtered PATCH.
"""

from typing import Callable, Optional, Union

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..schemas.tags import SetTagInput, SetTagOutput
from .credentials import ApiCredentials, load_api_credentials

logger = structlog.get_logger(__name__)

DEVICE_TAG_PATH = "/v6/device_tag"


def _odata_literal(value: Union[int, str]) -> str:
    """Format a value for an OData $filter expression, quoting strings"""
    if isinstance(value, int):
        return str(value)
    return "'" + value.replace("'", "''") + "'"


class TagReporter:
    """
    Device tag client.

    Each HTTP attempt is bounded by timeout_seconds; transport failures
    (timeouts, refused connections) are retried up to `retries` times.
    HTTP status codes are never retried.
    """

    def __init__(
        self,
        credentials_provider: Optional[Callable[[], ApiCredentials]] = None,
        timeout_seconds: float = 5.0,
        retries: int = 3,
        retry_max_wait_seconds: float = 4.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize tag reporter.

        Args:
            credentials_provider: Called before every request to resolve endpoint and key
            timeout_seconds: Per-attempt timeout
            retries: Extra attempts after a transport failure
            retry_max_wait_seconds: Upper bound for backoff between attempts
            transport: Optional httpx transport (tests)
        """
        self.credentials_provider = credentials_provider or load_api_credentials
        self.timeout_seconds = timeout_seconds
        self.retries = retries
        self.retry_max_wait_seconds = retry_max_wait_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "TagReporter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def _request(
        self,
        method: str,
        url: str,
        api_key: str,
        **kwargs,
    ) -> httpx.Response:
        """Send one request, retrying transport failures"""
        client = self._get_client()
        headers = {"Authorization": f"Bearer {api_key}"}

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_exponential(multiplier=0.5, max=self.retry_max_wait_seconds),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "Retrying device tag request",
                        method=method,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await client.request(method, url, headers=headers, **kwargs)

    async def set_tag(self, key: str, value: str) -> SetTagOutput:
        """
        Create or update a device tag.

        Returns:
            SetTagOutput with outcome created, updated or failed
        """
        request = SetTagInput(key=key, value=value)
        credentials = self.credentials_provider()

        if not credentials.is_complete:
            logger.warning(
                "Device API credentials not configured, tag not sent",
                tag_key=request.key,
            )
            return SetTagOutput(
                key=request.key,
                outcome="failed",
                error="API credentials unavailable",
            )

        base_url = credentials.api_url.rstrip("/")
        url = f"{base_url}{DEVICE_TAG_PATH}"

        logger.info("Setting device tag", tag_key=request.key, value=request.value)

        try:
            response = await self._request(
                "POST",
                url,
                credentials.api_key,
                json={
                    "device": credentials.device_ref,
                    "tag_key": request.key,
                    "value": request.value,
                },
            )
        except httpx.HTTPError as e:
            logger.error("Device tag create failed", tag_key=request.key, error=str(e))
            return SetTagOutput(key=request.key, outcome="failed", error=str(e))

        if response.status_code == httpx.codes.CREATED:
            logger.info("Device tag created", tag_key=request.key)
            return SetTagOutput(
                key=request.key,
                outcome="created",
                status_code=response.status_code,
            )

        if response.status_code == httpx.codes.CONFLICT:
            return await self._update_tag(request, url, credentials)

        logger.error(
            "Device tag create rejected",
            tag_key=request.key,
            status_code=response.status_code,
            body=response.text[:200],
        )
        return SetTagOutput(
            key=request.key,
            outcome="failed",
            status_code=response.status_code,
            error=f"Unexpected status {response.status_code}",
        )

    async def _update_tag(
        self,
        request: SetTagInput,
        url: str,
        credentials: ApiCredentials,
    ) -> SetTagOutput:
        """
        PATCH an existing tag.

        There is no further fallback, so the outcome is "updated" once the
        request is issued; its status is only logged.
        """
        device_filter = (
            f"(tag_key eq {_odata_literal(request.key)}) "
            f"and (device eq {_odata_literal(credentials.device_ref)})"
        )

        status_code: Optional[int] = None
        try:
            response = await self._request(
                "PATCH",
                url,
                credentials.api_key,
                params={"$filter": device_filter},
                json={"value": request.value},
            )
            status_code = response.status_code
            if response.is_success:
                logger.info("Device tag updated", tag_key=request.key, status_code=status_code)
            else:
                logger.warning(
                    "Device tag update returned unexpected status",
                    tag_key=request.key,
                    status_code=status_code,
                )
        except httpx.HTTPError as e:
            logger.warning("Device tag update failed", tag_key=request.key, error=str(e))

        return SetTagOutput(
            key=request.key,
            outcome="updated",
            status_code=status_code,
        )

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None
