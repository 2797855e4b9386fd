"""Client for the external 3D/DXF rendering service.

The service takes the canonical furniture code and a ``closed`` flag and
answers with URLs of the generated artifacts::

    POST /generate {"prompt": "M1(1000,400,1000)Eb", "closed": false}
    -> {"glb_url": "...", "dxf_url": "..."}

Classes:
    GenerationResult: URLs returned by the service
    GenerationGateway: async client with timeout and retry policy
    GatewayError: raised when generation fails for good
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from furnispec.core.spec.ast_nodes import ValidatedSpecification

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Raised when the rendering service cannot produce artifacts.

    Attributes:
        retryable: True if the failure was transient (network, timeout, 5xx).
        status_code: HTTP status returned by the service, when there was one.
    """

    def __init__(self, message: str, retryable: bool = False, status_code: Optional[int] = None) -> None:
        self.message = message
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class GenerationResult:
    glb_url: str
    dxf_url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "GenerationResult":
        if not isinstance(payload, dict) or not isinstance(payload.get("glb_url"), str):
            raise GatewayError("Rendering service response has no 'glb_url'")
        dxf_url = payload.get("dxf_url")
        if dxf_url is not None and not isinstance(dxf_url, str):
            raise GatewayError("Rendering service returned a non-string 'dxf_url'")
        return cls(glb_url=payload["glb_url"], dxf_url=dxf_url or None)


def generation_key(spec: ValidatedSpecification, closed: bool) -> str:
    """Cache key for one (specification, closed) pair."""
    return f"{spec.code}|{'closed' if closed else 'open'}"


class GenerationGateway:
    """Async client for the rendering service.

    Transport errors, timeouts and 5xx responses are retried with exponential
    backoff (``backoff``, ``2 * backoff``, ...). 4xx responses and malformed
    payloads fail immediately.

    Example:
        >>> gateway = GenerationGateway("http://render:8000/api/generate")
        >>> result = await gateway.generate(spec, closed=False)
    """

    def __init__(
        self,
        url: str,
        timeout: float = 60.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff
        self._transport = transport

    async def generate(self, spec: ValidatedSpecification, closed: bool = False) -> GenerationResult:
        """Request artifacts for a validated specification.

        Raises:
            GatewayError: when every attempt failed or the answer is unusable.
        """
        body = {"prompt": spec.code, "closed": closed}
        attempts = self.retries + 1
        last_error: Optional[GatewayError] = None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for attempt in range(1, attempts + 1):
                try:
                    return await self._post(client, body)
                except GatewayError as e:
                    if not e.retryable:
                        raise
                    last_error = e
                if attempt < attempts:
                    delay = self.backoff * (2 ** (attempt - 1))
                    logger.warning(
                        f"Generation of {spec.code} failed ({last_error.message}); "
                        f"retry {attempt}/{self.retries} in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)

        logger.warning(f"Generation of {spec.code} gave up after {attempts} attempt(s)")
        raise last_error

    async def _post(self, client: httpx.AsyncClient, body: dict) -> GenerationResult:
        logger.info(f"Requesting artifacts for {body['prompt']} (closed={body['closed']})")
        try:
            response = await client.post(self.url, json=body)
        except httpx.TimeoutException as e:
            raise GatewayError(f"Timeout calling rendering service: {e}", retryable=True) from e
        except httpx.RequestError as e:
            raise GatewayError(f"Could not reach rendering service: {e}", retryable=True) from e

        if response.status_code >= 500:
            raise GatewayError(
                f"Rendering service error {response.status_code}",
                retryable=True,
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise GatewayError(
                f"Rendering service rejected the request ({response.status_code})",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise GatewayError("Rendering service returned invalid JSON") from e
        return GenerationResult.from_payload(payload)
