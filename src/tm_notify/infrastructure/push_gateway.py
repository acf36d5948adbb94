"""Push gateway client — multicast delivery of one message to many tokens."""

import logging

import httpx

from src.tm_notify.domain.models import BatchResult, PushMessage

logger = logging.getLogger(__name__)


class PushGatewayClient:
    """HTTP client for the push gateway's multicast endpoint.

    The gateway answers with per-batch success/failure counts. A transport
    error or non-2xx status raises; callers treat the whole batch as failed.
    """

    def __init__(
        self,
        url: str | None,
        api_key: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        # Shared HTTP client — reuses TCP connections across batches
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        """Close the shared HTTP client. Call on app shutdown."""
        await self._http.aclose()

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    async def send_multicast(self, tokens: list[str], message: PushMessage) -> BatchResult:
        if not tokens:
            return BatchResult()
        if not self.url:
            raise RuntimeError("push gateway URL is not configured")

        payload: dict[str, object] = {"tokens": tokens, "data": message.data}
        if not message.is_silent:
            payload["notification"] = {"title": message.title, "body": message.body}

        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        response = await self._http.post(self.url, json=payload, headers=headers)
        response.raise_for_status()

        body = response.json()
        success = int(body.get("success_count", 0))
        failure = int(body.get("failure_count", len(tokens) - success))
        logger.debug(
            "Push batch delivered: %d tokens, %d ok, %d failed",
            len(tokens), success, failure,
        )
        return BatchResult(success_count=success, failure_count=failure)
