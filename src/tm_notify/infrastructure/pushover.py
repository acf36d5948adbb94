"""Pushover client — operator alert when someone joins the queue."""

import logging

import httpx

logger = logging.getLogger(__name__)


class PushoverClient:
    PUSHOVER_API_URL = "https://api.pushover.net/1/messages.json"

    def __init__(
        self,
        user_key: str | None,
        api_token: str | None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.user_key = user_key
        self.api_token = api_token
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        await self._http.aclose()

    @property
    def is_configured(self) -> bool:
        return bool(self.user_key and self.api_token)

    async def send(self, title: str, message: str, priority: int = 0) -> bool:
        """Post one alert. Returns False on any delivery failure; never raises."""
        if not self.is_configured:
            logger.warning("Pushover credentials missing, alert skipped")
            return False

        form = {
            "token": self.api_token,
            "user": self.user_key,
            "title": title,
            "message": message,
            "priority": str(priority),
        }
        try:
            response = await self._http.post(self.PUSHOVER_API_URL, data=form)
        except httpx.HTTPError as e:
            logger.error("Pushover request failed: %s", e)
            return False

        if not response.is_success:
            logger.error(
                "Pushover rejected alert: status=%d body=%s",
                response.status_code, response.text,
            )
            return False
        return True
