"""
HTTP client for the n8n / Railway automation webhooks.

Every call is a single JSON POST with a bounded timeout. There is no
retry: a failed call is reported once and must be re-triggered.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional
import requests
import structlog

from config import settings
from exceptions import ExternalServiceError, WebhookTimeoutError

logger = structlog.get_logger(__name__)


@dataclass
class WebhookResult:
    """Raw outcome of a webhook call that got an HTTP answer."""
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json_or_message(self) -> Any:
        """
        Parsed JSON body, or {"message": text} when the body is not JSON.

        An empty body reads as {"message": "Respuesta vacía del webhook"}.
        """
        if not self.text:
            return {"message": "Respuesta vacía del webhook"}
        try:
            return json.loads(self.text)
        except ValueError:
            return {"message": self.text}


def post_json(
    url: str,
    payload: dict,
    timeout: Optional[float] = None,
) -> WebhookResult:
    """
    POST payload as JSON to a webhook.

    Args:
        url: Webhook URL
        payload: JSON-serializable body
        timeout: Seconds before the call is abandoned (defaults to settings)

    Returns:
        WebhookResult for any HTTP answer, 2xx or not

    Raises:
        WebhookTimeoutError: If the webhook does not answer in time
        ExternalServiceError: On connection or other transport failures
    """
    timeout = timeout if timeout is not None else settings.webhook_timeout_seconds

    logger.info("webhook_request_started", url=url, fields=sorted(payload.keys()))

    try:
        response = requests.post(url, json=payload, timeout=timeout)

    except requests.exceptions.Timeout:
        logger.error("webhook_request_timeout", url=url, timeout=timeout)
        raise WebhookTimeoutError(url, timeout)

    except requests.exceptions.RequestException as e:
        logger.error("webhook_request_failed", url=url, error=str(e), error_type=type(e).__name__)
        raise ExternalServiceError("webhook", f"No se pudo conectar con el webhook: {e}", {"url": url})

    result = WebhookResult(status_code=response.status_code, text=response.text)

    if result.ok:
        logger.info("webhook_request_completed", url=url, status=result.status_code)
    else:
        logger.warning(
            "webhook_request_rejected",
            url=url,
            status=result.status_code,
            body=result.text[:500]
        )

    return result
