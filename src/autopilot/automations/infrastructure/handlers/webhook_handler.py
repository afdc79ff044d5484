from typing import Any, Callable, Mapping, Optional

import aiohttp

from autopilot.automations.domain.action_result import ActionFailure, ActionResult, ActionSuccess
from autopilot.automations.domain.action_spec import ActionType, TriggerWebhookConfig
from autopilot.automations.infrastructure.handlers.handler_config import parse_handler_config
from autopilot.main.logging import get_logger
from autopilot.main.request_context import get_request_context

logger = get_logger(__name__)


class WebhookHandler:
    """Handler for TRIGGER_WEBHOOK actions.

    Sends ``{rule_id, action, trigger_data}`` merged with the configured
    payload to the configured URL. Any 2xx response counts as delivered.
    """

    def __init__(
        self,
        session_provider: Callable[[], aiohttp.ClientSession],
        timeout_seconds: float = 10.0,
    ):
        self.session_provider = session_provider
        self.timeout_seconds = timeout_seconds

    def _build_payload(
        self, config: TriggerWebhookConfig, context: Mapping[str, Any]
    ) -> dict[str, Any]:
        rule_id: Optional[str] = get_request_context().get("rule_id")
        return {
            **config.payload,
            "rule_id": rule_id,
            "action": ActionType.TRIGGER_WEBHOOK.value,
            "trigger_data": dict(context),
        }

    async def __call__(self, config: dict[str, Any], context: Mapping[str, Any]) -> ActionResult:
        webhook = parse_handler_config(TriggerWebhookConfig, config)
        url = str(webhook.url)

        session = self.session_provider()
        try:
            async with session.request(
                webhook.method,
                url,
                json=self._build_payload(webhook, context),
                headers=webhook.headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                if 200 <= response.status < 300:
                    return ActionSuccess(detail={"webhookUrl": url, "statusCode": response.status})

                body = await response.text()
                logger.warning(
                    f"Webhook returned {response.status}",
                    extra={
                        "action_type": ActionType.TRIGGER_WEBHOOK.value,
                        "webhook_host": webhook.url.host,
                        "status_code": response.status,
                    },
                )
                return ActionFailure(error=f"webhook returned {response.status}: {body[:200]}")

        except aiohttp.ClientError as e:
            logger.warning(
                f"Webhook request failed: {e}",
                extra={
                    "action_type": ActionType.TRIGGER_WEBHOOK.value,
                    "webhook_host": webhook.url.host,
                },
            )
            return ActionFailure(error=f"webhook request failed: {e}")
