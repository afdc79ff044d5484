"""Unit tests for the built-in action handlers."""

import aiohttp
import pytest

from autopilot.automations.domain.action_result import ActionFailure, ActionSuccess
from autopilot.automations.domain.action_spec import ActionType
from autopilot.automations.infrastructure.handlers.builtin_handlers import (
    create_default_registry,
    schedule_post,
    send_notification,
    update_status,
)
from autopilot.automations.infrastructure.handlers.webhook_handler import WebhookHandler
from autopilot.main.exceptions import ActionHandlerError
from autopilot.main.request_context import bound_context


class FakeResponse:
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self._body = body

    async def text(self):
        return self._body


class FakeRequest:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self.response

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return FakeRequest(self.response, self.error)


def webhook_for(session: FakeSession) -> WebhookHandler:
    return WebhookHandler(session_provider=lambda: session, timeout_seconds=2.0)


class TestWebhookHandler:
    async def test_posts_payload_and_reports_success(self):
        session = FakeSession(FakeResponse(204))
        handler = webhook_for(session)

        with bound_context(rule_id="rule-1"):
            result = await handler(
                {
                    "url": "https://hooks.example.com/in",
                    "headers": {"X-Token": "abc"},
                    "payload": {"source": "autopilot"},
                },
                {"amount": 150},
            )

        assert result == ActionSuccess(
            detail={"webhookUrl": "https://hooks.example.com/in", "statusCode": 204}
        )
        method, url, kwargs = session.calls[0]
        assert method == "POST"
        assert url == "https://hooks.example.com/in"
        assert kwargs["headers"] == {"X-Token": "abc"}
        assert kwargs["json"] == {
            "source": "autopilot",
            "rule_id": "rule-1",
            "action": "TRIGGER_WEBHOOK",
            "trigger_data": {"amount": 150},
        }

    async def test_non_2xx_is_failure(self):
        handler = webhook_for(FakeSession(FakeResponse(500, "internal error")))

        result = await handler({"url": "https://hooks.example.com/in"}, {})

        assert isinstance(result, ActionFailure)
        assert "500" in result.error

    async def test_client_error_is_failure(self):
        handler = webhook_for(FakeSession(error=aiohttp.ClientConnectionError("refused")))

        result = await handler({"url": "https://hooks.example.com/in"}, {})

        assert isinstance(result, ActionFailure)
        assert "refused" in result.error

    async def test_method_from_config(self):
        session = FakeSession(FakeResponse(200))

        await webhook_for(session)({"url": "https://hooks.example.com/in", "method": "PUT"}, {})

        assert session.calls[0][0] == "PUT"

    async def test_invalid_config_raises(self):
        with pytest.raises(ActionHandlerError, match=r"TriggerWebhookConfig \(url\)"):
            await webhook_for(FakeSession(FakeResponse(200)))({"url": "nope"}, {})


class TestAcknowledgingHandlers:
    async def test_send_notification(self):
        result = await send_notification({"channel": "sms"}, {})

        assert result.detail == {"message": "Notification sent", "channel": "sms"}

    async def test_schedule_post_echoes_time(self):
        result = await schedule_post({"scheduleTime": "2026-07-01T08:00:00+00:00"}, {})

        assert result.detail == {"scheduledAt": "2026-07-01T08:00:00+00:00"}

    async def test_update_status(self):
        result = await update_status({"status": "archived"}, {})

        assert result.detail == {"newStatus": "archived"}

    async def test_update_status_requires_status(self):
        with pytest.raises(ActionHandlerError, match=r"UpdateStatusConfig \(status\)"):
            await update_status({}, {})


class TestDefaultRegistry:
    def test_registers_builtin_types(self):
        webhook = webhook_for(FakeSession(FakeResponse(200)))

        registry = create_default_registry(webhook_handler=webhook, webhook_timeout=3.0)

        assert set(registry.registered_types) == {t.value for t in ActionType}
        assert registry.get(ActionType.TRIGGER_WEBHOOK).handler is webhook
        assert registry.timeout_for(ActionType.TRIGGER_WEBHOOK, 10.0) == 3.0

    def test_without_webhook_handler(self):
        registry = create_default_registry()

        assert ActionType.TRIGGER_WEBHOOK.value not in registry
        assert len(registry) == 4
