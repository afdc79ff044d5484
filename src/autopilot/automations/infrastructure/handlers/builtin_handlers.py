"""Default handlers for the built-in action types.

Delivery back-ends (notification service, content generator, publisher) live
outside this service. These handlers validate the config, log the request and
acknowledge it; a deployment plugs in real delivery by registering its own
handler for the same action type.
"""

from typing import Any, Mapping, Optional

from autopilot.automations.application.action_registry import ActionHandlerRegistry
from autopilot.automations.domain.action_result import ActionSuccess
from autopilot.automations.domain.action_spec import (
    ActionType,
    CreateContentConfig,
    SchedulePostConfig,
    SendNotificationConfig,
    UpdateStatusConfig,
)
from autopilot.automations.infrastructure.handlers.handler_config import parse_handler_config
from autopilot.automations.infrastructure.handlers.webhook_handler import WebhookHandler
from autopilot.main.logging import get_logger

logger = get_logger(__name__)


async def send_notification(config: dict[str, Any], context: Mapping[str, Any]) -> ActionSuccess:
    notification = parse_handler_config(SendNotificationConfig, config)
    logger.info(
        f"Notification requested on channel {notification.channel}",
        extra={"action_type": ActionType.SEND_NOTIFICATION.value},
    )
    return ActionSuccess(
        detail={"message": "Notification sent", "channel": notification.channel}
    )


async def create_content(config: dict[str, Any], context: Mapping[str, Any]) -> ActionSuccess:
    content = parse_handler_config(CreateContentConfig, config)
    logger.info(
        f"Content generation requested ({content.content_type})",
        extra={"action_type": ActionType.CREATE_CONTENT.value},
    )
    return ActionSuccess(
        detail={"contentType": content.content_type, "platform": content.platform}
    )


async def schedule_post(config: dict[str, Any], context: Mapping[str, Any]) -> ActionSuccess:
    post = parse_handler_config(SchedulePostConfig, config)
    scheduled_at = post.schedule_time.isoformat() if post.schedule_time else None
    logger.info(
        f"Post scheduling requested for {scheduled_at or 'next slot'}",
        extra={"action_type": ActionType.SCHEDULE_POST.value},
    )
    return ActionSuccess(detail={"scheduledAt": scheduled_at})


async def update_status(config: dict[str, Any], context: Mapping[str, Any]) -> ActionSuccess:
    update = parse_handler_config(UpdateStatusConfig, config)
    logger.info(
        f"Status update requested: {update.status}",
        extra={"action_type": ActionType.UPDATE_STATUS.value},
    )
    return ActionSuccess(detail={"newStatus": update.status})


def register_default_handlers(
    registry: ActionHandlerRegistry,
    webhook_handler: Optional[WebhookHandler] = None,
    webhook_timeout: Optional[float] = None,
) -> ActionHandlerRegistry:
    registry.register(ActionType.SEND_NOTIFICATION, send_notification)
    registry.register(ActionType.CREATE_CONTENT, create_content)
    registry.register(ActionType.SCHEDULE_POST, schedule_post)
    registry.register(ActionType.UPDATE_STATUS, update_status)

    if webhook_handler is not None:
        registry.register(ActionType.TRIGGER_WEBHOOK, webhook_handler, timeout=webhook_timeout)

    return registry


def create_default_registry(
    webhook_handler: Optional[WebhookHandler] = None,
    webhook_timeout: Optional[float] = None,
) -> ActionHandlerRegistry:
    return register_default_handlers(
        ActionHandlerRegistry(), webhook_handler=webhook_handler, webhook_timeout=webhook_timeout
    )
