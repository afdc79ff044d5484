from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    model_validator,
)


class ActionType(str, Enum):
    """Action types with a built-in handler and a validated config schema."""

    SEND_NOTIFICATION = "SEND_NOTIFICATION"
    CREATE_CONTENT = "CREATE_CONTENT"
    SCHEDULE_POST = "SCHEDULE_POST"
    UPDATE_STATUS = "UPDATE_STATUS"
    TRIGGER_WEBHOOK = "TRIGGER_WEBHOOK"


class _ActionConfig(BaseModel):
    # Unknown keys are kept so handlers can read fields we do not model yet
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class SendNotificationConfig(_ActionConfig):
    channel: str = "in_app"
    recipients: list[str] = Field(default_factory=list)
    title: Optional[str] = None
    message: Optional[str] = None


class CreateContentConfig(_ActionConfig):
    content_type: str = Field(
        default="post", validation_alias=AliasChoices("content_type", "contentType")
    )
    platform: Optional[str] = None
    prompt: Optional[str] = None
    template: Optional[str] = None


class SchedulePostConfig(_ActionConfig):
    schedule_time: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("schedule_time", "scheduleTime")
    )
    platform: Optional[str] = None
    content_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("content_id", "contentId")
    )


class UpdateStatusConfig(_ActionConfig):
    status: str = Field(min_length=1)
    target: Optional[str] = None


class TriggerWebhookConfig(_ActionConfig):
    url: HttpUrl
    method: Literal["POST", "PUT", "PATCH"] = "POST"
    headers: dict[str, str] = Field(default_factory=dict)
    payload: dict[str, Any] = Field(default_factory=dict)


ACTION_CONFIG_MODELS: dict[str, type[_ActionConfig]] = {
    ActionType.SEND_NOTIFICATION.value: SendNotificationConfig,
    ActionType.CREATE_CONTENT.value: CreateContentConfig,
    ActionType.SCHEDULE_POST.value: SchedulePostConfig,
    ActionType.UPDATE_STATUS.value: UpdateStatusConfig,
    ActionType.TRIGGER_WEBHOOK.value: TriggerWebhookConfig,
}


class ActionSpec(BaseModel):
    """One configured action of a rule.

    Built-in action types have their config validated on construction. Any
    other type is stored as an opaque map and resolved by the handler
    registry at run time.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    action_type: str = Field(
        min_length=1, validation_alias=AliasChoices("action_type", "actionType", "type")
    )
    config: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_known_config(self):
        config_model = ACTION_CONFIG_MODELS.get(self.action_type)
        if config_model is not None:
            config_model.model_validate(self.config)
        return self

    @property
    def is_builtin(self) -> bool:
        return self.action_type in ACTION_CONFIG_MODELS

    def typed_config(self) -> BaseModel | dict[str, Any]:
        config_model = ACTION_CONFIG_MODELS.get(self.action_type)
        if config_model is None:
            return dict(self.config)
        return config_model.model_validate(self.config)


def parse_actions(raw: Any) -> list[ActionSpec]:
    """Parse stored or submitted actions into an ordered list.

    Accepts a list of ``{"action_type", "config"}`` items or the legacy
    mapping of ``{action_type: config}``.
    """
    if raw is None:
        return []

    if isinstance(raw, dict):
        return [
            ActionSpec(action_type=action_type, config=config or {})
            for action_type, config in raw.items()
        ]

    return [
        item if isinstance(item, ActionSpec) else ActionSpec.model_validate(item)
        for item in raw
    ]
