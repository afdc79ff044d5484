from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autopilot.automations.domain.action_spec import ActionSpec, parse_actions
from autopilot.automations.domain.condition_tree import ConditionTree
from autopilot.automations.domain.rule_status import CREATABLE_STATUSES, RuleStatus
from autopilot.automations.domain.trigger_type import TriggerType


def _strip_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("name must not be empty")
    return value


class AutomationRuleCreate(BaseModel):
    """Input for creating an automation rule."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(max_length=255)
    description: Optional[str] = None
    trigger_type: TriggerType
    trigger_config: dict[str, Any] = Field(default_factory=dict)
    conditions: ConditionTree = Field(default_factory=ConditionTree)
    actions: list[ActionSpec] = Field(min_length=1)
    priority: int = 0
    campaign_id: Optional[UUID] = None
    status: RuleStatus = RuleStatus.ACTIVE

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _strip_name(value)
        return value

    @field_validator("conditions", mode="before")
    @classmethod
    def validate_conditions(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("actions", mode="before")
    @classmethod
    def validate_actions(cls, value: Any) -> Any:
        # Accept the legacy {action_type: config} mapping as well as a list
        if isinstance(value, dict):
            return parse_actions(value)
        return value

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: RuleStatus) -> RuleStatus:
        if value not in CREATABLE_STATUSES:
            raise ValueError("rules can only be created as ACTIVE or DRAFT")
        return value


class AutomationRuleUpdate(BaseModel):
    """Partial update of a rule. Only fields that were set are applied.

    Status and counters are not editable here; status goes through
    ``update_rule_status`` and counters belong to the execution ledger.
    """

    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    trigger_type: Optional[TriggerType] = None
    trigger_config: Optional[dict[str, Any]] = None
    conditions: Optional[ConditionTree] = None
    actions: Optional[list[ActionSpec]] = Field(default=None, min_length=1)
    priority: Optional[int] = None
    campaign_id: Optional[UUID] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return _strip_name(value)
        return value

    @field_validator("actions", mode="before")
    @classmethod
    def validate_actions(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return parse_actions(value)
        return value
