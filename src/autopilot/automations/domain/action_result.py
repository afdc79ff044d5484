from dataclasses import dataclass, field
from typing import Any, Mapping, Union

UNKNOWN_ACTION_TYPE = "unknown action type"
ACTION_TIMEOUT = "timeout"


@dataclass(frozen=True)
class ActionSuccess:
    detail: dict[str, Any] = field(default_factory=dict)

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "detail": self.detail}


@dataclass(frozen=True)
class ActionFailure:
    error: str

    success = False

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error}


ActionResult = Union[ActionSuccess, ActionFailure]


def normalize_result(value: Any) -> ActionResult:
    """Turn whatever a handler returned into an ActionResult.

    Handlers written against the older contract return plain dicts such as
    ``{"success": True, "message": "..."}``; ``None`` counts as success.
    """
    if isinstance(value, (ActionSuccess, ActionFailure)):
        return value

    if value is None:
        return ActionSuccess()

    if isinstance(value, Mapping):
        payload = dict(value)
        success = payload.pop("success", True)
        if success:
            detail = payload.pop("detail", None)
            return ActionSuccess(detail=detail if isinstance(detail, dict) else payload)
        return ActionFailure(error=str(payload.get("error") or "action reported failure"))

    return ActionSuccess(detail={"result": value})


@dataclass(frozen=True)
class ActionOutcome:
    """Result of one configured action, kept in configuration order."""

    action_type: str
    index: int
    result: ActionResult

    @property
    def success(self) -> bool:
        return self.result.success

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, **self.result.to_dict()}


def to_execution_result(outcomes: list[ActionOutcome]) -> dict[str, Any]:
    """Build the persisted result map.

    Entries are keyed by action type. A type that appears more than once gets
    ``"<type>#<index>"`` keys for the later occurrences so nothing is lost.
    """
    result: dict[str, Any] = {}
    for outcome in outcomes:
        key = outcome.action_type
        if key in result:
            key = f"{outcome.action_type}#{outcome.index}"
        result[key] = outcome.to_dict()
    return result
