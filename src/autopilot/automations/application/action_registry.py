from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

from autopilot.automations.domain.action_result import ActionResult
from autopilot.automations.domain.action_spec import ActionType
from autopilot.main.logging import get_logger

logger = get_logger(__name__)

ActionHandler = Callable[
    [dict[str, Any], Mapping[str, Any]],
    Union[Awaitable[ActionResult], ActionResult, Awaitable[Any], Any],
]


@dataclass(frozen=True)
class RegisteredHandler:
    action_type: str
    handler: ActionHandler
    timeout: Optional[float] = None


def _key(action_type: Union[str, ActionType]) -> str:
    return action_type.value if isinstance(action_type, ActionType) else str(action_type)


class ActionHandlerRegistry:
    """Maps action type tags to the handlers that carry them out.

    Handlers come from outside the engine (notification service, webhook
    client, ...). Each one may declare its own timeout; otherwise the
    executor's default applies.
    """

    def __init__(self):
        self._handlers: dict[str, RegisteredHandler] = {}

    def register(
        self,
        action_type: Union[str, ActionType],
        handler: ActionHandler,
        timeout: Optional[float] = None,
    ) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be greater than zero")

        key = _key(action_type)
        if key in self._handlers:
            logger.info(f"Replacing handler for action type {key}")

        self._handlers[key] = RegisteredHandler(action_type=key, handler=handler, timeout=timeout)

    def unregister(self, action_type: Union[str, ActionType]) -> None:
        self._handlers.pop(_key(action_type), None)

    def get(self, action_type: Union[str, ActionType]) -> Optional[RegisteredHandler]:
        return self._handlers.get(_key(action_type))

    def timeout_for(self, action_type: Union[str, ActionType], default: float) -> float:
        registered = self.get(action_type)
        if registered is None or registered.timeout is None:
            return default
        return registered.timeout

    @property
    def registered_types(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, action_type: object) -> bool:
        if not isinstance(action_type, (str, ActionType)):
            return False
        return _key(action_type) in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
