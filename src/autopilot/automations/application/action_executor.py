import asyncio
import copy
import inspect
import time
from typing import Any, Mapping, Sequence

from autopilot.automations.application.action_registry import (
    ActionHandler,
    ActionHandlerRegistry,
)
from autopilot.automations.domain.action_result import (
    ACTION_TIMEOUT,
    UNKNOWN_ACTION_TYPE,
    ActionFailure,
    ActionOutcome,
    ActionResult,
    normalize_result,
)
from autopilot.automations.domain.action_spec import ActionSpec
from autopilot.main.logging import get_logger

logger = get_logger(__name__)


def _is_async_callable(handler: ActionHandler) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


class ActionExecutor:
    """Runs a rule's actions in order, isolating each one.

    A handler that raises, reports failure or exceeds its timeout produces an
    ActionFailure for that action only; the remaining actions still run.
    """

    def __init__(self, registry: ActionHandlerRegistry, default_timeout: float = 10.0):
        self.registry = registry
        self.default_timeout = default_timeout

    def timeout_for(self, action: ActionSpec) -> float:
        return self.registry.timeout_for(action.action_type, self.default_timeout)

    def budget_seconds(self, actions: Sequence[ActionSpec]) -> float:
        """Longest time a full run of these actions can take."""
        return sum(self.timeout_for(action) for action in actions)

    async def execute_actions(
        self, actions: Sequence[ActionSpec], context: Mapping[str, Any]
    ) -> list[ActionOutcome]:
        outcomes = []
        for index, action in enumerate(actions):
            result = await self._run_action(action, context)
            outcomes.append(
                ActionOutcome(action_type=action.action_type, index=index, result=result)
            )
        return outcomes

    async def _run_action(self, action: ActionSpec, context: Mapping[str, Any]) -> ActionResult:
        registered = self.registry.get(action.action_type)
        if registered is None:
            logger.warning(
                f"No handler registered for action type {action.action_type}",
                extra={"action_type": action.action_type},
            )
            return ActionFailure(error=UNKNOWN_ACTION_TYPE)

        timeout = self.timeout_for(action)
        start = time.perf_counter()

        try:
            result = await asyncio.wait_for(
                self._invoke(registered.handler, dict(action.config), copy.deepcopy(dict(context))),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Action {action.action_type} timed out after {timeout}s",
                extra={"action_type": action.action_type, "timeout_seconds": timeout},
            )
            return ActionFailure(error=ACTION_TIMEOUT)
        except Exception as e:
            logger.warning(
                f"Action {action.action_type} raised {e.__class__.__name__}: {e}",
                extra={"action_type": action.action_type},
            )
            return ActionFailure(error=str(e) or e.__class__.__name__)

        duration_ms = int((time.perf_counter() - start) * 1000)
        normalized = normalize_result(result)
        logger.debug(
            f"Action {action.action_type} finished",
            extra={
                "action_type": action.action_type,
                "success": normalized.success,
                "duration_ms": duration_ms,
            },
        )
        return normalized

    @staticmethod
    async def _invoke(
        handler: ActionHandler, config: dict[str, Any], context: dict[str, Any]
    ) -> Any:
        if _is_async_callable(handler):
            return await handler(config, context)

        # Blocking handlers run in a worker thread so the timeout can still fire
        result = await asyncio.to_thread(handler, config, context)
        if inspect.isawaitable(result):
            result = await result
        return result
