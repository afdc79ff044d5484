from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from autopilot.main.exceptions import ActionHandlerError

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_handler_config(model: type[ConfigT], config: dict[str, Any]) -> ConfigT:
    """Validate an action config, reporting problems as a short handler error."""
    try:
        return model.model_validate(config)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"]) or "config" for error in e.errors()
        )
        raise ActionHandlerError(f"invalid {model.__name__} ({fields})") from e
