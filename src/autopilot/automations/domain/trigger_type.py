from enum import Enum


class TriggerType(str, Enum):
    """Kind of signal that makes the dispatcher consider a rule.

    Informational for the engine, which runs every rule the same way.
    """

    TIME_BASED = "TIME_BASED"
    EVENT_BASED = "EVENT_BASED"
    CONDITION_BASED = "CONDITION_BASED"
