from enum import Enum


class RuleStatus(str, Enum):
    """Lifecycle state of an automation rule. Only ACTIVE rules execute."""

    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    DRAFT = "DRAFT"


# States a rule may be created in
CREATABLE_STATUSES = frozenset({RuleStatus.ACTIVE, RuleStatus.DRAFT})
