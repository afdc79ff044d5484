from enum import Enum


class ExecutionStatus(str, Enum):
    """Terminal state of a single rule invocation."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class ExecutionPhase(str, Enum):
    """Intermediate states a run passes through before it terminates."""

    PENDING = "PENDING"
    EVALUATING_CONDITIONS = "EVALUATING_CONDITIONS"
    EXECUTING_ACTIONS = "EXECUTING_ACTIONS"


class SkipReason(str, Enum):
    RULE_NOT_ACTIVE = "Rule is not active"
    CONDITIONS_NOT_MET = "Conditions not met"
