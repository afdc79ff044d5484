from enum import Enum


class ErrorCodes(int, Enum):
    NOT_FOUND = 9000
    BAD_REQUEST = 9001
    UNIQUE_ERROR = 9002
    PERSISTENCE_ERROR = 9003
    RULE_NOT_FOUND = 9010
    ACTION_HANDLER_ERROR = 9011
    EXECUTION_TIMEOUT = 9012


class AutopilotException(Exception):
    error_code: ErrorCodes = ErrorCodes.BAD_REQUEST


class NotFoundException(AutopilotException):
    error_code = ErrorCodes.NOT_FOUND


class BadRequestException(AutopilotException):
    error_code = ErrorCodes.BAD_REQUEST


class UniqueException(AutopilotException):
    error_code = ErrorCodes.UNIQUE_ERROR


class PersistenceException(AutopilotException):
    """A store read or write failed."""

    error_code = ErrorCodes.PERSISTENCE_ERROR


class RuleNotFoundException(NotFoundException):
    error_code = ErrorCodes.RULE_NOT_FOUND

    def __init__(self, message: str = "rule not found"):
        super().__init__(message)


class ActionHandlerError(AutopilotException):
    """Raised by action handlers for failures they want reported verbatim."""

    error_code = ErrorCodes.ACTION_HANDLER_ERROR


class ExecutionTimeoutException(AutopilotException):
    error_code = ErrorCodes.EXECUTION_TIMEOUT
