"""Error handling for coflow.

- TaskResult/Success/Failure: tagged per-task outcomes and wrap_result
- ErrorCode/FlowError: structured error descriptions
- CoflowError and subclasses: exceptions raised by coflow itself
"""

from .errors import (
    CoflowError,
    ErrorCode,
    FlowError,
    InvalidOptionsError,
    TaskFailedError,
    as_exception,
)
from .result import Failure, Success, TaskResult, wrap_result

__all__ = [
    # Errors
    "ErrorCode", "FlowError", "CoflowError", "InvalidOptionsError", "TaskFailedError", "as_exception",
    # Results
    "TaskResult", "Success", "Failure", "wrap_result",
]
