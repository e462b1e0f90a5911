"""
Execution of a call under test.
"""

import time
from typing import Any, Callable, Mapping, Optional, Sequence

from .outcome import ExceptionalExecution, ExecutionOutcome, NormalExecution


def execute(
    func: Callable[..., Any],
    args: Sequence[Any] = (),
    kwargs: Optional[Mapping[str, Any]] = None,
) -> ExecutionOutcome:
    """
    Call ``func`` and capture what it did.

    Exceptions raised by the call become an ExceptionalExecution.
    KeyboardInterrupt and SystemExit are not captured.
    """
    start = time.perf_counter_ns()
    try:
        value = func(*args, **(kwargs or {}))
    except Exception as e:
        return ExceptionalExecution(e, time_ns=time.perf_counter_ns() - start)
    return NormalExecution(value, time_ns=time.perf_counter_ns() - start)
