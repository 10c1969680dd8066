"""
Fire-and-forget background tasks.

A plain threading.Thread reports an uncaught exception only through
threading.excepthook, which nothing in a long-running service watches.
execute_async wraps the task so every failure ends up in a logger instead.
"""

import logging
import threading
from typing import Any, Callable, Optional


def execute_async(
    logger: logging.Logger,
    fn: Callable[..., Any],
    *args: Any,
    name: Optional[str] = None,
    **kwargs: Any,
) -> threading.Thread:
    """
    Run fn in a daemon thread, logging any failure it raises.

    Args:
        logger: Logger that receives failures, with their traceback
        fn: Callable to run
        *args: Positional arguments for fn
        name: Thread name (defaults to the callable's name)
        **kwargs: Keyword arguments for fn

    Returns:
        The started thread
    """
    task_name = name or getattr(fn, "__name__", "background-task")

    def _run() -> None:
        try:
            fn(*args, **kwargs)
        # Includes SystemExit and KeyboardInterrupt.
        except BaseException as e:
            logger.error(f"Background task {task_name} failed: {type(e).__name__}: {e}", exc_info=True)

    thread = threading.Thread(target=_run, name=task_name, daemon=True)
    thread.start()
    return thread
