import functools
import logging

from ArrangementMCP_Server.engine.errors import LimitExceededError, NotFoundError

logger = logging.getLogger("ArrangementMCP")


def _tool_handler(error_prefix: str):
    """Decorator that wraps tool functions with standard error handling.

    Catches ValueError -> "Invalid input: ..." (engine ValidationError included),
    NotFoundError -> "Not found: ...",
    LimitExceededError -> "Limit exceeded: ...",
    ConnectionError -> "Ableton not available: ...",
    Exception -> "Error {prefix}: ..."
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ValueError as e:
                return f"Invalid input: {e}"
            except NotFoundError as e:
                return f"Not found: {e}"
            except LimitExceededError as e:
                logger.warning("Limit exceeded %s: %s", error_prefix, e)
                return f"Limit exceeded: {e}"
            except ConnectionError as e:
                return f"Ableton not available: {e}"
            except Exception as e:
                logger.error("Error %s: %s", error_prefix, e)
                return f"Error {error_prefix}: {e}"
        return wrapper
    return decorator
