import logging
from typing import List, Optional, Set

logger = logging.getLogger("ArrangementMCP.warnings")


class WarningLog:
    """Non-fatal conditions collected during one transform call.

    Each message is logged and kept for the caller. Passing a ``key``
    reports a condition only once per call no matter how many clips hit it.
    """

    def __init__(self):
        self._messages: List[str] = []
        self._keys: Set[str] = set()

    def warn(self, message: str, key: Optional[str] = None) -> None:
        if key is not None:
            if key in self._keys:
                return
            self._keys.add(key)
        logger.warning("%s", message)
        self._messages.append(message)

    @property
    def messages(self) -> List[str]:
        return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __contains__(self, text: str) -> bool:
        return any(text in message for message in self._messages)
