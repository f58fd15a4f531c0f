"""
Pending-record accumulation for parsers that assemble one transaction from fields
spread over several lines.
"""
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

CompletionCheck = Callable[[Dict[str, Any]], bool]


class PendingRecord:
    """
    Partial record plus a completion predicate.

    Fields are merged in as lines are scanned; once the predicate holds the caller
    flushes the fields, which also resets the accumulator for the next transaction.
    """

    def __init__(self, is_complete: CompletionCheck):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._is_complete = is_complete
        self.fields: Dict[str, Any] = {}

    def update(self, **fields: Any) -> None:
        """Record newly seen values; None leaves the current value untouched."""
        for name, value in fields.items():
            if value is not None:
                self.fields[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def is_complete(self) -> bool:
        return self._is_complete(self.fields)

    def flush(self, is_complete: Optional[CompletionCheck] = None) -> Optional[Dict[str, Any]]:
        """
        Return the accumulated fields and reset, or None while still incomplete.

        Args:
            is_complete: Predicate to use instead of the one given at construction
        """
        check = is_complete or self._is_complete
        if not check(self.fields):
            return None
        completed, self.fields = self.fields, {}
        self.logger.debug(f"Completed pending record with fields {sorted(completed)}")
        return completed

    def reset(self) -> None:
        self.fields = {}
