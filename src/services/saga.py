"""Compensating-action runner for multi-step writes."""

import logging
from collections.abc import Callable
from types import TracebackType

logger = logging.getLogger(__name__)


class Saga:
    """Run a sequence of separate writes, undoing completed steps on failure.

    Usage:
        with Saga("create post") as saga:
            filename = store(...)
            saga.add_compensation("delete blob", lambda: blob_store.delete(filename))
            ...

    If the block raises, registered compensations run newest first and the
    original exception propagates. A compensation that raises is logged and
    the remaining ones still run.
    """

    def __init__(self, name: str):
        self.name = name
        self._compensations: list[tuple[str, Callable[[], object]]] = []

    def add_compensation(self, description: str, action: Callable[[], object]) -> None:
        """Register an undo step for the write that just succeeded."""
        self._compensations.append((description, action))

    def __enter__(self) -> "Saga":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        if exc is None:
            return False

        logger.warning(f"Saga '{self.name}' failed ({exc!r}); compensating")
        for description, action in reversed(self._compensations):
            try:
                action()
            except Exception as e:
                logger.error(f"Saga '{self.name}' compensation '{description}' failed: {e}")
        return False
