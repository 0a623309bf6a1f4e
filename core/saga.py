"""
Compensation Log.

Ordered undo list for deployment steps the host cannot roll back as part
of its transaction. Each completed non-transactional step registers its
undo action; on a later failure the actions run in reverse order.

Exports:
    Compensation: One registered undo action
    CompensationLog: Ordered undo list
"""

from dataclasses import dataclass
from typing import Callable, List

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CompensationLog")


@dataclass(frozen=True)
class Compensation:
    step: str
    description: str
    action: Callable[[], None]


class CompensationLog:
    """
    Reverse-order undo list.

    Example:
        log = CompensationLog()
        repo.create_database(name)
        log.register("ensure_database", f"drop {name}", lambda: repo.drop_database(name))
        ...
        errors = log.compensate()   # on failure
        log.clear()                 # on success
    """

    def __init__(self):
        self._entries: List[Compensation] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def steps(self) -> List[str]:
        return [entry.step for entry in self._entries]

    def register(self, step: str, description: str, action: Callable[[], None]) -> None:
        self._entries.append(Compensation(step, description, action))
        logger.debug(f"🔧 Registered compensation for {step}: {description}")

    def compensate(self) -> List[str]:
        """
        Run every registered action, last registered first.

        A failing action does not stop the others; its message is returned
        so the caller can report it with the original failure.

        Returns:
            Messages of compensations that failed (empty when all succeeded)
        """
        failures: List[str] = []
        while self._entries:
            entry = self._entries.pop()
            try:
                entry.action()
                logger.warning(f"↩️ Compensated {entry.step}: {entry.description}")
            except Exception as e:
                logger.error(f"❌ Compensation for {entry.step} failed: {e}", exc_info=True)
                failures.append(f"{entry.step} ({entry.description}): {e}")
        return failures

    def clear(self) -> None:
        """Forget all actions once the deployment has committed."""
        self._entries.clear()
