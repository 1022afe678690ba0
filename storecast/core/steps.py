# storecast/core/steps.py
"""
Ordered multi-step operations without a transaction.

Deleting a content item (Storage, then DB) or changing an email (Auth,
then profile) are sequences of independent calls. Each step is either
required (its failure aborts and propagates) or best effort (its failure
is logged as a warning and the sequence continues).
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    name: str
    ok: bool
    error: str | None = None


@dataclass
class StepSequence:
    operation: str
    on_failure: Callable[[], Any] | None = None
    outcomes: list[StepOutcome] = field(default_factory=list)

    def run(self, name: str, fn: Callable[[], Any], *, required: bool = True) -> Any:
        try:
            value = fn()
        except Exception as exc:
            self.outcomes.append(StepOutcome(name=name, ok=False, error=str(exc)))
            if self.on_failure is not None:
                self.on_failure()
            if required:
                logger.error("%s: step '%s' failed: %s", self.operation, name, exc)
                raise
            logger.warning("%s: step '%s' failed, continuing: %s", self.operation, name, exc)
            return None
        self.outcomes.append(StepOutcome(name=name, ok=True))
        return value

    @property
    def warnings(self) -> list[str]:
        return [f"{o.name}: {o.error}" for o in self.outcomes if not o.ok]
