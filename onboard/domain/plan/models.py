"""
Plan domain models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


class StepOutcome(str, Enum):
    APPLIED = "applied"
    ALREADY_SATISFIED = "already satisfied"
    FAILED = "failed"


@dataclass
class Step:
    """
    A named unit of the onboarding run.

    Attributes:
        name: Step identifier (key-ops, remote-dispatch, host-config, ...)
        action: Callable returning the step outcome
        fatal: A failure stops the plan
    """
    name: str
    action: Callable[[], StepOutcome]
    fatal: bool = True


@dataclass
class StepResult:
    name: str
    outcome: StepOutcome
    detail: str = ""
    fatal: bool = True
    error: Optional[Exception] = None


@dataclass
class PlanReport:
    results: List[StepResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def add(self, result: StepResult) -> None:
        self.results.append(result)

    def outcome_of(self, name: str) -> Optional[StepOutcome]:
        for result in self.results:
            if result.name == name:
                return result.outcome
        return None

    @property
    def failed(self) -> bool:
        return any(r.fatal and r.outcome is StepOutcome.FAILED for r in self.results)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0
