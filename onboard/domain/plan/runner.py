"""
Sequential plan runner
"""
from typing import Callable, List, Optional

from ...core.exceptions import OnboardError
from ...core.logging import get_logger
from .models import PlanReport, Step, StepOutcome, StepResult

logger = get_logger(__name__)


class OnboardingPlan:
    """
    Runs steps in order on the calling thread.

    A fatal step that fails, either by returning FAILED or by raising an
    OnboardError, stops the run; the remaining steps are reported as skipped.
    Non-fatal failures are recorded and the run continues.
    """

    def __init__(
        self,
        steps: Optional[List[Step]] = None,
        on_step_start: Optional[Callable[[str], None]] = None,
        on_step_done: Optional[Callable[[StepResult], None]] = None,
    ):
        self.steps: List[Step] = list(steps or [])
        self.on_step_start = on_step_start
        self.on_step_done = on_step_done

    def add(self, name: str, action: Callable[[], StepOutcome], fatal: bool = True) -> "OnboardingPlan":
        self.steps.append(Step(name=name, action=action, fatal=fatal))
        return self

    def run(self) -> PlanReport:
        report = PlanReport()

        for index, step in enumerate(self.steps):
            if self.on_step_start:
                self.on_step_start(step.name)

            try:
                outcome = step.action()
                result = StepResult(step.name, outcome, fatal=step.fatal)
            except OnboardError as e:
                logger.debug(f"Step {step.name} raised", exc_info=True)
                result = StepResult(
                    step.name, StepOutcome.FAILED, detail=str(e), fatal=step.fatal, error=e
                )

            report.add(result)
            logger.info(f"[{step.name}] {result.outcome.value}")
            if self.on_step_done:
                self.on_step_done(result)

            if result.outcome is StepOutcome.FAILED and step.fatal:
                report.skipped = [s.name for s in self.steps[index + 1:]]
                if report.skipped:
                    logger.warning(f"Stopping after {step.name}; not run: {', '.join(report.skipped)}")
                break

        return report
