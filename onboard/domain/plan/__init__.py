"""
Onboarding plan: named steps with tri-state outcomes
"""
from .models import Step, StepOutcome, StepResult, PlanReport
from .runner import OnboardingPlan

__all__ = [
    "Step",
    "StepOutcome",
    "StepResult",
    "PlanReport",
    "OnboardingPlan",
]
