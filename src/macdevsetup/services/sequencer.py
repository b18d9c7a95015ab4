"""Ordered step execution with declared failure policies."""

from typing import List, Sequence

from macdevsetup.errors import SetupError
from macdevsetup.models import FailurePolicy, RunContext, Step, StepResult, StepStatus
from macdevsetup.reporting import log, warn


class StepSequencer:
    """Runs each step once, in order, and records its outcome.

    A ``SetupError`` or ``OSError`` raised by a step is re-raised as a
    ``SetupError`` when the step is declared ``FATAL`` and downgraded to a
    warning when it is declared ``WARN``.
    """

    def __init__(self, logger, console):
        self.logger = logger
        self.console = console
        self.results: List[StepResult] = []

    def run(self, steps: Sequence[Step], ctx: RunContext) -> List[StepResult]:
        self.results = []
        for step in steps:
            self.results.append(self.run_step(step, ctx))
        return self.results

    def run_step(self, step: Step, ctx: RunContext) -> StepResult:
        log(self.console, f"Step: {step.title}")
        self.logger.debug("Running step %s (policy=%s)", step.name, step.policy.value)

        if step.requires_brew and not ctx.has_brew:
            message = f"Homebrew missing; skipping {step.title}."
            warn(self.console, message)
            return StepResult(step.name, StepStatus.SKIPPED, message)

        if step.precondition is not None:
            satisfied = step.precondition(ctx)
            if satisfied:
                log(self.console, satisfied)
                return StepResult(step.name, StepStatus.ALREADY_PRESENT, satisfied)

        try:
            status = step.action(ctx)
        except (SetupError, OSError) as exc:
            if step.policy is FailurePolicy.FATAL:
                self.results.append(StepResult(step.name, StepStatus.FAILED, str(exc)))
                if isinstance(exc, SetupError):
                    raise
                raise SetupError(f"{step.title} failed: {exc}") from exc
            warn(self.console, f"{step.title} did not complete: {exc}")
            self.logger.warning("Step %s failed and was skipped: %s", step.name, exc)
            return StepResult(step.name, StepStatus.WARNED, str(exc))

        return StepResult(step.name, status)
