from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger("shop_assistant.pipeline")


@dataclass
class PipelineStep:
    """Named dispatcher step; skip_if lets an earlier step short-circuit it."""
    name: str
    fn: Callable[[object], None]
    skip_if: Optional[Callable[[object], bool]] = None
    always_run: bool = False

    def should_run(self, context: object) -> bool:
        if self.always_run or self.skip_if is None:
            return True
        return not self.skip_if(context)


class PipelineRunner:
    """Runs an ordered list of steps over one mutable request context."""

    def __init__(self, steps: List[PipelineStep]) -> None:
        names = [step.name for step in steps]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate step names: {names}")
        self._steps = steps

    @property
    def step_names(self) -> List[str]:
        return [step.name for step in self._steps]

    def run(self, context: object) -> List[str]:
        """Purpose: Apply each step to the request context in order.
        Inputs/Outputs: Input is the mutable context; output is the names of the
            steps that actually ran.
        Side Effects / State: Steps mutate the context.
        Dependencies: PipelineStep.should_run.
        Failure Modes: A step exception stops the run and propagates; steps after it,
            including always_run ones, do not execute.
        If Removed: The dispatcher cannot process any message.
        Testing Notes: A terminal reply from an early step skips dispatch but not finalize.
        """
        executed: List[str] = []
        for step in self._steps:
            if not step.should_run(context):
                logger.debug("step=%s skipped", step.name)
                continue
            step.fn(context)
            executed.append(step.name)
        return executed
