"""Status line steps for the pipeline."""

from __future__ import annotations

from typing import Any
from typing import Callable
from typing import TYPE_CHECKING

from httpreader.pipeline.step import Step

if TYPE_CHECKING:
    from httpreader.pipeline.context import StepContext


def use_status_code(action: Callable[..., Any]) -> Step:
    """Hand the status code to `action`."""

    def run(context: StepContext) -> None:
        context.deliver(action, context.message.status_code)

    return Step.action("use_status_code", run)


def use_reason_phrase(action: Callable[..., Any]) -> Step:
    """Hand the reason phrase to `action`."""

    def run(context: StepContext) -> None:
        context.deliver(action, context.message.reason)

    return Step.action("use_reason_phrase", run)


def ensure_status_code(predicate: Callable[..., bool]) -> Step:
    """Check the status code with `predicate`."""

    def run(context: StepContext) -> bool:
        return bool(context.deliver(predicate, context.message.status_code))

    return Step.predicate("ensure_status_code", run)
