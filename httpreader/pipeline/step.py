"""
Step descriptors.

A step is one unit of pipeline work over a message:
- predicate: returns whether the message passes a check
- action: observes the message, always succeeds
- transform: rewrites the message content, always succeeds unless it raises
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Callable
from typing import Literal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpreader.pipeline.context import StepContext

StepKind = Literal["predicate", "action", "transform"]


@dataclass(frozen=True)
class Step:
    """A named unit of pipeline work."""

    name: str
    kind: StepKind
    func: Callable[[StepContext], Any]

    def run(self, context: StepContext) -> bool:
        """Run the step and report success."""
        result = self.func(context)
        if self.kind == "predicate":
            return bool(result)
        return True

    @classmethod
    def predicate(cls, name: str, func: Callable[[StepContext], bool]) -> Step:
        return cls(name, "predicate", func)

    @classmethod
    def action(cls, name: str, func: Callable[[StepContext], Any]) -> Step:
        return cls(name, "action", func)

    @classmethod
    def transform(cls, name: str, func: Callable[[StepContext], Any]) -> Step:
        return cls(name, "transform", func)
