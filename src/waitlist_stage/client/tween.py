"""Numeric transition between two displayed counts."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CounterTween:
    """Evenly stepped transition from ``start`` to ``target``.

    At most ``max_steps`` frames are produced over ``duration`` seconds and
    the last frame is always exactly ``target``.
    """

    start: int
    target: int
    duration: float = 0.8
    max_steps: int = 30

    @property
    def steps(self) -> int:
        return max(1, min(abs(self.target - self.start), self.max_steps))

    @property
    def step_duration(self) -> float:
        return self.duration / self.steps

    def frames(self) -> list[int]:
        """Return the displayed value after each step."""
        if self.start == self.target:
            return [self.target]
        step_value = (self.target - self.start) / self.steps
        values = [round(self.start + step_value * index) for index in range(1, self.steps)]
        values.append(self.target)
        return values
