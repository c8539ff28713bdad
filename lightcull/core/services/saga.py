"""Compensating-action runner for multi-step filesystem operations.

The filesystem has no transactions, so each pair operation is written as a
sequence of steps, each paired with the action that reverses it. When a
later step fails, the completed steps are reversed newest first.

Example:
    saga = Saga("move DSCF0100")
    if not saga.step("move jpeg", lambda: mv(a, b), lambda: mv(b, a)):
        return None
    if not saga.step("move raw", lambda: mv(c, d), lambda: mv(d, c)):
        saga.rollback()
        return None
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

Action = Callable[[], bool]


@dataclass
class _Step:
    description: str
    compensation: Action | None


class Saga:
    """Runs steps in order and remembers how to undo the ones that succeeded."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._done: list[_Step] = []

    @property
    def completed(self) -> list[str]:
        """Descriptions of the steps that succeeded and were not rolled back."""
        return [s.description for s in self._done]

    def step(self, description: str, action: Action, compensation: Action | None = None) -> bool:
        """Run `action`; on success remember `compensation` for rollback.

        An exception raised by `action` is logged and counts as failure.
        A step without compensation is recorded but skipped on rollback.
        """
        try:
            ok = bool(action())
        except Exception as ex:  # pylint: disable=broad-exception-caught
            logger.error("{}: step '{}' raised: {}", self.name, description, ex)
            ok = False
        if ok:
            self._done.append(_Step(description, compensation))
        else:
            logger.debug("{}: step '{}' failed", self.name, description)
        return ok

    def rollback(self) -> bool:
        """Reverse completed steps newest first.

        Every compensation is attempted even if an earlier one fails.
        Returns True only if all compensations succeeded.
        """
        all_ok = True
        while self._done:
            s = self._done.pop()
            if s.compensation is None:
                continue
            try:
                ok = bool(s.compensation())
            except Exception as ex:  # pylint: disable=broad-exception-caught
                logger.error("{}: compensation for '{}' raised: {}", self.name, s.description, ex)
                ok = False
            if ok:
                logger.info("{}: rolled back '{}'", self.name, s.description)
            else:
                all_ok = False
                logger.critical("{}: could not roll back '{}'", self.name, s.description)
        return all_ok
