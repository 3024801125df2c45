"""
session.py - Execution state machine for one run of a Flow.

States move strictly forward:

    initialized -> running -> (running | completed | error)

completed and error are terminal. A Session owns exactly one Context for its
whole lifetime and executes one step at a time. A failed step ends the
session in ``error``; context mutations made by earlier steps are kept.

Routing cycles are not detected structurally. ``run()`` bounds them with a
step budget (``max_steps``, from runtime config by default).
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from enum import Enum
from typing import List, Optional

from stepflow.config.runtime_config import get_max_steps
from stepflow.errors import MaxStepsExceededError, SessionStateError
from stepflow.runtime.async_utils import run_async_safely
from stepflow.runtime.context import Context
from stepflow.runtime.flow import Flow

logger = logging.getLogger(__name__)


class SessionStatus(Enum):
    INITIALIZED = "initialized"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.ERROR})


class Session:
    """Sequencer walking a Flow from its first step to a terminal step.

    Args:
        flow: The (shared, read-only) flow to execute.
        context: Optional pre-seeded context. A fresh one is created if omitted.
    """

    def __init__(self, flow: Flow, context: Optional[Context] = None):
        self.session_id = uuid.uuid4().hex
        self.flow = flow
        self.status = SessionStatus.INITIALIZED
        self.error: Optional[BaseException] = None
        self.executed_steps: List[str] = []
        self._context = context if context is not None else Context()
        self._current_step_id: Optional[str] = None

    @property
    def context(self) -> Context:
        """The session's context. Intended for read-only inspection."""
        return self._context

    def get_context(self) -> Context:
        return self._context

    @property
    def current_step_id(self) -> Optional[str]:
        return self._current_step_id

    def is_complete(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def is_finished(self) -> bool:
        """True once the session reached a terminal status."""
        return self.status in TERMINAL_STATUSES

    def start(self) -> SessionStatus:
        """Move to ``running`` at the flow's first step.

        Raises:
            SessionStateError: If already started, or the flow has no steps.
                Status is left unchanged, so a second ``start()`` on a
                running session does not move it to ``error``.
        """
        if self.status != SessionStatus.INITIALIZED:
            raise SessionStateError(
                f"Session is already started (status: {self.status.value})"
            )

        first_step_id = self.flow.get_first_step_id()
        if first_step_id is None:
            raise SessionStateError(f"Cannot start session: flow '{self.flow.id}' has no steps")

        self._current_step_id = first_step_id
        self.status = SessionStatus.RUNNING
        logger.info(
            "Session %s started flow '%s' at step '%s'",
            self.session_id,
            self.flow.id,
            first_step_id,
        )
        return self.status

    async def execute_current_step(self, cancellation: Optional[asyncio.Event] = None) -> bool:
        """Execute the current step and advance.

        Returns:
            True if the step succeeded (the session is then ``running`` or
            ``completed``), False if it failed (the session is then ``error``
            and ``self.error`` holds the exception).

        Raises:
            SessionStateError: If the session is not running.
        """
        step_id = self._current_step_id
        if self.status != SessionStatus.RUNNING or step_id is None:
            raise SessionStateError(
                f"Session is not running or has no current step (status: {self.status.value})"
            )

        self.executed_steps.append(step_id)
        try:
            next_step_id = await self.flow.execute(step_id, self._context, cancellation=cancellation)
        except Exception as e:
            self._fail(e, step_id)
            return False

        self._current_step_id = next_step_id
        if next_step_id is None:
            self.status = SessionStatus.COMPLETED
            logger.info(
                "Session %s completed flow '%s' after %d step(s)",
                self.session_id,
                self.flow.id,
                len(self.executed_steps),
            )
        return True

    async def run(
        self,
        max_steps: Optional[int] = None,
        cancellation: Optional[asyncio.Event] = None,
    ) -> SessionStatus:
        """Drive the session until it completes or fails.

        Args:
            max_steps: Step budget for this call. None reads the configured
                default; 0 disables the budget.
            cancellation: Forwarded to every step execution.

        Returns:
            The terminal status.
        """
        if self.status == SessionStatus.INITIALIZED:
            self.start()

        budget = get_max_steps() if max_steps is None else max_steps
        executed = 0
        while self.status == SessionStatus.RUNNING:
            if budget and executed >= budget:
                self._fail(MaxStepsExceededError(budget, self._current_step_id), self._current_step_id)
                break
            await self.execute_current_step(cancellation=cancellation)
            executed += 1
        return self.status

    def run_sync(self, max_steps: Optional[int] = None) -> SessionStatus:
        """Synchronous wrapper around ``run``."""
        return run_async_safely(self.run(max_steps=max_steps))

    def _fail(self, error: Exception, step_id: Optional[str]) -> None:
        self.status = SessionStatus.ERROR
        self.error = error
        logger.error(
            "Session %s failed at step '%s' of flow '%s': %s",
            self.session_id,
            step_id,
            self.flow.id,
            error,
        )

    def __repr__(self) -> str:
        return (
            f"Session(id={self.session_id!r}, flow={self.flow.id!r}, "
            f"status={self.status.value!r}, current={self._current_step_id!r})"
        )
