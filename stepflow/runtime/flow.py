"""
flow.py - Immutable directed graph of steps.

A Flow holds its steps in declaration order plus an id index. The per-step
routing tables are the only source of "next step" information; the Flow
keeps no adjacency of its own. Flows are read-only after construction and
can be shared by concurrent Sessions.
"""

from __future__ import annotations

import asyncio
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence, Tuple

from stepflow.errors import ConfigurationError, StepNotFoundError
from stepflow.runtime.context import Context
from stepflow.runtime.steps.base import Step


class Flow:
    """Ordered steps, id index and optional explicit initial step.

    Raises:
        ConfigurationError: On duplicate step ids, or an initial step id that
            is not among the steps.
    """

    def __init__(
        self,
        flow_id: str,
        steps: Sequence[Step],
        initial_step_id: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ):
        self._id = flow_id
        self._steps: Tuple[Step, ...] = tuple(steps)
        self.name = name
        self.description = description

        index: Dict[str, Step] = {}
        for step in self._steps:
            if step.id in index:
                raise ConfigurationError(
                    f"Duplicate step id '{step.id}' in flow '{flow_id}'",
                    context={"flow_id": flow_id, "step_id": step.id},
                )
            index[step.id] = step
        self._index: Mapping[str, Step] = MappingProxyType(index)

        if initial_step_id and initial_step_id not in index:
            raise ConfigurationError(
                f"Initial step '{initial_step_id}' not found in flow '{flow_id}'",
                context={"flow_id": flow_id, "initial_step_id": initial_step_id},
            )
        self._initial_step_id = initial_step_id or None

    @property
    def id(self) -> str:
        return self._id

    @property
    def steps(self) -> Tuple[Step, ...]:
        return self._steps

    @property
    def step_ids(self) -> Tuple[str, ...]:
        return tuple(step.id for step in self._steps)

    @property
    def initial_step_id(self) -> Optional[str]:
        return self._initial_step_id

    def get_first_step_id(self) -> Optional[str]:
        """Explicit initial step, else the first declared step, else None."""
        if self._initial_step_id:
            return self._initial_step_id
        if self._steps:
            return self._steps[0].id
        return None

    def get_step(self, step_id: str) -> Optional[Step]:
        return self._index.get(step_id)

    async def execute(
        self,
        step_id: str,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        """Execute one step and return the id of the next one (None = end).

        Raises:
            StepNotFoundError: If ``step_id`` is not in this flow.
        """
        step = self._index.get(step_id)
        if step is None:
            raise StepNotFoundError(step_id, self._id)
        return await step.execute(context, cancellation=cancellation)

    def __len__(self) -> int:
        return len(self._steps)

    def __repr__(self) -> str:
        return f"Flow(id={self._id!r}, steps={list(self.step_ids)!r})"
