"""
base.py - Abstract base class for flow steps.

Every step exposes an id, a routing table (outcome label -> next step id)
and an async ``execute(context)`` that returns the next step id, or None
when the flow ends at this branch.

Steps without branching logic of their own resolve their successor with
``resolve_next_step``:
1. If the context holds a value at NEXT_STEP_KEY and the routing table has
   that label, follow it.
2. Else follow the DEFAULT_ROUTE label if present.
3. Else terminal (None).
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Mapping, Optional

from stepflow.logging_utils import get_step_logger
from stepflow.runtime.context import Context

# Context key an upstream step sets to select a downstream routing label
NEXT_STEP_KEY = "nextStep"

# Routing label followed when no selector matches
DEFAULT_ROUTE = "default"


def resolve_next_step(routes: Mapping[str, str], context: Context) -> Optional[str]:
    """Shared routing: selector label, then "default", then terminal."""
    selector = context.get(NEXT_STEP_KEY)
    if selector is not None and str(selector) in routes:
        return routes[str(selector)]
    return routes.get(DEFAULT_ROUTE)


class Step(ABC):
    """One unit of work in a flow.

    Steps are immutable once constructed and hold no per-execution state,
    so a Flow (and its steps) can be shared by concurrent Sessions.
    """

    def __init__(
        self,
        step_id: str,
        next_step_id: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._id = step_id
        self._routes: Mapping[str, str] = MappingProxyType(dict(next_step_id or {}))
        self.logger = logger or get_step_logger()

    @property
    def id(self) -> str:
        return self._id

    @property
    def routes(self) -> Mapping[str, str]:
        """Read-only routing table (outcome label -> next step id)."""
        return self._routes

    @property
    def is_terminal(self) -> bool:
        """True when the routing table is empty."""
        return not self._routes

    def resolve_next_step(self, context: Context) -> Optional[str]:
        return resolve_next_step(self._routes, context)

    @abstractmethod
    async def execute(
        self,
        context: Context,
        cancellation: Optional[asyncio.Event] = None,
    ) -> Optional[str]:
        """Run the step against ``context``.

        Args:
            context: The session's execution context (mutated in place).
            cancellation: Optional event set by the caller to cancel a
                long-running external call. Only steps that perform a
                cancellable call observe it.

        Returns:
            The next step id, or None if the flow ends here.

        Raises:
            ExecutionError: A runtime precondition failed.
            CollaboratorError: An external call failed.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, routes={dict(self._routes)!r})"
