"""Hand-written suites: a name and an ordered list of phases."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from trapcheck.harness import Harness

PhaseBody = Callable[["Harness"], None]


@dataclass
class Phase:
    name: str
    body: PhaseBody


@dataclass
class Suite:
    """A fixed sequence of phases run in declaration order.

    Phases are registered with the ``phase`` decorator::

        suite = Suite("libstack")

        @suite.phase
        def push_pop(h):
            engine = h.state("engine = initialize()", initialize)
            h.must("engine", lambda: engine)
    """

    name: str
    phases: list[Phase] = field(default_factory=list)

    def phase(
        self, body: PhaseBody | None = None, *, name: str | None = None
    ) -> PhaseBody | Callable[[PhaseBody], PhaseBody]:
        def register(fn: PhaseBody) -> PhaseBody:
            self.phases.append(Phase(name=name or fn.__name__, body=fn))
            return fn

        if body is not None:
            return register(body)
        return register


def load_suite(target: str) -> Suite:
    """Import a suite from a 'package.module:attribute' reference."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise ValueError(f"suite '{target}' must have the form 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"cannot import suite module '{module_name}': {e}") from e

    suite = getattr(module, attr, None)
    if suite is None:
        raise ValueError(f"module '{module_name}' has no attribute '{attr}'")
    if not isinstance(suite, Suite):
        raise ValueError(f"'{target}' is not a Suite")
    return suite
