"""Interface of the component a suite exercises.

Suites obtain engines from a module-level ``initialize(config)`` factory or
from ``load_image(source)`` and call the methods below; the harness itself
never does. What the harness relies on is that any of them may, on an
internal inconsistency, raise an abort-class signal instead of returning an
error value.
"""

from __future__ import annotations

from typing import IO, Protocol, runtime_checkable


@runtime_checkable
class Engine(Protocol):
    def eval(self, source: str) -> int: ...

    def push(self, value: int) -> None: ...

    def pop(self) -> int: ...

    def find(self, name: str) -> bool: ...

    def stack_position(self) -> int: ...

    def define_constant(self, name: str, value: int) -> int: ...

    def save_image(self, sink: IO[str]) -> int: ...

    def release(self) -> None: ...

