"""A small stack engine used as the reference component under test.

Words are whitespace separated. Numbers are pushed (``0x`` hex, leading-zero
octal, decimal); ``: name ... ;`` defines a word; ``( ... )`` is a comment.
Inside a definition ``if ... else ... then`` and ``begin ... until`` control
the flow; both take a flag from the stack where zero means false.
Internal consistency checks (stack underflow, division by zero, use after
release, corrupt image) raise SIGABRT the way a C ``assert`` would.
"""

from __future__ import annotations

import json
import os
import signal
from typing import IO, Any, Callable, Iterator

MINIMUM_CORE_SIZE = 2048
IMAGE_MAGIC = "trapcheck-stack-image"
IMAGE_VERSION = 1

# Dictionary space used by the built-in words
_INITIAL_HERE = 64
_CELL_MASK = (1 << 64) - 1

# Only valid inside a definition
_CONTROL_WORDS = frozenset({"if", "else", "then", "begin", "until"})


def _abort_unless(condition: bool) -> None:
    if condition:
        return
    signal.raise_signal(signal.SIGABRT)
    # A handler that returns (or SIG_IGN) must not let the engine carry on
    os.abort()


def _parse_number(token: str) -> int | None:
    text = token[1:] if token.startswith("-") else token
    try:
        if text.lower().startswith("0x"):
            value = int(text[2:], 16)
        elif len(text) > 1 and text.startswith("0"):
            value = int(text[1:], 8)
        else:
            value = int(text, 10)
    except ValueError:
        return None
    return -value if token.startswith("-") else value


def _tokens(source: str) -> Iterator[str]:
    words = iter(source.split())
    for word in words:
        if word == "(":
            for closing in words:
                if closing == ")":
                    break
        else:
            yield word


def _balanced(body: list[str]) -> bool:
    open_blocks: list[str] = []
    for word in body:
        if word in ("if", "begin"):
            open_blocks.append(word)
        elif word == "else":
            if not open_blocks or open_blocks[-1] != "if":
                return False
            open_blocks[-1] = "else"
        elif word == "then":
            if not open_blocks or open_blocks[-1] not in ("if", "else"):
                return False
            open_blocks.pop()
        elif word == "until":
            if not open_blocks or open_blocks[-1] != "begin":
                return False
            open_blocks.pop()
    return not open_blocks


def _forward(body: list[str], pc: int, stops: tuple[str, ...]) -> int:
    """Index of the else/then closing the if block that contains pc."""
    depth = 0
    for index in range(pc + 1, len(body)):
        word = body[index]
        if word == "if":
            depth += 1
        elif depth == 0 and word in stops:
            return index
        elif word == "then":
            depth -= 1
    return len(body)


def _backward(body: list[str], pc: int) -> int:
    """Index of the begin matching the until at pc."""
    depth = 0
    for index in range(pc - 1, -1, -1):
        word = body[index]
        if word == "until":
            depth += 1
        elif word == "begin":
            if depth == 0:
                return index
            depth -= 1
    return 0


class StackEngine:
    def __init__(self, core_size: int = MINIMUM_CORE_SIZE) -> None:
        self.core_size = core_size
        self.stack: list[int] = []
        self.words: dict[str, list[str]] = {}
        self.constants: dict[str, int] = {}
        self.here = _INITIAL_HERE
        self.released = False
        self._builtins: dict[str, Callable[[], None]] = {
            "+": lambda: self._binary(lambda a, b: a + b),
            "-": lambda: self._binary(lambda a, b: a - b),
            "*": lambda: self._binary(lambda a, b: a * b),
            "/": self._divide,
            "and": lambda: self._binary(lambda a, b: a & b),
            "or": lambda: self._binary(lambda a, b: a | b),
            "xor": lambda: self._binary(lambda a, b: a ^ b),
            "=": lambda: self._binary(lambda a, b: -1 if a == b else 0),
            "<": lambda: self._binary(lambda a, b: -1 if a < b else 0),
            ">": lambda: self._binary(lambda a, b: -1 if a > b else 0),
            "u>": lambda: self._binary(
                lambda a, b: -1 if a & _CELL_MASK > b & _CELL_MASK else 0
            ),
            "dup": self._dup,
            "drop": self.pop,
            "swap": lambda: self._shuffle(2, (1, 0)),
            "over": lambda: self._shuffle(2, (0, 1, 0)),
            "rot": lambda: self._shuffle(3, (1, 2, 0)),
            "-rot": lambda: self._shuffle(3, (2, 0, 1)),
            "nip": lambda: self._shuffle(2, (1,)),
            "tuck": lambda: self._shuffle(2, (1, 0, 1)),
            "depth": lambda: self.push(len(self.stack)),
            "here": lambda: self.push(self.here),
            "allot": self._allot,
        }

    # stack primitives

    def push(self, value: int) -> None:
        _abort_unless(not self.released)
        _abort_unless(len(self.stack) < self.core_size)
        self.stack.append(int(value))

    def pop(self) -> int:
        _abort_unless(not self.released)
        _abort_unless(len(self.stack) > 0)
        return self.stack.pop()

    def stack_position(self) -> int:
        return len(self.stack)

    def _binary(self, op: Callable[[int, int], int]) -> None:
        b = self.pop()
        a = self.pop()
        self.push(op(a, b))

    def _divide(self) -> None:
        b = self.pop()
        a = self.pop()
        _abort_unless(b != 0)
        self.push(a // b)

    def _dup(self) -> None:
        value = self.pop()
        self.push(value)
        self.push(value)

    def _shuffle(self, count: int, order: tuple[int, ...]) -> None:
        # order indexes the popped items, deepest first
        items = [self.pop() for _ in range(count)][::-1]
        for index in order:
            self.push(items[index])

    def _allot(self) -> None:
        cells = self.pop()
        _abort_unless(0 <= self.here + cells <= self.core_size)
        self.here += cells

    # dictionary

    def find(self, name: str) -> bool:
        return name in self.words or name in self.constants or name in self._builtins

    def define_constant(self, name: str, value: int) -> int:
        _abort_unless(not self.released)
        if not name or any(c.isspace() for c in name):
            return -1
        self.constants[name] = int(value)
        return 0

    # interpreter

    def eval(self, source: str) -> int:
        """Interpret source; returns 0 on success and -1 on an unknown word.

        A definition that is unterminated or has unbalanced control words is
        rejected with -1, as is a control word used outside a definition.
        """
        _abort_unless(not self.released)
        tokens = _tokens(source)
        for token in tokens:
            if token == ":":
                name = next(tokens, None)
                if name is None:
                    return -1
                body: list[str] = []
                for word in tokens:
                    if word == ";":
                        break
                    body.append(word)
                else:
                    return -1
                if not _balanced(body):
                    return -1
                self.words[name] = body
                self.here += len(body) + 1
            elif token in _CONTROL_WORDS or self._execute(token) < 0:
                return -1
        return 0

    def _run(self, body: list[str]) -> int:
        pc = 0
        while pc < len(body):
            word = body[pc]
            if word == "if":
                if self.pop() == 0:
                    pc = _forward(body, pc, ("else", "then"))
            elif word == "else":
                pc = _forward(body, pc, ("then",))
            elif word == "until":
                if self.pop() == 0:
                    pc = _backward(body, pc)
            elif word not in ("then", "begin") and self._execute(word) < 0:
                return -1
            pc += 1
        return 0

    def _execute(self, token: str) -> int:
        if token in self.words:
            return self._run(self.words[token])
        if token in self.constants:
            self.push(self.constants[token])
            return 0
        if token in self._builtins:
            self._builtins[token]()
            return 0
        number = _parse_number(token)
        if number is None:
            return -1
        self.push(number)
        return 0

    # images

    def save_image(self, sink: IO[str]) -> int:
        _abort_unless(not self.released)
        image: dict[str, Any] = {
            "magic": IMAGE_MAGIC,
            "version": IMAGE_VERSION,
            "core_size": self.core_size,
            "here": self.here,
            "words": self.words,
            "constants": self.constants,
        }
        try:
            json.dump(image, sink)
            sink.flush()
        except OSError:
            return -1
        return 0

    def release(self) -> None:
        _abort_unless(not self.released)
        self.released = True
        self.stack.clear()


def initialize(config: dict[str, Any] | None = None) -> StackEngine | None:
    """Create an engine; None when the requested core is too small."""
    core_size = (config or {}).get("core_size", MINIMUM_CORE_SIZE)
    if core_size < MINIMUM_CORE_SIZE:
        return None
    return StackEngine(core_size=core_size)


def load_image(source: IO[str]) -> StackEngine | None:
    """Restore an engine saved with save_image. The stack is not persisted."""
    try:
        image = json.load(source)
    except (OSError, ValueError):
        return None
    _abort_unless(isinstance(image, dict) and image.get("magic") == IMAGE_MAGIC)
    _abort_unless(image.get("version") == IMAGE_VERSION)

    engine = StackEngine(core_size=image["core_size"])
    engine.here = image["here"]
    engine.words = {k: list(v) for k, v in image["words"].items()}
    engine.constants = {k: int(v) for k, v in image["constants"].items()}
    return engine
