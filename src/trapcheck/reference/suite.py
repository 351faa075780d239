"""Suite exercising the public interface of the reference stack engine."""

from __future__ import annotations

from trapcheck.harness import Harness
from trapcheck.reference import engine as stack
from trapcheck.suite import Suite

suite = Suite("libstack")

CORE_FILE = "unit.core"


@suite.phase(name="push/pop interface")
def push_pop_interface(h: Harness) -> None:
    h.note("reference/engine.py")
    f = h.state("f = initialize()", stack.initialize)
    h.must("f", lambda: f)
    core = h.state(
        f"core = open('{CORE_FILE}', 'w')",
        lambda: open(h.artifact(CORE_FILE), "w"),
    )
    h.must("core", lambda: core)

    h.test("0 == f.stack_position()", lambda: 0 == f.stack_position())
    h.test('f.eval("here") >= 0', lambda: f.eval("here") >= 0)
    here = h.state("here = f.pop()", f.pop)
    h.state("f.push(here)", lambda: f.push(here))
    h.test('f.eval("2 2 +") >= 0', lambda: f.eval("2 2 +") >= 0)
    h.test("f.pop() == 4", lambda: f.pop() == 4)

    # define a word, call that word, pop result
    h.test('not f.find("unit-01")', lambda: not f.find("unit-01"))
    h.test(
        'f.eval(": unit-01 69 ; unit-01") >= 0',
        lambda: f.eval(": unit-01 69 ; unit-01") >= 0,
    )
    h.test('f.find("unit-01")', lambda: f.find("unit-01"))
    h.test('not f.find("unit-01 ")', lambda: not f.find("unit-01 "))
    h.test("f.pop() == 69", lambda: f.pop() == 69)
    h.test("1 == f.stack_position()", lambda: 1 == f.stack_position())

    h.test(
        'f.define_constant("constant-1", 0xAA0A) >= 0',
        lambda: f.define_constant("constant-1", 0xAA0A) >= 0,
    )
    h.test(
        'f.define_constant("constant-2", 0x5055) >= 0',
        lambda: f.define_constant("constant-2", 0x5055) >= 0,
    )
    h.test(
        'f.eval("constant-1 constant-2 or") >= 0',
        lambda: f.eval("constant-1 constant-2 or") >= 0,
    )
    h.test("f.pop() == 0xFA5F", lambda: f.pop() == 0xFA5F)

    # saved for the persistence phase
    h.test("f.save_image(core) >= 0", lambda: f.save_image(core) >= 0)
    h.state("core.close()", core.close)

    h.state("f.push(99)", lambda: f.push(99))
    h.state("f.push(98)", lambda: f.push(98))
    h.test('f.eval("+") >= 0', lambda: f.eval("+") >= 0)
    h.test("f.pop() == 197", lambda: f.pop() == 197)
    h.test("1 == f.stack_position()", lambda: 1 == f.stack_position())
    h.test("here == f.pop()", lambda: here == f.pop())
    h.state("f.release()", f.release)


@suite.phase(name="core image persistence")
def core_image_persistence(h: Harness) -> None:
    core = h.state(f"core = open('{CORE_FILE}')", lambda: open(h.artifact(CORE_FILE)))
    h.must("core", lambda: core)

    f = h.state("f = load_image(core)", lambda: stack.load_image(core))
    h.must("f", lambda: f)
    # the stack does not persist across loads
    h.test("0 == f.stack_position()", lambda: 0 == f.stack_position())
    h.test('f.find("unit-01")', lambda: f.find("unit-01"))
    h.test(
        'f.eval("unit-01 constant-1 *") >= 0',
        lambda: f.eval("unit-01 constant-1 *") >= 0,
    )
    h.test("f.pop() == 69 * 0xAA0A", lambda: f.pop() == 69 * 0xAA0A)
    h.test("0 == f.stack_position()", lambda: 0 == f.stack_position())

    h.state("f.release()", f.release)
    h.state("core.close()", core.close)
    if not h.keep_artifacts:
        h.state(f"remove('{CORE_FILE}')", h.artifact(CORE_FILE).unlink)


@suite.phase(name="built-in words")
def builtin_words(h: Harness) -> None:
    f = h.state("f = initialize()", stack.initialize)
    h.must("f", lambda: f)

    # if...else...then with hex literals
    h.test(
        'f.eval(": if-test if 0x55 else 0xAA then ;") >= 0',
        lambda: f.eval(": if-test if 0x55 else 0xAA then ;") >= 0,
    )
    h.test('f.eval("0 if-test") >= 0', lambda: f.eval("0 if-test") >= 0)
    h.test("f.pop() == 0xAA", lambda: f.pop() == 0xAA)
    h.state("f.push(1)", lambda: f.push(1))
    h.test('f.eval("if-test") >= 0', lambda: f.eval("if-test") >= 0)
    h.test("f.pop() == 0x55", lambda: f.pop() == 0x55)

    # simple loops
    h.test(
        'f.eval(": loop-test begin 1 + dup 10 u> until ;") >= 0',
        lambda: f.eval(": loop-test begin 1 + dup 10 u> until ;") >= 0,
    )
    h.test('f.eval("1 loop-test") >= 0', lambda: f.eval("1 loop-test") >= 0)
    h.test("f.pop() == 11", lambda: f.pop() == 11)
    h.test('f.eval("39 loop-test") >= 0', lambda: f.eval("39 loop-test") >= 0)
    h.test("f.pop() == 40", lambda: f.pop() == 40)

    # rot and comments
    h.test(
        'f.eval("1 2 3 rot ( 1 2 3 -- 2 3 1 )") >= 0',
        lambda: f.eval("1 2 3 rot ( 1 2 3 -- 2 3 1 )") >= 0,
    )
    h.test("f.pop() == 1", lambda: f.pop() == 1)
    h.test("f.pop() == 3", lambda: f.pop() == 3)
    h.test("f.pop() == 2", lambda: f.pop() == 2)

    h.test('f.eval("1 2 3 -rot") >= 0', lambda: f.eval("1 2 3 -rot") >= 0)
    h.test("f.pop() == 2", lambda: f.pop() == 2)
    h.test("f.pop() == 1", lambda: f.pop() == 1)
    h.test("f.pop() == 3", lambda: f.pop() == 3)

    h.test('f.eval("3 4 5 nip") >= 0', lambda: f.eval("3 4 5 nip") >= 0)
    h.test("f.pop() == 5", lambda: f.pop() == 5)
    h.test("f.pop() == 3", lambda: f.pop() == 3)

    h.test(
        'f.eval("here 32 allot here swap -") >= 0',
        lambda: f.eval("here 32 allot here swap -") >= 0,
    )
    h.test("f.pop() == 32", lambda: f.pop() == 32)

    h.test('f.eval("67 23 tuck") >= 0', lambda: f.eval("67 23 tuck") >= 0)
    h.test("f.pop() == 23", lambda: f.pop() == 23)
    h.test("f.pop() == 67", lambda: f.pop() == 67)
    h.test("f.pop() == 23", lambda: f.pop() == 23)

    # hex and octal literals
    h.test('f.eval("0x10 010 +") >= 0', lambda: f.eval("0x10 010 +") >= 0)
    h.test("f.pop() == 24", lambda: f.pop() == 24)

    h.state("f.release()", f.release)
