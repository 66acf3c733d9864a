"""Tests for step ordering."""
from __future__ import annotations

import pytest

from odooprov.exit_codes import ExitCode
from odooprov.provision.actions import command
from odooprov.provision.errors import (
    CycleError,
    DuplicateStepError,
    PreconditionError,
    UnknownPrerequisiteError,
)
from odooprov.provision.models import Resource, ResourceKind, Step
from odooprov.provision.planner import plan_steps


def _step(name: str, *requires: str) -> Step:
    return Step(
        name=name,
        resource=Resource(ResourceKind.COMMAND, name),
        action=command("true"),
        requires=requires,
    )


def _names(steps: list[Step]) -> list[str]:
    return [step.name for step in steps]


def test_declaration_order_kept_without_prerequisites() -> None:
    """Independent steps keep their declaration order."""
    steps = [_step("a"), _step("b"), _step("c")]

    assert _names(plan_steps(steps)) == ["a", "b", "c"]


def test_prerequisites_run_first() -> None:
    """A step declared before its prerequisite is moved after it."""
    steps = [_step("site", "cert"), _step("nginx"), _step("cert", "nginx")]

    assert _names(plan_steps(steps)) == ["nginx", "cert", "site"]


def test_ties_broken_by_declaration_order() -> None:
    """Among ready steps the earliest declared runs first."""
    steps = [
        _step("base"),
        _step("late", "base"),
        _step("early"),
        _step("after-both", "late", "early"),
    ]

    assert _names(plan_steps(steps)) == ["base", "late", "early", "after-both"]


def test_duplicate_prerequisites_are_counted_once() -> None:
    """Repeating a prerequisite does not block the step."""
    steps = [_step("a"), _step("b", "a", "a")]

    assert _names(plan_steps(steps)) == ["a", "b"]


def test_ordering_is_stable_across_calls() -> None:
    """The same declarations always produce the same order."""
    steps = [_step("x"), _step("y", "x"), _step("z"), _step("w", "z", "x")]

    assert _names(plan_steps(steps)) == _names(plan_steps(list(steps)))


def test_cycle_is_reported_with_its_members() -> None:
    """A prerequisite cycle fails before anything runs and names the cycle."""
    steps = [_step("a", "b"), _step("b", "a"), _step("c")]

    with pytest.raises(CycleError) as excinfo:
        plan_steps(steps)

    assert excinfo.value.cycle == ("a", "b", "a")
    assert "a -> b -> a" in str(excinfo.value)


def test_longer_cycle_behind_a_free_step() -> None:
    """Steps depending on a cycle do not hide it."""
    steps = [
        _step("free"),
        _step("tail", "one"),
        _step("one", "two"),
        _step("two", "three"),
        _step("three", "one"),
    ]

    with pytest.raises(CycleError) as excinfo:
        plan_steps(steps)

    cycle = excinfo.value.cycle
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"one", "two", "three"}


def test_self_dependency_is_a_cycle() -> None:
    """A step requiring itself is a one-step cycle."""
    with pytest.raises(CycleError) as excinfo:
        plan_steps([_step("loop", "loop")])

    assert excinfo.value.cycle == ("loop", "loop")


def test_unknown_prerequisite_rejected() -> None:
    """Prerequisites must name declared steps."""
    with pytest.raises(UnknownPrerequisiteError) as excinfo:
        plan_steps([_step("a", "ghost")])

    assert excinfo.value.step == "a"
    assert excinfo.value.prerequisite == "ghost"


def test_duplicate_step_names_rejected() -> None:
    """Step names are unique."""
    with pytest.raises(DuplicateStepError):
        plan_steps([_step("a"), _step("a")])


def test_graph_errors_are_precondition_failures() -> None:
    """Graph errors share the precondition exit code."""
    with pytest.raises(PreconditionError) as excinfo:
        plan_steps([_step("a", "b"), _step("b", "a")])

    assert excinfo.value.exit_code == ExitCode.PRECONDITION
