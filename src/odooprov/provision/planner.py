"""Order steps so every step runs after its prerequisites."""
from __future__ import annotations

import heapq
from collections.abc import Mapping, Sequence

from .errors import CycleError, DuplicateStepError, UnknownPrerequisiteError
from .models import Step


def plan_steps(steps: Sequence[Step]) -> list[Step]:
    """Return *steps* in a total order that satisfies every prerequisite.

    When several steps are ready at once the one declared first wins, so the
    same declarations always yield the same order. The whole graph is
    validated before anything is returned; nothing executes on failure.
    """
    index: dict[str, int] = {}
    for position, step in enumerate(steps):
        if step.name in index:
            raise DuplicateStepError(step.name)
        index[step.name] = position

    dependents: dict[str, list[str]] = {step.name: [] for step in steps}
    remaining: dict[str, int] = {}
    for step in steps:
        unique_requires = dict.fromkeys(step.requires)
        for prerequisite in unique_requires:
            if prerequisite not in index:
                raise UnknownPrerequisiteError(step.name, prerequisite)
            dependents[prerequisite].append(step.name)
        remaining[step.name] = len(unique_requires)

    ready = [index[name] for name, count in remaining.items() if count == 0]
    heapq.heapify(ready)

    ordered: list[Step] = []
    while ready:
        step = steps[heapq.heappop(ready)]
        ordered.append(step)
        for dependent in dependents[step.name]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, index[dependent])

    if len(ordered) != len(steps):
        blocked = {name for name, count in remaining.items() if count > 0}
        requires = {step.name: step.requires for step in steps}
        raise CycleError(_find_cycle(blocked, requires, index))
    return ordered


def _find_cycle(
    blocked: set[str],
    requires: Mapping[str, Sequence[str]],
    index: Mapping[str, int],
) -> list[str]:
    # Every blocked step has at least one blocked prerequisite, so walking
    # prerequisites from any blocked step must revisit a node.
    start = min(blocked, key=index.__getitem__)
    path: list[str] = []
    seen: dict[str, int] = {}
    current = start
    while current not in seen:
        seen[current] = len(path)
        path.append(current)
        current = next(name for name in requires[current] if name in blocked)
    cycle = path[seen[current]:]
    cycle.append(current)
    return cycle


__all__ = ["plan_steps"]
