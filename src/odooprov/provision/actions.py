"""Actions a step can perform against the host.

Actions are frozen data until :meth:`execute` is called by the runner, so a
step catalog can be planned, printed and compared without side effects.
"""
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from ..executor import CommandExecutor
from ..files import chown, write_text_atomic


@dataclass(slots=True, frozen=True)
class ActionContext:
    """Capabilities handed to an action when it runs."""

    executor: CommandExecutor
    timeout: float | None = None


class Action(Protocol):
    """Anything the runner can execute for a step."""

    def describe(self) -> str:
        """Return a one-line human readable description."""
        ...

    def execute(self, context: ActionContext) -> str:
        """Perform the action and return captured output."""
        ...


@dataclass(slots=True, frozen=True)
class CommandAction:
    """Run a single external command."""

    argv: tuple[str, ...]
    user: str | None = None
    input: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)

    def describe(self) -> str:
        """Return the command line, noting the account it runs as."""
        command = " ".join(self.argv)
        if self.user:
            return f"[{self.user}] {command}"
        return command

    def execute(self, context: ActionContext) -> str:
        """Run the command; non-zero exits raise ``CommandFailedError``."""
        result = context.executor.run(
            self.argv,
            timeout=context.timeout,
            user=self.user,
            input=self.input,
            env=self.env or None,
        )
        return result.stdout


@dataclass(slots=True, frozen=True)
class WriteFileAction:
    """Write rendered content to a file with the given mode and ownership."""

    path: Path
    content: str
    mode: int = 0o644
    owner: str | None = None
    group: str | None = None

    def describe(self) -> str:
        """Describe the write target and mode."""
        return f"write {self.path} (mode {self.mode:04o})"

    def execute(self, context: ActionContext) -> str:
        """Write the file atomically and apply ownership."""
        changed = write_text_atomic(self.path, self.content, mode=self.mode)
        chown(self.path, self.owner, self.group)
        return f"{self.path} {'written' if changed else 'unchanged'}"


@dataclass(slots=True, frozen=True)
class EnsureDirectoryAction:
    """Create a directory (and parents) with the given mode and ownership."""

    path: Path
    mode: int = 0o755
    owner: str | None = None
    group: str | None = None

    def describe(self) -> str:
        """Describe the directory to create."""
        return f"mkdir -p {self.path} (mode {self.mode:04o})"

    def execute(self, context: ActionContext) -> str:
        """Create the directory and apply mode and ownership."""
        self.path.mkdir(parents=True, exist_ok=True)
        self.path.chmod(self.mode)
        chown(self.path, self.owner, self.group)
        return f"{self.path} ready"


@dataclass(slots=True, frozen=True)
class RemovePathAction:
    """Remove a file or symlink."""

    path: Path

    def describe(self) -> str:
        """Describe the path to remove."""
        return f"rm -f {self.path}"

    def execute(self, context: ActionContext) -> str:
        """Remove the path if it exists."""
        if self.path.is_symlink() or self.path.exists():
            self.path.unlink()
            return f"{self.path} removed"
        return f"{self.path} already absent"


@dataclass(slots=True, frozen=True)
class SequenceAction:
    """Run several actions in order; the first failure stops the sequence."""

    actions: tuple[Action, ...]

    def describe(self) -> str:
        """Join the descriptions of all contained actions."""
        return " && ".join(action.describe() for action in self.actions)

    def execute(self, context: ActionContext) -> str:
        """Execute each action and concatenate their output."""
        outputs: list[str] = []
        for action in self.actions:
            output = action.execute(context)
            if output:
                outputs.append(output.rstrip())
        return "\n".join(outputs)


@dataclass(slots=True, frozen=True)
class CallAction:
    """Delegate to a provider method that needs more than a single command."""

    func: Callable[[ActionContext], str | None]
    description: str

    def describe(self) -> str:
        """Return the configured description."""
        return self.description

    def execute(self, context: ActionContext) -> str:
        """Invoke the callable."""
        return self.func(context) or ""


def command(*argv: str, user: str | None = None, env: Mapping[str, str] | None = None) -> CommandAction:
    """Shorthand for building a :class:`CommandAction`."""
    return CommandAction(argv=tuple(argv), user=user, env=dict(env or {}))


def sequence(*actions: Action | Sequence[Action]) -> SequenceAction:
    """Flatten *actions* into a :class:`SequenceAction`."""
    flat: list[Action] = []
    for item in actions:
        if isinstance(item, (list, tuple)):
            flat.extend(item)
        else:
            flat.append(item)  # type: ignore[arg-type]
    return SequenceAction(actions=tuple(flat))


__all__ = [
    "Action",
    "ActionContext",
    "CallAction",
    "CommandAction",
    "EnsureDirectoryAction",
    "RemovePathAction",
    "SequenceAction",
    "WriteFileAction",
    "command",
    "sequence",
]
