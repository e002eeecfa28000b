"""Prefix matching against a fixed catalog of well-known commands."""

import threading
import uuid
from collections.abc import Sequence

from .base import SuggestionStrategy
from .types import StrategyKind, SuggestionCandidate, SuggestionResult, UnavailableReason

KNOWN_COMMANDS: tuple[str, ...] = (
    "dotnet build",
    "dotnet build -c release",
    "dotnet run",
    "dotnet restore",
    "dotnet new console",
    "dotnet new sln",
    "dotnet add package",
    "dotnet publish -c release",
    "dotnet pack",
    "git commit",
    "git checkout",
    "git checkout master",
    "git status",
    "git fetch --prune --prune-tags",
    "git push",
    "git pull",
    "git merge",
    "git rebase",
    "git log",
    "git branch",
    "git branch -v",
    "git branch -vv",
    "git init",
    "winget upgrade",
    "winget install",
    "scoop update && scoop status",
    "scoop update",
    "scoop update *",
    "scoop status",
    "scoop install",
)


class KnownCommandsStrategy(SuggestionStrategy):
    """Suggests catalog entries that start with the typed text."""

    kind = StrategyKind.KNOWN_COMMANDS
    id = uuid.UUID("ec465941-a442-4ac1-afb5-0756f7e5ebf5")
    name = "Known Commands"
    description = "Suggests well-known commands from a fixed catalog."

    def __init__(self, commands: Sequence[str] = KNOWN_COMMANDS) -> None:
        self._commands = tuple(commands)

    @property
    def commands(self) -> tuple[str, ...]:
        return self._commands

    def suggest(self, text: str, cancellation: threading.Event | None = None) -> SuggestionResult:
        prefix = text.rstrip()
        if not prefix.strip():
            return SuggestionResult.unavailable(UnavailableReason.EMPTY_INPUT)

        folded = prefix.casefold()
        return SuggestionResult.of(
            [SuggestionCandidate(command) for command in self._commands if command.casefold().startswith(folded)]
        )
