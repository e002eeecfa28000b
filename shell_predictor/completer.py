"""Word-level command completion used as the default external completion source."""

from collections.abc import Iterable, Mapping

from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

DEFAULT_COMMANDS: dict[str, dict[str, str]] = {
    "dotnet": {
        "build": "Build a project",
        "run": "Build and run a project",
        "restore": "Restore dependencies",
        "new": "Create a project from a template",
        "add": "Add a package or reference",
        "publish": "Publish a project for deployment",
        "pack": "Create a NuGet package",
    },
    "git": {
        "status": "Show the working tree status",
        "commit": "Record changes to the repository",
        "checkout": "Switch branches or restore files",
        "fetch": "Download objects and refs",
        "push": "Update remote refs",
        "pull": "Fetch and integrate",
        "merge": "Join development histories",
        "rebase": "Reapply commits on top of another base",
        "log": "Show commit logs",
        "branch": "List, create, or delete branches",
        "init": "Create an empty repository",
    },
    "winget": {
        "upgrade": "Upgrade installed packages",
        "install": "Install a package",
    },
    "scoop": {
        "update": "Update apps or Scoop itself",
        "status": "Show status and check for new app versions",
        "install": "Install apps",
        "alias": "Manage scoop aliases",
    },
}


class CommandCompleter(Completer):
    """Completes a command name, then one of its subcommands.

    Rules:
    - The first word completes against the known command names.
    - A word that exactly names a command with subcommands (or is followed by
      a space) completes against that command's subcommands.
    - Matching is case-insensitive.
    """

    def __init__(self, commands: Mapping[str, Mapping[str, str]] | None = None):
        self.commands = {name: dict(subs) for name, subs in (commands or DEFAULT_COMMANDS).items()}

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        text = document.text_before_cursor.lstrip()
        words = text.split()
        if not words:
            return

        ends_with_space = text[-1].isspace()
        command = words[0].lower()

        if len(words) == 1 and not ends_with_space and command not in self.commands:
            for name in self.commands:
                if name.startswith(command):
                    yield Completion(name, start_position=-len(words[0]), display_meta=f"{name} command")
            return

        subcommands = self.commands.get(command)
        if not subcommands:
            return

        if len(words) == 1:
            current = ""
        elif len(words) == 2 and not ends_with_space:
            current = words[1]
        else:
            return

        for name, description in subcommands.items():
            if name.startswith(current.lower()):
                yield Completion(name, start_position=-len(current), display_meta=description)

    def get_commands(self) -> list[str]:
        """Get the list of available top-level commands."""
        return list(self.commands)
