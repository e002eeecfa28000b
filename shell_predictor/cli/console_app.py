"""Interactive prompt rendering predictor suggestions inline, using prompt_toolkit."""

import signal
import threading
from collections.abc import Iterable

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion, ThreadedAutoSuggest
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent, Completer, Completion, ThreadedCompleter
from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..host import ClientInfo, PredictorHost

CLIENT = ClientInfo(name="shell-predictor.cli")


class RequestCanceller:
    """Hands out one cancellation event per request and cancels the one before it."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: threading.Event | None = None

    def next(self) -> threading.Event:
        event = threading.Event()
        with self._lock:
            if self._current is not None:
                self._current.set()
            self._current = event
        return event

    def cancel(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.set()


class PredictorAutoSuggest(AutoSuggest):
    """Shows the primary suggestion as greyed-out text after the cursor."""

    def __init__(self, host: PredictorHost, canceller: RequestCanceller | None = None):
        self.host = host
        self.canceller = canceller or RequestCanceller()

    def get_suggestion(self, buffer: Buffer, document: Document) -> Suggestion | None:
        text = document.text
        if not text.strip():
            self.canceller.cancel()
            return None

        for candidate in self.host.get_suggestion(CLIENT, text, self.canceller.next()):
            # Only a suggestion that extends the typed text can be rendered inline
            if len(candidate.text) > len(text) and candidate.text.lower().startswith(text.lower()):
                return Suggestion(candidate.text[len(text):])
        return None


class PredictorCompleter(Completer):
    """Lists every suggestion in the completion menu, tooltips as meta text."""

    def __init__(self, host: PredictorHost, canceller: RequestCanceller | None = None):
        self.host = host
        self.canceller = canceller or RequestCanceller()

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        text = document.text_before_cursor
        for candidate in self.host.get_suggestion(CLIENT, text, self.canceller.next()):
            yield Completion(
                candidate.text,
                start_position=-len(text),
                display=candidate.text,
                display_meta=candidate.tooltip or "",
            )


def threaded_predictions(
    host: PredictorHost, canceller: RequestCanceller
) -> tuple[ThreadedAutoSuggest, ThreadedCompleter]:
    """Wrap the predictor hooks so generation runs off the prompt's event loop."""
    return (
        ThreadedAutoSuggest(PredictorAutoSuggest(host, canceller)),
        ThreadedCompleter(PredictorCompleter(host, canceller)),
    )


class ConsoleApp:
    """Prompt loop that renders suggestions while the user types."""

    def __init__(self, host: PredictorHost):
        self.host = host
        self.console = Console()
        self.running = True

        self.prompt_style = Style.from_dict({
            "prompt": "ansicyan bold",
            "auto-suggestion": "fg:#777777",
            "completion-menu": "bg:default",
            "completion-menu.completion": "bg:default fg:#bbbbbb",
            "completion-menu.completion.current": "bg:#5fafff fg:#202020 bold",
            "completion-menu.meta.completion": "bg:#202020 fg:#bbbbbb",
        })

        self.canceller = RequestCanceller()
        auto_suggest, completer = threaded_predictions(host, self.canceller)
        self.prompt_session = PromptSession(
            auto_suggest=auto_suggest,
            completer=completer,
            style=self.prompt_style,
            complete_while_typing=False,
        )
        self.prompt_session.default_buffer.on_text_changed += lambda _: self.canceller.cancel()

        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum, frame):
        """Handle termination signals."""
        self.console.print("\n[yellow]Received termination signal. Shutting down...[/yellow]")
        self.running = False

    def _print_banner(self):
        strategy = self.host.active
        banner = Text()
        banner.append("shell-predictor", style="bold white")
        if strategy is not None:
            banner.append(f" - {strategy.name}: {strategy.description}", style="dim")
        self.console.print(Panel(banner, border_style="blue", padding=(1, 2)))

        help_text = Text()
        help_text.append("→", style="cyan")
        help_text.append(" accept the inline suggestion\n", style="white")
        help_text.append("Tab", style="cyan")
        help_text.append(" list all suggestions\n", style="white")
        help_text.append("exit", style="cyan")
        help_text.append(" / ", style="white")
        help_text.append("quit", style="cyan")
        help_text.append(" leave the prompt", style="white")
        self.console.print(Panel(help_text, title="Help", border_style="dim"))

    def run(self):
        """Run the prompt loop until the user exits."""
        self._print_banner()

        try:
            while self.running:
                try:
                    line = self.prompt_session.prompt(HTML("<prompt>› </prompt>")).strip()
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break

                if line in ("exit", "quit"):
                    break
                if line:
                    print_formatted_text(HTML("<ansigreen>accepted:</ansigreen> "), line, sep="")
        finally:
            self.host.on_unload()
            print_formatted_text(HTML("<ansigreen>Goodbye!</ansigreen>"))
