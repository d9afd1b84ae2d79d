"""The interactive prompt, with completion of slash commands."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.filters import has_completions
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.key_processor import KeyPressEvent
from prompt_toolkit.output import Output
from prompt_toolkit.styles import Style as PromptStyle

from mcphost.commands import SLASH_COMMANDS, SlashCommand
from mcphost.fuzzy import fuzzy_match_commands

POPUP_HEIGHT = 7
CHAR_LIMIT = 5000
_NAME_WIDTH = 15
_DESCRIPTION_RESERVE = 14

_PROMPT_STYLE = PromptStyle.from_dict(
    {
        "title": "#d0d0d0",
        "border": "#00afff",
        "placeholder": "#585858",
        "bottom-toolbar": "noreverse #585858",
        "completion-menu": "bg:default",
        "completion-menu.completion": "bold #00afff",
        "completion-menu.completion.current": "bold #5fffff",
        "completion-menu.meta.completion": "#767676",
        "completion-menu.meta.completion.current": "#bcbcbc",
    }
)


def help_text(value: str) -> str:
    """The key hint shown under the input for the current text."""
    if "\n" in value:
        return "ctrl+d submit • enter new line"
    return "enter submit • ctrl+j / alt+enter new line"


def popup_window(selected: int, total: int, popup_height: int = POPUP_HEIGHT) -> tuple[int, int]:
    """The slice ``(start, end)`` of matches shown so that ``selected`` stays visible."""
    visible = min(total, popup_height)
    start = selected - popup_height + 1 if selected >= popup_height else 0
    end = min(start + visible, total)
    return start, end


class SlashCommandCompleter(Completer):
    """Offers fuzzy-matched slash commands while a lone command is being typed."""

    def __init__(self, commands: Sequence[SlashCommand] | None = None, width: int = 80) -> None:
        self.commands = tuple(SLASH_COMMANDS if commands is None else commands)
        self.width = width

    def _describe(self, description: str) -> str:
        limit = self.width - _NAME_WIDTH - _DESCRIPTION_RESERVE
        if len(description) > limit > 3:
            return description[: limit - 3] + "..."
        return description

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        """Yield matching commands, best first, when the text is a single "/word"."""
        text = document.text
        lines = text.split("\n")
        if len(lines) != 1 or not text.startswith("/") or " " in text:
            return
        for match in fuzzy_match_commands(text, self.commands):
            command = match.command
            yield Completion(
                text=command.name,
                start_position=-len(text),
                display=command.name.ljust(_NAME_WIDTH - 2),
                display_meta=self._describe(command.description),
            )


def _selected_completion(buffer: Buffer) -> Completion | None:
    state = buffer.complete_state
    if state is None or not state.completions:
        return None
    return state.current_completion or state.completions[0]


def _replace_text(buffer: Buffer, text: str) -> None:
    buffer.complete_state = None
    buffer.document = Document(text, len(text))


class SlashCommandInput:
    """A multi-line prompt that completes slash commands as they are typed.

    Enter submits single-line text; once the text spans lines, Enter adds a
    line and Ctrl+D submits. Ctrl+C, Esc, or submitting nothing cancels.
    """

    def __init__(
        self,
        width: int,
        title: str,
        commands: Sequence[SlashCommand] | None = None,
        *,
        char_limit: int = CHAR_LIMIT,
        input: Input | None = None,
        output: Output | None = None,
    ) -> None:
        self.width = width
        self.title = title
        self.char_limit = char_limit
        self.completer = SlashCommandCompleter(commands, width)
        self._input = input
        self._output = output

    def _key_bindings(self) -> KeyBindings:
        bindings = KeyBindings()

        def submit(event: KeyPressEvent) -> None:
            event.app.exit(result=event.current_buffer.text)

        @bindings.add("c-c")
        def _cancel(event: KeyPressEvent) -> None:
            event.app.exit(result="")

        @bindings.add("escape", filter=has_completions)
        def _dismiss(event: KeyPressEvent) -> None:
            event.current_buffer.cancel_completion()

        @bindings.add("escape", filter=~has_completions)
        def _escape(event: KeyPressEvent) -> None:
            event.app.exit(result="")

        @bindings.add("c-d")
        def _submit(event: KeyPressEvent) -> None:
            submit(event)

        @bindings.add("c-j")
        @bindings.add("escape", "enter")
        def _newline(event: KeyPressEvent) -> None:
            event.current_buffer.insert_text("\n")

        @bindings.add("tab", filter=has_completions)
        def _complete(event: KeyPressEvent) -> None:
            completion = _selected_completion(event.current_buffer)
            if completion is not None:
                _replace_text(event.current_buffer, completion.text)

        @bindings.add("enter")
        def _enter(event: KeyPressEvent) -> None:
            buffer = event.current_buffer
            completion = _selected_completion(buffer)
            if completion is not None:
                _replace_text(buffer, completion.text)
                submit(event)
            elif "\n" in buffer.text:
                buffer.insert_text("\n")
            else:
                submit(event)

        return bindings

    def _enforce_limit(self, buffer: Buffer) -> None:
        if len(buffer.text) > self.char_limit:
            cursor = min(buffer.cursor_position, self.char_limit)
            buffer.document = Document(buffer.text[: self.char_limit], cursor)

    def run(self) -> str:
        """Read one prompt and return its text; raise EOFError if cancelled."""
        session: PromptSession[str] = PromptSession(
            message=[("class:title", f"  {self.title}\n\n"), ("class:border", "  ┃ ")],
            prompt_continuation=[("class:border", "  ┃ ")],
            multiline=True,
            completer=self.completer,
            complete_while_typing=True,
            reserve_space_for_menu=POPUP_HEIGHT,
            key_bindings=self._key_bindings(),
            bottom_toolbar=lambda: "  " + help_text(session.default_buffer.text),
            placeholder=[("class:placeholder", "Type your message...")],
            style=_PROMPT_STYLE,
            erase_when_done=True,
            input=self._input,
            output=self._output,
        )
        session.default_buffer.on_text_changed += self._enforce_limit
        value = session.prompt()
        if not value:
            raise EOFError("prompt cancelled")
        return value