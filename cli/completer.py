"""Custom completer for ShareDrive CLI with local path completion."""

from pathlib import Path
from typing import Iterable

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS


class ShareDriveCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for the 'upload' command
    """

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() != "upload":
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        already_typed = set(tokens[1:])
        if not is_typing_new_token:
            already_typed.discard(current_word)

        yield from self._complete_paths(current_word, already_typed)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str, exclude: set) -> Iterable[Completion]:
        """
        Complete files and directories under the directory typed so far.

        Directories are offered with a trailing slash so completion can continue.
        """
        if "/" in partial:
            directory, prefix = partial.rsplit("/", 1)
            base = Path(directory or "/")
            shown_dir = directory + "/"
        else:
            base, prefix, shown_dir = Path.cwd(), partial, ""

        if not base.is_dir():
            return

        for item in sorted(base.iterdir()):
            if item.name.startswith(".") or not item.name.startswith(prefix):
                continue
            candidate = shown_dir + item.name + ("/" if item.is_dir() else "")
            if candidate in exclude:
                continue
            yield Completion(candidate, start_position=-len(partial))
