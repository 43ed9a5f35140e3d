from __future__ import annotations

import logging
from dataclasses import dataclass

from app.assets.registry import CLEAR_COMMAND, DECODE_PREFIX, UNLOCK_COMMAND, CommandTable, normalize_command

logger = logging.getLogger(__name__)


WELCOME_BANNER: tuple[str, ...] = (
    "╔════════════════════════════════════════════════╗",
    "║         SECRET TERMINAL v1.0.0                 ║",
    "║   Someone left you encrypted messages...       ║",
    "╚════════════════════════════════════════════════╝",
    "",
    "Type 'help' to see available commands.",
    "",
)

NOT_FOUND_HINT = "Type 'help' for available commands."


@dataclass(frozen=True, slots=True)
class SubmitResult:
    """Lines appended by one submission.

    `output_lines` is empty when the buffer was cleared or the session is already solved.
    """

    output_lines: tuple[str, ...]
    completed: bool
    cleared: bool = False


class TerminalSession:
    """Command interpreter behind the secret terminal.

    Resolves typed text against the static command table, tracks which files were decoded,
    and marks itself complete once the final key is decoded.
    """

    def __init__(self, *, commands: CommandTable) -> None:
        self._commands = commands
        self.lines: list[str] = list(WELCOME_BANNER)
        self.decoded_files: list[str] = []
        self.completed = False

    @property
    def tracked_files(self) -> tuple[str, ...]:
        return self._commands.decodable_files()

    def submit(self, raw_text: str) -> SubmitResult:
        if self.completed:
            return SubmitResult(output_lines=(), completed=True)

        cmd = normalize_command(raw_text)

        if cmd == CLEAR_COMMAND:
            self.lines.clear()
            return SubmitResult(output_lines=(), completed=False, cleared=True)

        response = self._commands.get(cmd)

        if response is not None and cmd.startswith(DECODE_PREFIX):
            name = cmd[len(DECODE_PREFIX) :]
            if name not in self.decoded_files:
                self.decoded_files.append(name)
                logger.debug("Decoded %s (%d/%d)", name, len(self.decoded_files), len(self.tracked_files))

        if response is None:
            response = (f"Command not found: {raw_text}", NOT_FOUND_HINT)

        block = (f"> {raw_text}", *response, "")
        self.lines.extend(block)

        if cmd == UNLOCK_COMMAND:
            self.completed = True
            logger.info("Terminal unlocked after %d decoded file(s)", len(self.decoded_files))

        return SubmitResult(output_lines=block, completed=self.completed)
