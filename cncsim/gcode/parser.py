"""
G-code Parser for the CNC simulator

Tokenizes raw G-code text into structured commands, one per line.
Supports G/M/T words plus letter-addressed parameters; comments in
parentheses and after semicolons are discarded.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from cncsim.config import LARGE_COORDINATE_LIMIT

from .segments import freeze_mappings

logger = logging.getLogger(__name__)


class CommandKind(str, Enum):
    """Kind of a parsed line"""

    G = "G"
    M = "M"
    T = "T"
    MODAL = "MODAL"  # parameters only, reuses the active motion mode


@dataclass(frozen=True)
class Command:
    """Represents one parsed G-code line; params is a read-only mapping"""

    kind: CommandKind
    code: float | None  # None for MODAL lines
    params: Mapping[str, float] = field(default_factory=dict)
    line_number: int = 0
    source_text: str = ""

    def __post_init__(self):
        freeze_mappings(self, "params")

    def __str__(self):
        result = self.kind.value if self.code is None else f"{self.kind.value}{self.code:.10g}"
        for key, val in self.params.items():
            result += f" {key}{val:.10g}"
        return result.strip()


@dataclass
class ParseError:
    """A line whose content could not be tokenized"""

    line: int
    message: str
    raw_text: str


@dataclass
class ParseResult:
    commands: list[Command] = field(default_factory=list)
    errors: list[ParseError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class ValidationWarning:
    """Non-fatal finding reported by GcodeParser.validate()"""

    line: int
    message: str
    severity: str = "warning"


@dataclass
class ProgramStatistics:
    """Command tallies for a parsed program"""

    total_lines: int = 0
    rapid_moves: int = 0
    linear_moves: int = 0
    arc_moves: int = 0
    tool_changes: int = 0
    spindle_commands: int = 0
    modal_commands: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "total_lines": self.total_lines,
            "rapid_moves": self.rapid_moves,
            "linear_moves": self.linear_moves,
            "arc_moves": self.arc_moves,
            "tool_changes": self.tool_changes,
            "spindle_commands": self.spindle_commands,
            "modal_commands": self.modal_commands,
        }


class GcodeParser:
    """G-code parser that tokenizes lines and answers queries about the last parse"""

    # Regex patterns for parsing
    PAREN_COMMENT_PATTERN = re.compile(r"\(.*?\)")
    SEMICOLON_COMMENT_PATTERN = re.compile(r";.*$")
    WORD_PATTERN = re.compile(r"([A-Z])([-+]?\d*\.?\d+)")

    COMMAND_LETTERS = {"G": CommandKind.G, "M": CommandKind.M, "T": CommandKind.T}
    VALIDATED_AXES = ("X", "Y", "Z", "A", "B")
    MOTION_CODES = (0, 1, 2, 3)

    def __init__(self):
        self.commands: list[Command] = []
        self.errors: list[ParseError] = []
        self.line_count = 0

    def reset(self) -> None:
        self.commands = []
        self.errors = []
        self.line_count = 0

    def parse(self, text: str) -> ParseResult:
        """
        Parse a complete G-code program

        Malformed lines are recorded in ``errors`` and parsing continues
        with the next line; this method never raises.

        Args:
            text: Program text, newline separated

        Returns:
            ParseResult with commands in program order
        """
        self.reset()
        if text is None:
            text = ""
        elif not isinstance(text, str):
            text = str(text)

        for line_number, raw_line in enumerate(text.split("\n"), 1):
            self.line_count = line_number
            line = self.clean_line(raw_line)
            if not line:
                continue

            try:
                command = self.parse_line(line, self.line_count, raw_line.strip())
            except Exception as e:
                logger.warning(f"Line {self.line_count}: parse error - {e!s}")
                self.errors.append(ParseError(self.line_count, str(e), raw_line))
                continue

            if command is not None:
                self.commands.append(command)

        logger.debug(f"Parsed {len(self.commands)} commands from {self.line_count} lines "
                     f"({len(self.errors)} errors)")
        return ParseResult(commands=list(self.commands), errors=list(self.errors))

    def clean_line(self, line: str) -> str:
        """Strip comments and whitespace, convert to uppercase"""
        line = self.PAREN_COMMENT_PATTERN.sub("", line)
        line = self.SEMICOLON_COMMENT_PATTERN.sub("", line)
        return line.strip().upper()

    def parse_line(self, line: str, line_number: int = 0, source_text: str = "") -> Command | None:
        """
        Parse one cleaned line into a Command

        Args:
            line: Uppercased line with comments removed
            line_number: 1-based line number in the program
            source_text: Original line text for diagnostics

        Returns:
            Command, or None when the line holds no recognizable words
        """
        words = self.WORD_PATTERN.findall(line)
        if not words:
            return None

        kind: CommandKind | None = None
        code: float | None = None
        params: dict[str, float] = {}

        for letter, value in words:
            if letter in self.COMMAND_LETTERS:
                if kind is not None:
                    # last command word wins
                    logger.debug(f"Line {line_number}: {kind.value}{code:.10g} superseded by {letter}{value}")
                kind = self.COMMAND_LETTERS[letter]
                code = float(value)
            else:
                params[letter] = float(value)

        if kind is None:
            kind = CommandKind.MODAL

        return Command(
            kind=kind,
            code=code,
            params=params,
            line_number=line_number,
            source_text=source_text or line,
        )

    def commands_by_kind(self, kind: CommandKind | str) -> list[Command]:
        """Commands of the last parse with the given kind"""
        kind = CommandKind(kind)
        return [cmd for cmd in self.commands if cmd.kind == kind]

    def motion_commands(self) -> list[Command]:
        """G0-G3 commands of the last parse"""
        return [cmd for cmd in self.commands
                if cmd.kind == CommandKind.G and cmd.code in self.MOTION_CODES]

    def validate(self) -> list[ValidationWarning]:
        """
        Scan the last parse for suspicious content

        Reports axis values larger than LARGE_COORDINATE_LIMIT and rapid
        moves issued while the spindle is on (M3/M4 on, M5 off).

        Returns:
            List of warnings in program order per check
        """
        warnings: list[ValidationWarning] = []

        for cmd in self.commands:
            for axis in self.VALIDATED_AXES:
                value = cmd.params.get(axis)
                if value is not None and abs(value) > LARGE_COORDINATE_LIMIT:
                    warnings.append(ValidationWarning(cmd.line_number, f"Large {axis} coordinate: {value:g}"))

        spindle_on = False
        for cmd in self.commands:
            if cmd.kind == CommandKind.M and cmd.code in (3, 4):
                spindle_on = True
            elif cmd.kind == CommandKind.M and cmd.code == 5:
                spindle_on = False
            elif cmd.kind == CommandKind.G and cmd.code == 0 and spindle_on:
                warnings.append(ValidationWarning(cmd.line_number, "Rapid move (G0) with spindle running"))

        return warnings

    def get_statistics(self) -> ProgramStatistics:
        """Tally the last parse by command category"""
        stats = ProgramStatistics(total_lines=len(self.commands))

        for cmd in self.commands:
            if cmd.kind == CommandKind.G:
                if cmd.code == 0:
                    stats.rapid_moves += 1
                elif cmd.code == 1:
                    stats.linear_moves += 1
                elif cmd.code in (2, 3):
                    stats.arc_moves += 1
            elif cmd.kind == CommandKind.M:
                if cmd.code in (3, 4, 5):
                    stats.spindle_commands += 1
            elif cmd.kind == CommandKind.T:
                stats.tool_changes += 1
            elif cmd.kind == CommandKind.MODAL:
                stats.modal_commands += 1

        return stats

    def get_errors(self) -> list[ParseError]:
        """Get list of parsing errors"""
        return self.errors


def parse(text: str) -> ParseResult:
    """Parse a program with a throwaway parser"""
    return GcodeParser().parse(text)
