"""
G-code interpretation for the CNC simulator

Main components:
- parser.py: G-code tokenization, validation and statistics
- state.py: Modal machine state tracking
- segments.py: Toolpath segment and machine action types
- interpreter.py: Modal state machine producing the toolpath
- utils.py: Arc geometry, lengths and time estimates
- samples.py: Bundled sample programs
"""

from .interpreter import GcodeInterpreter, RuntimeIssue
from .parser import (
    Command,
    CommandKind,
    GcodeParser,
    ParseError,
    ParseResult,
    ProgramStatistics,
    ValidationWarning,
    parse,
)
from .segments import (
    ActionKind,
    ArcSegment,
    DrillSegment,
    LinearSegment,
    MachineAction,
    Segment,
    SegmentType,
)
from .state import MachineState

__all__ = [
    "ActionKind",
    "ArcSegment",
    "Command",
    "CommandKind",
    "DrillSegment",
    "GcodeInterpreter",
    "GcodeParser",
    "LinearSegment",
    "MachineAction",
    "MachineState",
    "ParseError",
    "ParseResult",
    "ProgramStatistics",
    "RuntimeIssue",
    "Segment",
    "SegmentType",
    "ValidationWarning",
    "parse",
]
