"""
Toolpath elements produced by the interpreter.

Segments are the motion history of a program; MachineActions are the
non-motion side effects (spindle, coolant, tool, program end) anchored
to the segment they precede. Mapping fields are read-only views over
private copies, so a segment cannot change once appended.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


def freeze_mappings(obj, *names: str) -> None:
    """Replace dict fields of a frozen dataclass with read-only copies"""
    for name in names:
        object.__setattr__(obj, name, MappingProxyType(dict(getattr(obj, name))))


class SegmentType(str, Enum):
    RAPID = "rapid"
    LINEAR = "linear"
    ARC_CW = "arc_cw"
    ARC_CCW = "arc_ccw"
    DRILL = "drill"


@dataclass(frozen=True)
class LinearSegment:
    """Straight move, rapid (G0) or feed-controlled (G1)"""

    type: SegmentType
    start: Mapping[str, float]
    end: Mapping[str, float]
    feedrate: float | None  # None for rapid moves
    spindle_speed: float
    tool: int
    line_number: int = 0

    def __post_init__(self):
        freeze_mappings(self, "start", "end")

    @property
    def is_rapid(self) -> bool:
        return self.type == SegmentType.RAPID


@dataclass(frozen=True)
class ArcSegment:
    """Circular move (G2/G3); centre given as I/J/K offsets from start"""

    type: SegmentType
    start: Mapping[str, float]
    end: Mapping[str, float]
    center: Mapping[str, float]
    radius: float | None
    plane: int
    feedrate: float
    spindle_speed: float
    tool: int
    line_number: int = 0

    def __post_init__(self):
        freeze_mappings(self, "start", "end", "center")

    @property
    def is_rapid(self) -> bool:
        return False

    @property
    def clockwise(self) -> bool:
        return self.type == SegmentType.ARC_CW


@dataclass(frozen=True)
class DrillSegment:
    """Simplified canned drilling cycle (G81-G89)"""

    cycle: int
    position: Mapping[str, float]  # x/y of the hole
    depth: float
    retract: float
    feedrate: float
    spindle_speed: float
    tool: int
    start: Mapping[str, float] = field(default_factory=dict)
    end: Mapping[str, float] = field(default_factory=dict)
    line_number: int = 0
    type: SegmentType = SegmentType.DRILL

    def __post_init__(self):
        freeze_mappings(self, "position", "start", "end")

    @property
    def is_rapid(self) -> bool:
        return False


Segment = Union[LinearSegment, ArcSegment, DrillSegment]


class ActionKind(str, Enum):
    SPINDLE_ON = "spindle_on"
    SPINDLE_OFF = "spindle_off"
    COOLANT = "coolant"
    TOOL_CHANGE = "tool_change"
    PROGRAM_END = "program_end"


@dataclass(frozen=True)
class MachineAction:
    """Non-motion machine command, applied before segment ``before_segment``"""

    kind: ActionKind
    before_segment: int
    line_number: int = 0
    speed: float = 0.0
    direction: int = 0  # 1 CW, -1 CCW
    enabled: bool = False  # coolant on/off
    tool: int = 0
