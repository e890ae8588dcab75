"""
G-code Machine State

Tracks modal state during interpretation including:
- Motion mode (G0/G1/G2/G3), sticky across parameter-only lines
- Plane selection (G17/G18/G19)
- Units (G20/G21)
- Work coordinate system (G54-G59)
- Positioning mode (G90/G91)
- Tool-tip position, feed rate, spindle speed and tool
- Work (G92) and tool offsets
"""

import copy
from dataclasses import dataclass, field
from typing import Mapping

from cncsim.config import AXES, DEFAULT_FEEDRATE, DEFAULT_TOOL, OFFSET_AXES


def _zero_position() -> dict[str, float]:
    return {axis: 0.0 for axis in AXES}


def _zero_offset() -> dict[str, float]:
    return {axis: 0.0 for axis in OFFSET_AXES}


@dataclass
class MachineState:
    """Modal machine state owned by a single interpreter"""

    # Modal groups
    motion_mode: int = 0  # 0 rapid, 1 linear, 2 arc CW, 3 arc CCW
    plane: int = 17  # 17 XY, 18 XZ, 19 YZ
    units: int = 21  # 20 inches, 21 millimeters
    coordinate_system: int = 54  # 54-59
    positioning: int = 90  # 90 absolute, 91 incremental

    # Current tool-tip position in program coordinates
    position: dict[str, float] = field(default_factory=_zero_position)

    # Settings
    feedrate: float = DEFAULT_FEEDRATE  # units/min
    spindle_speed: float = 0.0  # RPM
    spindle_direction: int = 0  # 1 CW, -1 CCW, 0 off
    coolant: bool = False
    current_tool: int = DEFAULT_TOOL

    # Offsets
    work_offset: dict[str, float] = field(default_factory=_zero_offset)
    tool_offset: dict[str, float] = field(default_factory=_zero_offset)

    @property
    def is_absolute(self) -> bool:
        return self.positioning == 90

    def calculate_end_position(self, params: Mapping[str, float]) -> dict[str, float]:
        """
        Calculate target position from the positioning mode and parameters

        Axes without a parameter keep their current value.

        Args:
            params: Parameter letters to values, e.g. {'X': 10.0}

        Returns:
            New position dictionary (the current one is not modified)
        """
        end = self.position.copy()

        for axis in AXES:
            value = params.get(axis.upper())
            if value is None:
                continue
            if self.is_absolute:
                end[axis] = value
            else:  # G91 - incremental
                end[axis] = self.position[axis] + value

        return end

    def set_work_offset(self, params: Mapping[str, float]) -> None:
        """
        Redefine the current position as the given coordinates (G92)

        The machine does not move; only the offset changes.
        """
        for axis in OFFSET_AXES:
            value = params.get(axis.upper())
            if value is not None:
                self.work_offset[axis] = self.position[axis] - value

    def work_position(self) -> dict[str, float]:
        """Current position expressed relative to the work offset"""
        return {axis: self.position[axis] - self.work_offset[axis] for axis in OFFSET_AXES}

    def snapshot(self) -> "MachineState":
        """Deep copy for read-only consumers"""
        return copy.deepcopy(self)

    def get_status(self) -> dict:
        """Get current state as dictionary for status reporting"""
        return {
            "motion_mode": f"G{self.motion_mode}",
            "plane": f"G{self.plane}",
            "units": f"G{self.units}",
            "coordinate_system": f"G{self.coordinate_system}",
            "positioning": f"G{self.positioning}",
            "position": self.position.copy(),
            "work_position": self.work_position(),
            "feedrate": self.feedrate,
            "spindle_speed": self.spindle_speed,
            "spindle_direction": self.spindle_direction,
            "coolant": self.coolant,
            "current_tool": self.current_tool,
            "work_offset": self.work_offset.copy(),
            "tool_offset": self.tool_offset.copy(),
        }
