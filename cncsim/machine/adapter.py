"""
Boundary contracts between the G-code core and the machine / renderer.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from cncsim.gcode.segments import Segment


class MachineAdapter(ABC):
    """
    The physical or visual machine driven during playback.

    Implementations may clamp targets to travel limits; callers use the
    returned value and do not re-validate it.
    """

    @abstractmethod
    def move_axis(self, axis: str, target: float, is_rapid: bool) -> float:
        """Move one axis ('x', 'y', 'z', 'a' or 'b'); return the value actually reached"""

    @abstractmethod
    def set_spindle_speed(self, rpm: float, direction: int) -> None:
        """Run the spindle; direction 1 = CW, -1 = CCW"""

    @abstractmethod
    def stop_spindle(self) -> None: ...

    @abstractmethod
    def set_coolant(self, on: bool) -> None: ...

    @abstractmethod
    def get_current_position(self) -> dict[str, float]:
        """Read-only axis positions for display"""

    def change_tool(self, tool: int) -> None:
        """Tool change effect; machines without a changer ignore it"""
        return None


class ToolpathRenderer(ABC):
    """Visual consumer of the toolpath"""

    @abstractmethod
    def set_toolpath(self, segments: Sequence[Segment]) -> None: ...

    @abstractmethod
    def set_current_segment(self, index: int) -> None: ...

    def set_visible(self, visible: bool) -> None:
        return None
