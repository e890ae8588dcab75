"""
Applies interpreted toolpath segments to a machine adapter during playback.
"""

import logging
from collections import defaultdict

from cncsim.config import AXES
from cncsim.gcode.segments import ActionKind, DrillSegment, MachineAction, Segment
from cncsim.machine.adapter import MachineAdapter

logger = logging.getLogger(__name__)


class SegmentPlayer:
    """
    Drives a MachineAdapter from a toolpath.

    Machine actions recorded by the interpreter are applied right before
    the segment they precede; actions after the last segment are applied
    by finish().
    """

    def __init__(self, machine: MachineAdapter | None = None):
        self.machine = machine
        self._actions: dict[int, list[MachineAction]] = defaultdict(list)
        self._segment_count = 0

    def load(self, toolpath: list[Segment], actions: list[MachineAction]) -> None:
        self._actions = defaultdict(list)
        for action in actions:
            self._actions[action.before_segment].append(action)
        self._segment_count = len(toolpath)

    def play(self, index: int, segment: Segment) -> dict[str, float]:
        """
        Execute one segment on the machine

        Args:
            index: Position of the segment in the toolpath
            segment: Segment to execute

        Returns:
            Axis values reported by the machine (empty without a machine)
        """
        self._apply_actions(index)
        logger.trace(f"Executing segment {index}: {segment.type.value} (line {segment.line_number})")  # type: ignore[attr-defined]
        if self.machine is None:
            return {}
        if isinstance(segment, DrillSegment):
            return self._play_drill(segment)

        reached = {}
        for axis in AXES:
            if axis in segment.end:
                reached[axis] = self.machine.move_axis(axis, segment.end[axis], segment.is_rapid)
        return reached

    def finish(self) -> None:
        """Apply actions that follow the last segment (e.g. M5, M30)"""
        self._apply_actions(self._segment_count)

    def _play_drill(self, segment: DrillSegment) -> dict[str, float]:
        # position over the hole, plunge at feed, retract at rapid
        reached = {
            "x": self.machine.move_axis("x", segment.position["x"], True),
            "y": self.machine.move_axis("y", segment.position["y"], True),
        }
        self.machine.move_axis("z", segment.retract, True)
        self.machine.move_axis("z", segment.depth, False)
        reached["z"] = self.machine.move_axis("z", segment.retract, True)
        return reached

    def _apply_actions(self, index: int) -> None:
        for action in self._actions.get(index, ()):
            self.apply_action(action)

    def apply_action(self, action: MachineAction) -> None:
        logger.debug(f"Line {action.line_number}: {action.kind.value}")
        if self.machine is None:
            return
        if action.kind == ActionKind.SPINDLE_ON:
            self.machine.set_spindle_speed(action.speed, action.direction)
        elif action.kind == ActionKind.SPINDLE_OFF:
            self.machine.stop_spindle()
        elif action.kind == ActionKind.COOLANT:
            self.machine.set_coolant(action.enabled)
        elif action.kind == ActionKind.TOOL_CHANGE:
            self.machine.change_tool(action.tool)
        elif action.kind == ActionKind.PROGRAM_END:
            logger.info("Program end reached")
