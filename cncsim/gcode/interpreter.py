"""
Main G-code Interpreter for the CNC simulator

Processes parsed commands into an ordered toolpath of motion segments.
Manages modal state; never talks to a machine directly. Non-motion side
effects are recorded as MachineActions for the program player.
"""

import logging
from dataclasses import dataclass
from typing import Mapping

from cncsim.utils.errors import CannedCycleError, GcodeError

from .parser import Command, CommandKind
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

logger = logging.getLogger(__name__)


@dataclass
class RuntimeIssue:
    """A command that could not be executed"""

    line: int
    message: str

    def __str__(self):
        return f"Line {self.line}: {self.message}"


class GcodeInterpreter:
    """Modal state machine that turns commands into toolpath segments"""

    def __init__(self):
        self.state = MachineState()
        self.toolpath: list[Segment] = []
        self.actions: list[MachineAction] = []
        self.errors: list[RuntimeIssue] = []

    def reset(self) -> None:
        """Reset interpreter to initial state"""
        self.state = MachineState()
        self.toolpath = []
        self.actions = []
        self.errors = []

    def execute(self, commands: list[Command]) -> list[Segment]:
        """
        Execute a list of parsed commands

        A failing command is logged and recorded in ``errors``; execution
        continues with the next one.

        Args:
            commands: Commands in program order

        Returns:
            Ordered list of toolpath segments
        """
        self.toolpath = []
        self.actions = []
        self.errors = []

        for cmd in commands:
            try:
                self.execute_command(cmd)
            except GcodeError as e:
                self._report(cmd, e.original_message)
            except Exception as e:
                self._report(cmd, f"{type(e).__name__}: {e!s}")

        logger.debug(f"Interpreted {len(commands)} commands into {len(self.toolpath)} segments "
                     f"({len(self.errors)} errors)")
        return list(self.toolpath)

    def _report(self, cmd: Command, message: str) -> None:
        logger.error(f"Error executing line {cmd.line_number} ({cmd.source_text}): {message}")
        self.errors.append(RuntimeIssue(cmd.line_number, message))

    def execute_command(self, cmd: Command) -> None:
        if cmd.kind == CommandKind.G:
            self.execute_g_code(cmd)
        elif cmd.kind == CommandKind.M:
            self.execute_m_code(cmd)
        elif cmd.kind == CommandKind.T:
            self.execute_tool_change(cmd)
        elif cmd.kind == CommandKind.MODAL:
            self.execute_modal_command(cmd)

    def execute_g_code(self, cmd: Command) -> None:
        g = cmd.code
        params = cmd.params
        self._apply_spindle_speed(params)

        # Motion commands
        if g in (0, 1):
            self.execute_linear_move(int(g), params, cmd.line_number)
        elif g in (2, 3):
            self.execute_arc_move(int(g), params, cmd.line_number)
        # Plane selection
        elif g in (17, 18, 19):
            self.state.plane = int(g)
        # Units
        elif g in (20, 21):
            self.state.units = int(g)
        # Coordinate system
        elif g in (54, 55, 56, 57, 58, 59):
            self.state.coordinate_system = int(g)
        # Positioning mode
        elif g in (90, 91):
            self.state.positioning = int(g)
        # Canned cycles (drilling)
        elif g in range(81, 90):
            self.execute_canned_cycle(int(g), params, cmd.line_number)
        elif g == 80:
            logger.debug(f"Line {cmd.line_number}: canned cycle cancel")
        # Set work offset
        elif g == 92:
            self.state.set_work_offset(params)
        else:
            logger.debug(f"Line {cmd.line_number}: ignoring unsupported G{g:g}")

        # Store current motion mode for modal commands
        if g in (0, 1, 2, 3):
            self.state.motion_mode = int(g)

    def execute_linear_move(self, g: int, params: Mapping[str, float], line_number: int = 0) -> None:
        """Rapid (G0) or feed (G1) move to the target position"""
        self._apply_feedrate(params)
        start = self.state.position.copy()
        end = self.state.calculate_end_position(params)

        segment = LinearSegment(
            type=SegmentType.RAPID if g == 0 else SegmentType.LINEAR,
            start=start,
            end=end.copy(),
            feedrate=None if g == 0 else self.state.feedrate,
            spindle_speed=self.state.spindle_speed,
            tool=self.state.current_tool,
            line_number=line_number,
        )
        self.toolpath.append(segment)
        self.state.position = end

    def execute_arc_move(self, g: int, params: Mapping[str, float], line_number: int = 0) -> None:
        """
        Arc move (G2 clockwise, G3 counter-clockwise)

        Only the end point updates the tracked position; the arc geometry
        is kept on the segment for consumers that need it.
        """
        self._apply_feedrate(params)
        start = self.state.position.copy()
        end = self.state.calculate_end_position(params)

        segment = ArcSegment(
            type=SegmentType.ARC_CW if g == 2 else SegmentType.ARC_CCW,
            start=start,
            end=end.copy(),
            center={
                "i": params.get("I", 0.0),
                "j": params.get("J", 0.0),
                "k": params.get("K", 0.0),
            },
            radius=params.get("R"),
            plane=self.state.plane,
            feedrate=self.state.feedrate,
            spindle_speed=self.state.spindle_speed,
            tool=self.state.current_tool,
            line_number=line_number,
        )
        self.toolpath.append(segment)
        self.state.position = end

    def execute_canned_cycle(self, g: int, params: Mapping[str, float], line_number: int = 0) -> None:
        """
        Simplified drilling cycle (G81-G89)

        Requires Z (final depth) and R (retract height). X/Y default to the
        current position. The tracked position is left unchanged.
        """
        z = params.get("Z")
        r = params.get("R")
        if z is None or r is None:
            raise CannedCycleError(f"Canned cycle G{g} requires Z and R parameters", line_number)

        self._apply_feedrate(params)
        x = params.get("X", self.state.position["x"])
        y = params.get("Y", self.state.position["y"])

        segment = DrillSegment(
            cycle=g,
            position={"x": x, "y": y},
            depth=z,
            retract=r,
            feedrate=self.state.feedrate,
            spindle_speed=self.state.spindle_speed,
            tool=self.state.current_tool,
            start=self.state.position.copy(),
            end=self.state.position.copy(),
            line_number=line_number,
        )
        self.toolpath.append(segment)

    def execute_m_code(self, cmd: Command) -> None:
        m = cmd.code
        params = cmd.params

        if m in (3, 4):  # Spindle on CW / CCW
            speed = params.get("S")
            if speed is not None:
                self.state.spindle_speed = speed
            self.state.spindle_direction = 1 if m == 3 else -1
            self._record(ActionKind.SPINDLE_ON, cmd, speed=self.state.spindle_speed,
                         direction=self.state.spindle_direction)
        elif m == 5:  # Spindle stop
            self.state.spindle_speed = 0.0
            self.state.spindle_direction = 0
            self._record(ActionKind.SPINDLE_OFF, cmd)
        elif m == 6:
            # Tool change is handled by the T word
            pass
        elif m in (8, 9):  # Coolant on / off
            self.state.coolant = m == 8
            self._record(ActionKind.COOLANT, cmd, enabled=self.state.coolant)
        elif m in (2, 30):  # Program end
            logger.info(f"Program end (M{m:g}) at line {cmd.line_number}")
            self._record(ActionKind.PROGRAM_END, cmd)
        else:
            logger.debug(f"Line {cmd.line_number}: ignoring unsupported M{m:g}")

    def execute_tool_change(self, cmd: Command) -> None:
        self.state.current_tool = int(cmd.code)
        logger.info(f"Tool change to T{self.state.current_tool}")
        self._record(ActionKind.TOOL_CHANGE, cmd, tool=self.state.current_tool)

    def execute_modal_command(self, cmd: Command) -> None:
        """
        Parameter-only line: repeat the active motion mode

        Lines without axis words (e.g. a lone F or S) still emit a
        zero-length segment so that segment indices follow the program.
        """
        params = cmd.params
        self._apply_spindle_speed(params)

        mode = self.state.motion_mode
        if mode in (0, 1):
            self.execute_linear_move(mode, params, cmd.line_number)
        elif mode in (2, 3):
            self.execute_arc_move(mode, params, cmd.line_number)

    def _apply_feedrate(self, params: Mapping[str, float]) -> None:
        feed = params.get("F")
        if feed is not None:
            self.state.feedrate = feed

    def _apply_spindle_speed(self, params: Mapping[str, float]) -> None:
        speed = params.get("S")
        if speed is not None:
            self.state.spindle_speed = speed

    def _record(self, kind: ActionKind, cmd: Command, **values) -> None:
        self.actions.append(MachineAction(
            kind=kind,
            before_segment=len(self.toolpath),
            line_number=cmd.line_number,
            **values,
        ))

    def get_toolpath(self) -> list[Segment]:
        return list(self.toolpath)

    def get_state(self) -> MachineState:
        """Snapshot of the current machine state"""
        return self.state.snapshot()
