"""
Program sequencer

Owns one loaded program (commands, toolpath, diagnostics) and exposes
start/pause/resume/stop/step playback over its toolpath.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from cncsim.config import PLAYBACK_SPEED_MAX, PLAYBACK_SPEED_MIN, RAPID_FEEDRATE
from cncsim.gcode.interpreter import GcodeInterpreter, RuntimeIssue
from cncsim.gcode.parser import Command, GcodeParser, ParseError, ProgramStatistics, ValidationWarning
from cncsim.gcode.samples import get_sample_program
from cncsim.gcode.segments import MachineAction, Segment
from cncsim.gcode.utils import estimate_segment_duration
from cncsim.machine.adapter import MachineAdapter, ToolpathRenderer

from .player import SegmentPlayer

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class LoadedProgram:
    """A program as loaded by the sequencer; replaced wholesale on each load"""

    text: str
    commands: list[Command]
    toolpath: list[Segment]
    actions: list[MachineAction]
    stats: ProgramStatistics
    warnings: list[ValidationWarning]
    runtime_errors: list[RuntimeIssue]


@dataclass
class LoadResult:
    success: bool
    errors: list[ParseError] = field(default_factory=list)
    stats: ProgramStatistics | None = None
    warnings: list[ValidationWarning] = field(default_factory=list)
    segment_count: int = 0
    runtime_errors: list[RuntimeIssue] = field(default_factory=list)


@dataclass
class ProgramInfo:
    stats: ProgramStatistics
    warnings: list[ValidationWarning]
    total_segments: int
    current_segment: int
    progress: float
    is_running: bool
    is_paused: bool


class ProgramSequencer:
    """Loads G-code programs and steps through their toolpath"""

    def __init__(self, machine: MachineAdapter | None = None, renderer: ToolpathRenderer | None = None):
        """
        Initialize the sequencer

        Args:
            machine: Adapter driven during playback (optional)
            renderer: Toolpath visualizer notified of loads and steps (optional)
        """
        self.machine = machine
        self.renderer = renderer

        self.parser = GcodeParser()
        self.interpreter = GcodeInterpreter()
        self.player = SegmentPlayer(machine)

        self.current_program: LoadedProgram | None = None
        self.state = PlaybackState.IDLE
        self.current_segment = 0
        self.playback_speed = 1.0

        # Playback timing for update()
        self._durations: list[float] = []
        self._elapsed = 0.0

    @property
    def toolpath(self) -> list[Segment]:
        return self.current_program.toolpath if self.current_program else []

    @property
    def is_running(self) -> bool:
        return self.state in (PlaybackState.RUNNING, PlaybackState.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    def load_program(self, text: str) -> LoadResult:
        """
        Parse, validate and interpret a program

        A program with parse errors is rejected without interpretation.
        Runtime errors of single commands do not reject the program.

        Args:
            text: G-code program text

        Returns:
            LoadResult with statistics, warnings and segment count
        """
        result = self.parser.parse(text)
        if not result.success:
            logger.error(f"G-code parsing errors: {[f'line {e.line}: {e.message}' for e in result.errors]}")
            return LoadResult(success=False, errors=result.errors)

        warnings = self.parser.validate()
        for warning in warnings:
            logger.warning(f"Line {warning.line}: {warning.message}")

        stats = self.parser.get_statistics()
        logger.info(f"Program statistics: {stats.as_dict()}")

        self.interpreter.reset()
        toolpath = self.interpreter.execute(result.commands)

        self.current_program = LoadedProgram(
            text=text,
            commands=result.commands,
            toolpath=toolpath,
            actions=list(self.interpreter.actions),
            stats=stats,
            warnings=warnings,
            runtime_errors=list(self.interpreter.errors),
        )
        self.player.load(toolpath, self.current_program.actions)
        self._durations = [estimate_segment_duration(seg, RAPID_FEEDRATE) for seg in toolpath]
        self.state = PlaybackState.IDLE
        self.current_segment = 0
        self._elapsed = 0.0

        if self.renderer is not None:
            self.renderer.set_toolpath(toolpath)

        logger.info(f"Loaded program: {len(toolpath)} segments")
        return LoadResult(
            success=True,
            stats=stats,
            warnings=warnings,
            segment_count=len(toolpath),
            runtime_errors=self.current_program.runtime_errors,
        )

    def load_sample_program(self, name: str | None = None) -> LoadResult:
        return self.load_program(get_sample_program(name))

    def start(self) -> bool:
        """Start playback from the first segment; False if nothing is loaded"""
        if self.current_program is None:
            logger.error("No program loaded")
            return False

        self.state = PlaybackState.RUNNING
        self.current_segment = 0
        self._elapsed = 0.0
        logger.info("Program started")
        return True

    def pause(self) -> bool:
        if self.state != PlaybackState.RUNNING:
            logger.warning(f"Cannot pause while {self.state.value}")
            return False
        self.state = PlaybackState.PAUSED
        logger.info("Program paused")
        return True

    def resume(self) -> bool:
        if self.state != PlaybackState.PAUSED:
            logger.warning(f"Cannot resume while {self.state.value}")
            return False
        self.state = PlaybackState.RUNNING
        logger.info("Program resumed")
        return True

    def stop(self) -> bool:
        """Stop playback, rewind and stop the spindle"""
        if self.current_program is None:
            logger.error("No program loaded")
            return False

        self.state = PlaybackState.STOPPED
        self.current_segment = 0
        self._elapsed = 0.0

        if self.machine is not None:
            self.machine.stop_spindle()

        logger.info("Program stopped")
        return True

    def step_forward(self) -> bool:
        """
        Execute the segment at the cursor and advance

        At the end of the toolpath the program is stopped instead.

        Returns:
            True if a segment was executed
        """
        if self.current_program is None:
            logger.error("No program loaded")
            return False

        toolpath = self.current_program.toolpath
        if self.current_segment < len(toolpath):
            self.player.play(self.current_segment, toolpath[self.current_segment])
            self.current_segment += 1
            if self.renderer is not None:
                self.renderer.set_current_segment(self.current_segment - 1)
            return True

        logger.info("End of program")
        self.player.finish()
        self.stop()
        return False

    def step_backward(self) -> bool:
        """Move the cursor back one segment; no machine side effects"""
        if self.current_segment <= 0:
            return False

        self.current_segment -= 1
        self._elapsed = 0.0
        if self.renderer is not None:
            self.renderer.set_current_segment(self.current_segment)
        return True

    def update(self, delta: float) -> int:
        """
        Advance playback by elapsed wall time

        Segments are executed one by one once the accumulated time, scaled
        by the playback speed, covers their estimated duration.

        Args:
            delta: Seconds since the previous update

        Returns:
            Number of segments executed
        """
        if self.state != PlaybackState.RUNNING or self.current_program is None:
            return 0

        self._elapsed += max(delta, 0.0) * self.playback_speed
        executed = 0
        while self.state == PlaybackState.RUNNING:
            if self.current_segment >= len(self._durations):
                self.step_forward()  # end of program
                break
            duration = self._durations[self.current_segment]
            if self._elapsed < duration:
                break
            self._elapsed -= duration
            if self.step_forward():
                executed += 1
        return executed

    def show_toolpath(self, visible: bool) -> None:
        if self.renderer is not None:
            self.renderer.set_visible(visible)

    def get_program_info(self) -> ProgramInfo | None:
        """Snapshot of playback progress; None if nothing is loaded"""
        if self.current_program is None:
            return None

        total = len(self.current_program.toolpath)
        return ProgramInfo(
            stats=self.current_program.stats,
            warnings=self.current_program.warnings,
            total_segments=total,
            current_segment=self.current_segment,
            progress=self.current_segment / total if total else 0.0,
            is_running=self.is_running,
            is_paused=self.is_paused,
        )

    def set_playback_speed(self, speed: float) -> float:
        self.playback_speed = float(np.clip(speed, PLAYBACK_SPEED_MIN, PLAYBACK_SPEED_MAX))
        return self.playback_speed

    def estimated_run_time(self) -> float:
        """Estimated seconds to play the whole program at 1x speed"""
        return float(np.sum(self._durations)) if self._durations else 0.0
