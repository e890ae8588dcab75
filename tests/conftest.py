"""
Pytest configuration and shared fixtures for the cncsim test suite.

Provides recording doubles for the machine adapter and toolpath renderer,
plus ready-made parser/interpreter/sequencer instances.
"""

import logging
import os
import sys

import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from cncsim.gcode import GcodeInterpreter, GcodeParser
from cncsim.machine import MachineAdapter, ToolpathRenderer
from cncsim.program import ProgramSequencer

logger = logging.getLogger(__name__)


class RecordingMachine(MachineAdapter):
    """Machine adapter that records every call and never clamps."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.position = {axis: 0.0 for axis in ("x", "y", "z", "a", "b")}

    def move_axis(self, axis, target, is_rapid):
        self.calls.append(("move_axis", axis, target, is_rapid))
        self.position[axis] = target
        return target

    def set_spindle_speed(self, rpm, direction):
        self.calls.append(("set_spindle_speed", rpm, direction))

    def stop_spindle(self):
        self.calls.append(("stop_spindle",))

    def set_coolant(self, on):
        self.calls.append(("set_coolant", on))

    def change_tool(self, tool):
        self.calls.append(("change_tool", tool))

    def get_current_position(self):
        return dict(self.position)

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class RecordingRenderer(ToolpathRenderer):
    """Toolpath renderer that records what it was asked to draw."""

    def __init__(self):
        self.toolpaths: list[list] = []
        self.highlighted: list[int] = []
        self.visible = True

    def set_toolpath(self, segments):
        self.toolpaths.append(list(segments))

    def set_current_segment(self, index):
        self.highlighted.append(index)

    def set_visible(self, visible):
        self.visible = visible


@pytest.fixture
def parser() -> GcodeParser:
    return GcodeParser()


@pytest.fixture
def interpreter() -> GcodeInterpreter:
    return GcodeInterpreter()


@pytest.fixture
def machine() -> RecordingMachine:
    return RecordingMachine()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def sequencer(machine, renderer) -> ProgramSequencer:
    return ProgramSequencer(machine=machine, renderer=renderer)


@pytest.fixture
def run_program(parser, interpreter):
    """Parse and interpret a program, returning the toolpath."""

    def _run(text: str):
        result = parser.parse(text)
        assert result.success, result.errors
        return interpreter.execute(result.commands)

    return _run


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: End-to-end runs of bundled sample programs"
    )
