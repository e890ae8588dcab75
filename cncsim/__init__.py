"""
cncsim Python Package

G-code interpretation core for a CNC machine simulator: parse programs,
track modal machine state, build the toolpath and play it back on a
machine adapter.

Key components:
- GcodeParser: Tokenizes program text into commands
- GcodeInterpreter: Modal state machine producing toolpath segments
- ProgramSequencer: Loads a program and drives step/play/pause playback
- MachineAdapter / ToolpathRenderer: Interfaces of the external collaborators
- SimulatedMachine: Headless machine adapter with travel limits
"""

from ._version import __version__
from .gcode import GcodeInterpreter, GcodeParser, MachineState
from .machine import MachineAdapter, SimulatedMachine, ToolpathRenderer
from .program import LoadResult, PlaybackState, ProgramSequencer

__all__ = [
    "__version__",
    "GcodeInterpreter",
    "GcodeParser",
    "LoadResult",
    "MachineAdapter",
    "MachineState",
    "PlaybackState",
    "ProgramSequencer",
    "SimulatedMachine",
    "ToolpathRenderer",
]
