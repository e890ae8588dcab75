from .player import SegmentPlayer
from .sequencer import LoadedProgram, LoadResult, PlaybackState, ProgramInfo, ProgramSequencer

__all__ = [
    "LoadResult",
    "LoadedProgram",
    "PlaybackState",
    "ProgramInfo",
    "ProgramSequencer",
    "SegmentPlayer",
]
