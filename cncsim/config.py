"""
Central configuration for cncsim tunables and shared constants.
"""

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("CNCSIM_TRACE", "0")).lower() in ("1", "true", "yes", "on")

logger = logging.getLogger(__name__)

AXES: tuple[str, ...] = ("x", "y", "z", "a", "b")
OFFSET_AXES: tuple[str, ...] = ("x", "y", "z")

# Validation: coordinates beyond this magnitude are reported as warnings
LARGE_COORDINATE_LIMIT: float = float(os.getenv("CNCSIM_LARGE_COORD_LIMIT", "1000"))

# Interpreter defaults applied on every reset
DEFAULT_FEEDRATE: float = 100.0  # units/min
DEFAULT_TOOL: int = 1

# Rapid traverse rate used only for playback timing (units/min)
RAPID_FEEDRATE: float = float(os.getenv("CNCSIM_RAPID_FEEDRATE", "5000"))

# Playback speed multiplier bounds
PLAYBACK_SPEED_MIN: float = 0.1
PLAYBACK_SPEED_MAX: float = 10.0

# Arc sampling resolution for renderers (points per full revolution)
ARC_SEGMENTS_PER_REV: int = int(os.getenv("CNCSIM_ARC_SEGMENTS", "64"))

LOG_LEVEL_DEFAULT: str = os.getenv("CNCSIM_LOG_LEVEL", "INFO")

_DEFAULT_TRAVEL_LIMITS: dict[str, tuple[float, float]] = {
    "x": (-500.0, 500.0),
    "y": (-400.0, 400.0),
    "z": (-300.0, 300.0),
    "a": (-120.0, 120.0),
    "b": (-360.0, 360.0),
}


# Travel limits for the simulated machine; override with "CNCSIM_TRAVEL_LIMITS"
# as CSV "xmin,xmax,ymin,ymax,zmin,zmax,amin,amax,bmin,bmax"
def _parse_travel_limits() -> dict[str, tuple[float, float]]:
    raw = os.getenv("CNCSIM_TRAVEL_LIMITS")
    if not raw:
        return dict(_DEFAULT_TRAVEL_LIMITS)
    try:
        vals = [float(p.strip()) for p in raw.split(",")]
        if len(vals) != 2 * len(AXES):
            logger.warning(f"Ignoring CNCSIM_TRAVEL_LIMITS: expected {2 * len(AXES)} values, got {len(vals)}")
            return dict(_DEFAULT_TRAVEL_LIMITS)
        return {axis: (min(vals[2 * i], vals[2 * i + 1]), max(vals[2 * i], vals[2 * i + 1]))
                for i, axis in enumerate(AXES)}
    except ValueError:
        logger.warning(f"Ignoring malformed CNCSIM_TRAVEL_LIMITS: {raw!r}")
        return dict(_DEFAULT_TRAVEL_LIMITS)


TRAVEL_LIMITS: dict[str, tuple[float, float]] = _parse_travel_limits()


def configure_logging(level: str | int | None = None) -> None:
    """
    Configure root logging for applications embedding the simulator.

    Args:
        level: Level name or number; defaults to TRACE when CNCSIM_TRACE is set,
            otherwise to CNCSIM_LOG_LEVEL
    """
    if level is None:
        level = TRACE if TRACE_ENABLED else LOG_LEVEL_DEFAULT
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
