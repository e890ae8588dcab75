"""
Simulated machine for headless runs and testing.

Holds axis positions in a NumPy buffer, clamps every target to the
configured travel limits and tracks spindle, coolant and tool state.
It stands in for the visual machine without any rendering.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from cncsim import config as cfg

from .adapter import MachineAdapter

logger = logging.getLogger(__name__)


@dataclass
class SimulatedMachineState:
    """Internal state of the simulated machine."""

    position: np.ndarray = field(default_factory=lambda: np.zeros((len(cfg.AXES),), dtype=np.float64))
    lower: np.ndarray = field(default_factory=lambda: np.zeros((len(cfg.AXES),), dtype=np.float64))
    upper: np.ndarray = field(default_factory=lambda: np.zeros((len(cfg.AXES),), dtype=np.float64))
    spindle_rpm: float = 0.0
    spindle_direction: int = 0
    coolant_on: bool = False
    tool: int = cfg.DEFAULT_TOOL

    # Statistics
    rapid_moves: int = 0
    feed_moves: int = 0
    clamped_moves: int = 0


class SimulatedMachine(MachineAdapter):
    """
    Machine adapter that simulates axis travel without hardware.

    Targets outside the travel limits are clamped and the clamped value
    is returned, exactly as a real machine adapter would report it.
    """

    def __init__(self, travel_limits: dict[str, tuple[float, float]] | None = None):
        """
        Initialize the simulated machine.

        Args:
            travel_limits: Per-axis (min, max); defaults to config.TRAVEL_LIMITS
        """
        limits = travel_limits or cfg.TRAVEL_LIMITS
        self._index = {axis: i for i, axis in enumerate(cfg.AXES)}
        self._state = SimulatedMachineState()
        for axis, i in self._index.items():
            lo, hi = limits.get(axis, (-np.inf, np.inf))
            self._state.lower[i] = lo
            self._state.upper[i] = hi

    def move_axis(self, axis: str, target: float, is_rapid: bool) -> float:
        i = self._index.get(axis.lower())
        if i is None:
            raise ValueError(f"Unknown axis: {axis}")

        value = float(np.clip(target, self._state.lower[i], self._state.upper[i]))
        if value != target:
            self._state.clamped_moves += 1
            logger.warning(f"Axis {axis} target {target:g} clamped to {value:g}")

        self._state.position[i] = value
        if is_rapid:
            self._state.rapid_moves += 1
        else:
            self._state.feed_moves += 1
        logger.trace(f"move {axis}={value:.3f} rapid={is_rapid}")  # type: ignore[attr-defined]
        return value

    def set_spindle_speed(self, rpm: float, direction: int) -> None:
        self._state.spindle_rpm = float(rpm)
        self._state.spindle_direction = 1 if direction >= 0 else -1
        logger.debug(f"Spindle {'CW' if direction >= 0 else 'CCW'} at {rpm:g} RPM")

    def stop_spindle(self) -> None:
        self._state.spindle_rpm = 0.0
        self._state.spindle_direction = 0
        logger.debug("Spindle stopped")

    def set_coolant(self, on: bool) -> None:
        self._state.coolant_on = bool(on)
        logger.debug(f"Coolant {'on' if on else 'off'}")

    def change_tool(self, tool: int) -> None:
        self._state.tool = int(tool)
        logger.debug(f"Tool T{tool} loaded")

    def get_current_position(self) -> dict[str, float]:
        return {axis: float(self._state.position[i]) for axis, i in self._index.items()}

    @property
    def spindle_rpm(self) -> float:
        return self._state.spindle_rpm

    @property
    def spindle_direction(self) -> int:
        return self._state.spindle_direction

    @property
    def coolant_on(self) -> bool:
        return self._state.coolant_on

    @property
    def tool(self) -> int:
        return self._state.tool

    def get_statistics(self) -> dict[str, int]:
        return {
            "rapid_moves": self._state.rapid_moves,
            "feed_moves": self._state.feed_moves,
            "clamped_moves": self._state.clamped_moves,
        }
