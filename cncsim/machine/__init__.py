from .adapter import MachineAdapter, ToolpathRenderer
from .simulated import SimulatedMachine

__all__ = ["MachineAdapter", "SimulatedMachine", "ToolpathRenderer"]
