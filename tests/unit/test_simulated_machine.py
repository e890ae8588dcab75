import logging

import pytest

from cncsim.machine import SimulatedMachine

LIMITS = {
    "x": (-100.0, 100.0),
    "y": (-50.0, 50.0),
    "z": (-20.0, 60.0),
    "a": (-90.0, 90.0),
    "b": (-180.0, 180.0),
}


@pytest.fixture
def sim():
    return SimulatedMachine(travel_limits=LIMITS)


def test_move_within_limits_returns_target(sim):
    assert sim.move_axis("x", 42.5, False) == 42.5
    assert sim.get_current_position()["x"] == 42.5
    assert sim.get_statistics() == {"rapid_moves": 0, "feed_moves": 1, "clamped_moves": 0}


def test_move_outside_limits_is_clamped(sim, caplog):
    with caplog.at_level(logging.WARNING, logger="cncsim.machine.simulated"):
        reached = sim.move_axis("z", -35.0, True)

    assert reached == -20.0
    assert sim.get_current_position()["z"] == -20.0
    assert sim.get_statistics()["clamped_moves"] == 1
    assert sim.get_statistics()["rapid_moves"] == 1
    assert "clamped" in caplog.text


def test_uppercase_axis_names_are_accepted(sim):
    assert sim.move_axis("B", 720.0, True) == 180.0


def test_unknown_axis_raises(sim):
    with pytest.raises(ValueError, match="Unknown axis"):
        sim.move_axis("w", 1.0, False)


def test_spindle_coolant_and_tool(sim):
    sim.set_spindle_speed(2400, -1)
    assert (sim.spindle_rpm, sim.spindle_direction) == (2400.0, -1)

    sim.stop_spindle()
    assert (sim.spindle_rpm, sim.spindle_direction) == (0.0, 0)

    sim.set_coolant(True)
    assert sim.coolant_on is True

    sim.change_tool(5)
    assert sim.tool == 5


def test_default_limits_come_from_config():
    from cncsim import config

    machine = SimulatedMachine()
    hi = config.TRAVEL_LIMITS["x"][1]
    assert machine.move_axis("x", hi + 1000.0, False) == hi
