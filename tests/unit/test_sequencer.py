import pytest

from cncsim.gcode import GcodeParser, SegmentType
from cncsim.program import PlaybackState, ProgramSequencer

SCENARIO = "G21 G90\nG0 X0 Y0 Z10\nG1 Z-5 F200\nG1 X10\nG0 Z10\nM30"


def test_load_reports_stats_and_notifies_renderer(sequencer, renderer):
    result = sequencer.load_program(SCENARIO)

    assert result.success
    assert result.errors == []
    assert result.segment_count == 4
    assert result.stats.rapid_moves == 2
    assert result.stats.linear_moves == 2
    assert result.runtime_errors == []
    assert len(renderer.toolpaths) == 1
    assert [seg.type for seg in renderer.toolpaths[0]] == [
        SegmentType.RAPID,
        SegmentType.LINEAR,
        SegmentType.LINEAR,
        SegmentType.RAPID,
    ]
    assert sequencer.state == PlaybackState.IDLE
    assert sequencer.current_segment == 0


def test_scenario_second_segment(sequencer):
    sequencer.load_program(SCENARIO)
    second = sequencer.toolpath[1]

    assert second.start == {"x": 0, "y": 0, "z": 10, "a": 0, "b": 0}
    assert second.end == {"x": 0, "y": 0, "z": -5, "a": 0, "b": 0}
    assert second.feedrate == 200


def test_load_with_parse_errors_is_rejected(sequencer, renderer, monkeypatch):
    def broken(self, line, line_number=0, source_text=""):
        raise ValueError("bad token")

    monkeypatch.setattr(GcodeParser, "parse_line", broken)
    result = sequencer.load_program("G0 X1")

    assert result.success is False
    assert result.errors[0].message == "bad token"
    assert result.segment_count == 0
    assert sequencer.current_program is None
    assert renderer.toolpaths == []


def test_runtime_errors_do_not_reject_program(sequencer):
    result = sequencer.load_program("G81 Z-1\nG0 X1")

    assert result.success
    assert result.segment_count == 1
    assert len(result.runtime_errors) == 1
    assert result.runtime_errors[0].line == 1


def test_load_surfaces_validation_warnings(sequencer):
    result = sequencer.load_program("M3 S100\nG0 X2000")
    assert {w.line for w in result.warnings} == {2}
    assert len(result.warnings) == 2


def test_controls_without_program(sequencer):
    assert sequencer.start() is False
    assert sequencer.stop() is False
    assert sequencer.step_forward() is False
    assert sequencer.step_backward() is False
    assert sequencer.get_program_info() is None
    assert sequencer.update(1.0) == 0


def test_pause_and_resume(sequencer):
    sequencer.load_program(SCENARIO)
    assert sequencer.pause() is False
    assert sequencer.resume() is False

    assert sequencer.start() is True
    assert sequencer.is_running and not sequencer.is_paused

    assert sequencer.pause() is True
    assert sequencer.is_running and sequencer.is_paused
    assert sequencer.pause() is False

    assert sequencer.resume() is True
    assert sequencer.state == PlaybackState.RUNNING


def test_stop_rewinds_and_stops_spindle(sequencer, machine):
    sequencer.load_program(SCENARIO)
    sequencer.start()
    sequencer.step_forward()
    sequencer.step_forward()

    assert sequencer.stop() is True
    assert sequencer.state == PlaybackState.STOPPED
    assert sequencer.current_segment == 0
    assert not sequencer.is_running
    assert machine.calls[-1] == ("stop_spindle",)


def test_stepping_through_program_then_end(sequencer, machine, renderer):
    sequencer.load_program(SCENARIO)
    sequencer.start()

    for _ in range(4):
        assert sequencer.step_forward() is True
    assert sequencer.current_segment == 4
    assert renderer.highlighted == [0, 1, 2, 3]
    assert machine.position == {"x": 10, "y": 0, "z": 10, "a": 0, "b": 0}

    assert sequencer.step_forward() is False
    assert sequencer.state == PlaybackState.STOPPED
    assert sequencer.current_segment == 0
    assert machine.calls[-1] == ("stop_spindle",)


def test_playback_passes_rapid_flag(sequencer, machine):
    sequencer.load_program(SCENARIO)
    sequencer.step_forward()
    sequencer.step_forward()

    moves = machine.calls_named("move_axis")
    assert len(moves) == 10
    assert all(rapid for _, _, _, rapid in moves[:5])
    assert not any(rapid for _, _, _, rapid in moves[5:])
    assert ("move_axis", "z", -5, False) in moves


def test_actions_are_applied_in_program_order(sequencer, machine):
    sequencer.load_program("T2\nM3 S1000\nM8\nG1 X1\nM9\nM5")
    sequencer.start()
    sequencer.step_forward()

    assert machine.calls[:3] == [
        ("change_tool", 2),
        ("set_spindle_speed", 1000, 1),
        ("set_coolant", True),
    ]
    assert machine.calls[3][0] == "move_axis"

    sequencer.step_forward()
    assert machine.calls[-3:] == [("set_coolant", False), ("stop_spindle",), ("stop_spindle",)]


def test_drill_playback(sequencer, machine):
    sequencer.load_program("G0 X0 Y0 Z10\nG81 X5 Y6 Z-3 R2 F100")
    sequencer.step_forward()
    machine.calls.clear()
    sequencer.step_forward()

    assert machine.calls == [
        ("move_axis", "x", 5, True),
        ("move_axis", "y", 6, True),
        ("move_axis", "z", 2, True),
        ("move_axis", "z", -3, False),
        ("move_axis", "z", 2, True),
    ]


def test_step_backward_moves_cursor_only(sequencer, machine, renderer):
    sequencer.load_program(SCENARIO)
    sequencer.step_forward()
    sequencer.step_forward()
    calls_before = len(machine.calls)

    assert sequencer.step_backward() is True
    assert sequencer.current_segment == 1
    assert renderer.highlighted[-1] == 1
    assert len(machine.calls) == calls_before


def test_program_info(sequencer):
    sequencer.load_program(SCENARIO)
    sequencer.start()
    sequencer.step_forward()
    sequencer.pause()

    info = sequencer.get_program_info()
    assert info.total_segments == 4
    assert info.current_segment == 1
    assert info.progress == pytest.approx(0.25)
    assert info.is_running and info.is_paused
    assert info.stats.total_lines == 6


def test_program_info_for_empty_program(sequencer):
    sequencer.load_program("; nothing to do")
    info = sequencer.get_program_info()
    assert info.total_segments == 0
    assert info.progress == 0.0


def test_playback_speed_is_clamped(sequencer):
    assert sequencer.set_playback_speed(50) == 10.0
    assert sequencer.set_playback_speed(0) == 0.1
    assert sequencer.set_playback_speed(2.5) == 2.5
    assert sequencer.playback_speed == 2.5


def test_update_runs_segments_by_elapsed_time(sequencer):
    sequencer.load_program("G1 X10 F600\nG1 X20\nG1 X30")  # one second each
    sequencer.start()

    assert sequencer.update(0.5) == 0
    assert sequencer.update(0.6) == 1
    assert sequencer.current_segment == 1

    sequencer.set_playback_speed(2.0)
    # runs the last two segments and reaches the end of the program
    assert sequencer.update(1.0) == 2
    assert sequencer.state == PlaybackState.STOPPED
    assert sequencer.current_segment == 0


def test_update_is_a_no_op_unless_running(sequencer):
    sequencer.load_program("G1 X10 F600")
    assert sequencer.update(100.0) == 0

    sequencer.start()
    sequencer.pause()
    assert sequencer.update(100.0) == 0
    assert sequencer.current_segment == 0


def test_estimated_run_time(sequencer):
    sequencer.load_program("G1 X10 F600\nG1 X40")
    assert sequencer.estimated_run_time() == pytest.approx(4.0)


def test_show_toolpath(sequencer, renderer):
    sequencer.show_toolpath(False)
    assert renderer.visible is False


def test_reload_replaces_program_and_state(sequencer):
    sequencer.load_program("G91\nG0 X5")
    sequencer.start()
    sequencer.step_forward()

    result = sequencer.load_program("G0 X1")
    assert result.segment_count == 1
    assert sequencer.toolpath[0].end["x"] == 1
    assert sequencer.state == PlaybackState.IDLE
    assert sequencer.current_segment == 0


def test_sample_program_by_name(sequencer):
    result = sequencer.load_sample_program("arc_test")
    assert result.success
    assert result.stats.arc_moves == 6


def test_headless_sequencer_steps_without_adapters():
    sequencer = ProgramSequencer()
    sequencer.load_program("G0 X1\nG1 X2")
    sequencer.start()
    assert sequencer.step_forward()
    assert sequencer.step_forward()
    assert sequencer.step_forward() is False


def test_feed_only_line_counts_as_a_playback_step(sequencer, machine):
    result = sequencer.load_program("G1 X10\nF500\nG1 X20")
    assert result.segment_count == 3

    sequencer.start()
    assert [sequencer.step_forward() for _ in range(4)] == [True, True, True, False]
    assert machine.position["x"] == 20
