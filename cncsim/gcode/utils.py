"""
Utility functions for toolpath geometry

Arc centre resolution, arc sampling for renderers, segment lengths and
playback time estimates.
"""

import logging
import math

import numpy as np

from cncsim.config import ARC_SEGMENTS_PER_REV, RAPID_FEEDRATE
from cncsim.utils.errors import ArcGeometryError

from .segments import ArcSegment, DrillSegment, Segment, SegmentType

logger = logging.getLogger(__name__)

# Relative tolerance when comparing start and end radii of an arc
ARC_RADIUS_TOLERANCE: float = 1e-3
_EPS: float = 1e-9

# (first axis, second axis, linear axis, first offset word, second offset word)
# Ordered so that positive rotation is counter-clockwise looking down the normal.
_PLANES = {
    17: ("x", "y", "z", "i", "j"),
    18: ("z", "x", "y", "k", "i"),
    19: ("y", "z", "x", "j", "k"),
}


def plane_axes(plane: int) -> tuple[str, str, str]:
    """
    Axes of a working plane

    Args:
        plane: 17 (XY), 18 (ZX) or 19 (YZ)

    Returns:
        (first axis, second axis, normal axis)
    """
    try:
        a1, a2, normal, _, _ = _PLANES[int(plane)]
    except (KeyError, TypeError, ValueError):
        raise ArcGeometryError(f"Unknown plane G{plane}") from None
    return a1, a2, normal


def feed_rate_to_duration(distance: float, feed_rate: float) -> float:
    """
    Convert feed rate to duration for a given distance

    Args:
        distance: Distance to travel in program units
        feed_rate: Feed rate in units/min

    Returns:
        Duration in seconds
    """
    if feed_rate is None or feed_rate <= 0:
        return 0.0
    return distance / (feed_rate / 60.0)


def calculate_distance(start: dict[str, float], end: dict[str, float]) -> float:
    """Euclidean distance over the linear axes"""
    a = np.array([start.get(axis, 0.0) for axis in ("x", "y", "z")], dtype=np.float64)
    b = np.array([end.get(axis, 0.0) for axis in ("x", "y", "z")], dtype=np.float64)
    return float(np.linalg.norm(b - a))


def arc_center(segment: ArcSegment) -> dict[str, float]:
    """
    Absolute arc centre for an arc segment

    Uses the radius form when R is given (R > 0 selects the shorter arc,
    R < 0 the longer one), otherwise the I/J/K offsets from the start point.

    Returns:
        Centre point {x, y, z}; the normal axis keeps the start value
    """
    a1, a2, normal, o1, o2 = _PLANES.get(segment.plane, _PLANES[17])
    start, end = segment.start, segment.end
    center = {axis: start.get(axis, 0.0) for axis in ("x", "y", "z")}

    if segment.radius is not None:
        radius = segment.radius
        p1 = np.array([start[a1], start[a2]], dtype=np.float64)
        p2 = np.array([end[a1], end[a2]], dtype=np.float64)
        chord = p2 - p1
        d = float(np.linalg.norm(chord))
        if d < _EPS:
            raise ArcGeometryError("Radius-format arc needs distinct start and end points", segment.line_number)
        if d > 2 * abs(radius) * (1 + ARC_RADIUS_TOLERANCE):
            raise ArcGeometryError(f"Arc radius {radius:g} too small for distance {d:g}", segment.line_number)

        h = math.sqrt(max(radius * radius - (d / 2) ** 2, 0.0))
        left = np.array([-chord[1], chord[0]]) / d
        # short arc: centre right of the chord for CW, left for CCW
        side = -1.0 if segment.clockwise else 1.0
        if radius < 0:
            side = -side
        c = (p1 + p2) / 2 + side * h * left
        center[a1], center[a2] = float(c[0]), float(c[1])
    else:
        center[a1] = start[a1] + segment.center.get(o1, 0.0)
        center[a2] = start[a2] + segment.center.get(o2, 0.0)

    return center


def validate_arc(segment: ArcSegment) -> bool:
    """True when start and end lie on the same circle around the centre"""
    try:
        center = arc_center(segment)
    except ArcGeometryError:
        return False
    a1, a2, _ = plane_axes(segment.plane)
    r_start = math.hypot(segment.start[a1] - center[a1], segment.start[a2] - center[a2])
    r_end = math.hypot(segment.end[a1] - center[a1], segment.end[a2] - center[a2])
    if r_start < _EPS:
        return False
    return abs(r_start - r_end) <= ARC_RADIUS_TOLERANCE * max(r_start, 1.0)


def _arc_sweep(segment: ArcSegment, center: dict[str, float]) -> tuple[float, float, float]:
    """Radius, start angle and signed sweep (negative for CW) in the arc plane"""
    a1, a2, _ = plane_axes(segment.plane)
    u0, v0 = segment.start[a1] - center[a1], segment.start[a2] - center[a2]
    u1, v1 = segment.end[a1] - center[a1], segment.end[a2] - center[a2]
    radius = math.hypot(u0, v0)
    if radius < _EPS:
        raise ArcGeometryError("Arc centre coincides with start point", segment.line_number)

    theta0 = math.atan2(v0, u0)
    theta1 = math.atan2(v1, u1)
    if segment.clockwise:
        sweep = (theta0 - theta1) % (2 * math.pi)
    else:
        sweep = (theta1 - theta0) % (2 * math.pi)
    if sweep < _EPS:
        sweep = 2 * math.pi  # start == end: full circle
    return radius, theta0, -sweep if segment.clockwise else sweep


def arc_points(segment: ArcSegment, segments_per_rev: int = ARC_SEGMENTS_PER_REV) -> np.ndarray:
    """
    Sample an arc into points for drawing

    The normal axis is interpolated linearly (helical moves).

    Args:
        segment: Arc segment
        segments_per_rev: Chords per full revolution

    Returns:
        (N, 3) array of xyz points, first = start, last = end
    """
    center = arc_center(segment)
    radius, theta0, sweep = _arc_sweep(segment, center)
    a1, a2, normal = plane_axes(segment.plane)

    n = max(2, int(math.ceil(abs(sweep) / (2 * math.pi) * max(segments_per_rev, 4))))
    t = np.linspace(0.0, 1.0, n + 1)
    theta = theta0 + sweep * t

    columns = {
        a1: center[a1] + radius * np.cos(theta),
        a2: center[a2] + radius * np.sin(theta),
        normal: segment.start[normal] + (segment.end[normal] - segment.start[normal]) * t,
    }
    points = np.column_stack([columns["x"], columns["y"], columns["z"]])
    # land exactly on the programmed end point
    points[-1] = [segment.end["x"], segment.end["y"], segment.end["z"]]
    return points


def arc_length(segment: ArcSegment) -> float:
    center = arc_center(segment)
    radius, _, sweep = _arc_sweep(segment, center)
    _, _, normal = plane_axes(segment.plane)
    rise = segment.end[normal] - segment.start[normal]
    return math.hypot(radius * sweep, rise)


def segment_length(segment: Segment) -> float:
    """
    Path length of a toolpath segment

    Arcs whose geometry cannot be resolved fall back to the chord length.
    Drill cycles count the approach, the plunge and the retract.
    """
    if isinstance(segment, ArcSegment):
        try:
            return arc_length(segment)
        except ArcGeometryError as e:
            logger.debug(f"Using chord length for line {segment.line_number}: {e}")
            return calculate_distance(segment.start, segment.end)
    if isinstance(segment, DrillSegment):
        return _drill_travel(segment) + 2 * abs(segment.retract - segment.depth)
    return calculate_distance(segment.start, segment.end)


def _drill_travel(segment: DrillSegment) -> float:
    return math.hypot(segment.position["x"] - segment.start.get("x", 0.0),
                      segment.position["y"] - segment.start.get("y", 0.0))


def estimate_segment_duration(segment: Segment, rapid_feedrate: float = RAPID_FEEDRATE) -> float:
    """
    Estimate machining time for a segment

    Args:
        segment: Toolpath segment
        rapid_feedrate: Traverse rate used for rapid moves (units/min)

    Returns:
        Estimated time in seconds
    """
    if segment.type == SegmentType.RAPID:
        return feed_rate_to_duration(segment_length(segment), rapid_feedrate)
    if isinstance(segment, DrillSegment):
        plunge = abs(segment.retract - segment.depth)
        return (feed_rate_to_duration(plunge, segment.feedrate)
                + feed_rate_to_duration(_drill_travel(segment) + plunge, rapid_feedrate))
    return feed_rate_to_duration(segment_length(segment), segment.feedrate)


def toolpath_bounds(toolpath: list[Segment]) -> tuple[np.ndarray, np.ndarray]:
    """
    Axis-aligned bounding box of segment end points

    Returns:
        (min xyz, max xyz); zeros for an empty toolpath
    """
    points = []
    for segment in toolpath:
        if isinstance(segment, DrillSegment):
            points.append([segment.position["x"], segment.position["y"], segment.depth])
            points.append([segment.position["x"], segment.position["y"], segment.retract])
        else:
            points.append([segment.start["x"], segment.start["y"], segment.start["z"]])
            points.append([segment.end["x"], segment.end["y"], segment.end["z"]])
    if not points:
        return np.zeros(3), np.zeros(3)
    arr = np.asarray(points, dtype=np.float64)
    return arr.min(axis=0), arr.max(axis=0)
