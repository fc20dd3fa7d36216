"""
Geometry helpers for link placement.

Links are straight segments between peg centers. A new link may not cross an
existing one, except where the two merely share an endpoint (a common peg).
"""
from across_ai.core.constants import Position


def _ccw(a: Position, b: Position, c: Position) -> bool:
    """True if a, b, c make a strictly counter-clockwise turn."""
    return (c.y - a.y) * (b.x - a.x) > (b.y - a.y) * (c.x - a.x)


def segments_cross(a: Position, b: Position, c: Position, d: Position) -> bool:
    """
    Check whether open segments AB and CD properly intersect.

    Segments sharing an endpoint never count as crossing.

    Args:
        a: First endpoint of segment AB
        b: Second endpoint of segment AB
        c: First endpoint of segment CD
        d: Second endpoint of segment CD

    Returns:
        True if the segments cross, False otherwise
    """
    if a == c or a == d or b == c or b == d:
        return False
    return _ccw(a, c, d) != _ccw(b, c, d) and _ccw(a, b, c) != _ccw(a, b, d)


def is_knight_offset(a: Position, b: Position) -> bool:
    """Check whether two positions are a knight's move apart."""
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return (dx == 1 and dy == 2) or (dx == 2 and dy == 1)
