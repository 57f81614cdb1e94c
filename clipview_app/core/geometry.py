"""
Viewport geometry: pure conversions between time and surface coordinates.
"""
import typing as t

from .models import DrawRequest, Segment, Viewport


def draw_request(width_logical: float, height_logical: float, ratio: float) -> DrawRequest:
    """Device-pixel size for a container of the given logical size."""
    return DrawRequest(
        width_px=max(0, int(round(width_logical * ratio))),
        height_px=max(0, int(round(height_logical * ratio))),
    )


def seek_time(viewport: Viewport, x: float, width: float) -> float:
    """Time under horizontal offset ``x`` of a surface ``width`` wide.

    Not clamped: clicks outside [0, width] map outside the viewport.
    """
    if width <= 0:
        return viewport.time_start
    return viewport.time_start + (x / width) * viewport.duration


def cursor_fraction(viewport: Viewport, time: float) -> float:
    """Horizontal position of ``time`` as a fraction of the viewport width."""
    return (time - viewport.time_start) / viewport.duration


def segment_span(viewport: Viewport, segment: Segment) -> t.Optional[t.Tuple[float, float]]:
    """Return ``(left, width)`` fractions for a transcript label.

    Only the visible part is measured: a segment starting before the viewport
    gets its label from the left edge, not from a negative ``t0`` offset.
    Segments outside the viewport, and inverted ones, give None.
    """
    if segment.t1 < viewport.time_start or segment.t0 > viewport.time_end:
        return None
    visible_start = max(viewport.time_start, segment.t0)
    visible_end = min(viewport.time_end, segment.t1)
    if visible_end <= visible_start:
        return None
    left = (visible_start - viewport.time_start) / viewport.duration
    width = (visible_end - visible_start) / viewport.duration
    return left, width
