"""Trim and fade range resolution for clip editing geometry.

Everything here is a pure function of integers.  Rendering (which part of
the clip to draw, where to shade fades) and interactive hit-testing (which
handle is under the mouse) consume the same :class:`TrimFadeRanges`, so
they can never disagree.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrimFadeRanges:
    """Half-open frame ranges.  All indices lie within ``[0, frame_count]``."""
    visible_start: int = 0
    visible_end: int = 0
    fade_in_start: int = 0
    fade_in_end: int = 0
    fade_out_start: int = 0
    fade_out_end: int = 0

    @property
    def visible(self) -> tuple[int, int]:
        return self.visible_start, self.visible_end

    @property
    def fade_in(self) -> tuple[int, int]:
        return self.fade_in_start, self.fade_in_end

    @property
    def fade_out(self) -> tuple[int, int]:
        return self.fade_out_start, self.fade_out_end

    @property
    def active_start(self) -> int:
        return self.fade_in_start

    @property
    def active_end(self) -> int:
        return self.fade_out_end

    @property
    def active_length(self) -> int:
        return max(0, self.active_end - self.active_start)


def resolve(frame_count: int, trim_start: int = 0, trim_end: int = 0,
            show_full_extent: bool = False, fade_in_len: int = 0,
            fade_out_len: int = 0) -> TrimFadeRanges:
    """Clamp trim and fade parameters against a clip of *frame_count* frames.

    ``trim_end <= 0`` means "up to the end of the clip".  The trim start is
    pulled back so at least one frame stays active, and each fade is capped
    at half of the active region so fade-in and fade-out never cross.
    Negative inputs are treated as 0; nothing is ever rejected.
    """
    frame_count = max(int(frame_count), 0)
    if frame_count == 0:
        return TrimFadeRanges()
    trim_start = max(int(trim_start), 0)
    trim_end = max(int(trim_end), 0)

    eff_end = min(trim_end, frame_count) if trim_end > 0 else frame_count
    eff_end = max(eff_end, 1)
    eff_start = min(trim_start, eff_end - 1)

    if show_full_extent:
        visible_start, visible_end = 0, frame_count
    else:
        visible_start, visible_end = eff_start, eff_end

    active = max(0, eff_end - eff_start)
    max_fade_each = active // 2
    fade_in = min(max(int(fade_in_len), 0), max_fade_each)
    fade_out = min(max(int(fade_out_len), 0), max_fade_each)

    return TrimFadeRanges(
        visible_start=visible_start,
        visible_end=visible_end,
        fade_in_start=eff_start,
        fade_in_end=eff_start + fade_in,
        fade_out_start=eff_end - fade_out,
        fade_out_end=eff_end,
    )


def hit_test(ranges: TrimFadeRanges, frame: int, tolerance: int = 0) -> str | None:
    """Return the editing handle within *tolerance* frames of *frame*.

    Handles are ``"fade_in"`` (end of the fade-in ramp), ``"fade_out"``
    (start of the fade-out ramp), ``"trim_start"`` and ``"trim_end"``.  The
    nearest one wins.  On a tie a fade handle with a nonzero ramp beats the
    trim edge, and a zero-length fade loses to it, so the trim edges of an
    unfaded clip stay grabbable.  Returns ``None`` when nothing is in reach
    or the clip is empty.
    """
    if ranges.active_length == 0:
        return None
    tolerance = max(int(tolerance), 0)
    fade_in_rank = 0 if ranges.fade_in_end > ranges.fade_in_start else 2
    fade_out_rank = 0 if ranges.fade_out_end > ranges.fade_out_start else 2
    handles = (
        (fade_in_rank, "fade_in", ranges.fade_in_end),
        (fade_out_rank, "fade_out", ranges.fade_out_start),
        (1, "trim_start", ranges.active_start),
        (1, "trim_end", ranges.active_end),
    )
    best: tuple[int, int] | None = None
    best_name: str | None = None
    for rank, name, pos in handles:
        dist = abs(int(frame) - pos)
        if dist > tolerance:
            continue
        if best is None or (dist, rank) < best:
            best, best_name = (dist, rank), name
    return best_name
