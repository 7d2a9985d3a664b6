# hfget/core/progress.py
"""
Speed / ETA math for the download progress line.

Speed is only reported once more than 2 seconds have passed AND more than
5 MB have arrived; before that the line shows "0.0" and "calculating...".
All math uses unrounded MB; only the bar position is rounded up.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional

MB = 1024 * 1024
ETA_PLACEHOLDER = "calculating..."
SPEED_PLACEHOLDER = "0.0"
MIN_ELAPSED = 2.0       # seconds
MIN_DOWNLOADED = 5.0    # MB
MAX_ETA = 999999        # seconds, exclusive


@dataclass(frozen=True)
class ProgressSnapshot:
    position: int        # ceil(downloaded MB), bar position
    total: int           # ceil(total MB), bar length
    speed: str
    eta: str

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        return min(100, int(self.position * 100 / self.total))


def format_eta(remaining_seconds: float) -> str:
    if not math.isfinite(remaining_seconds) or remaining_seconds <= 0 or remaining_seconds >= MAX_ETA:
        return ETA_PLACEHOLDER
    minutes = int(remaining_seconds // 60)
    seconds = int(remaining_seconds % 60)
    return f"{minutes:02d}:{seconds:02d}"


def eta_for(speed_mb_s: float, remaining_mb: float) -> str:
    if not speed_mb_s or not math.isfinite(speed_mb_s) or speed_mb_s <= 0:
        return ETA_PLACEHOLDER
    return format_eta(remaining_mb / speed_mb_s)


def estimate(downloaded_mb: float, total_mb: float, elapsed: float):
    """Return (speed_display, eta_display)."""
    if elapsed <= MIN_ELAPSED or downloaded_mb <= MIN_DOWNLOADED:
        return SPEED_PLACEHOLDER, ETA_PLACEHOLDER
    speed = downloaded_mb / elapsed
    if speed <= 0 or not math.isfinite(speed):
        return SPEED_PLACEHOLDER, ETA_PLACEHOLDER
    return f"{speed:.1f}", eta_for(speed, total_mb - downloaded_mb)


def snapshot(downloaded_bytes: int, total_bytes: int, elapsed: float) -> Optional[ProgressSnapshot]:
    """None when the expected size is unknown; no progress is shown then."""
    if not total_bytes or total_bytes <= 0:
        return None
    downloaded_mb = downloaded_bytes / MB
    total_mb = total_bytes / MB
    speed, eta = estimate(downloaded_mb, total_mb, elapsed)
    return ProgressSnapshot(
        position=math.ceil(downloaded_mb),
        total=math.ceil(total_mb),
        speed=speed,
        eta=eta,
    )
