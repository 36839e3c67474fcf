"""Manifest generation."""
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from statsgen.models import Manifest

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

Clock = Callable[[], int]


def epoch_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_iso_string(timestamp: int) -> str:
    """
    Render epoch milliseconds as ISO-8601 UTC with millisecond precision.

    >>> to_iso_string(1709744656375)
    '2024-03-06T17:04:16.375Z'
    """
    # timedelta arithmetic avoids float rounding of fromtimestamp()
    moment = _EPOCH + timedelta(milliseconds=timestamp)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_manifest(clock: Optional[Clock] = None) -> Manifest:
    """
    Capture the current instant once and build an untagged manifest.

    Args:
        clock: Returns epoch milliseconds. Defaults to the wall clock.

    Returns:
        Manifest without a version; tag copies with Manifest.with_version()
    """
    timestamp = int((clock or epoch_millis)())
    return Manifest(timestamp=timestamp, date_string=to_iso_string(timestamp))
