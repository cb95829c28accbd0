"""Lap-time parsing."""

import re

DURATION_RE = re.compile(
    r"(((?P<hh>[0-9]{1,2}):)?(?P<mm>[0-9]{1,2}):)?(?P<ss>[0-9]{1,2}).(?P<ms>[0-9]+)"
)


def parse_duration(text: str) -> float:
    """Convert a ``[[h:]m:]s.fraction`` lap time to seconds.

    The fraction is scaled by its own digit count, so "1:32.342" is 92.342
    and "0.05" is 0.05. Text that does not look like a lap time yields 0.0.
    """
    match = DURATION_RE.search(text)
    if match is None:
        return 0.0

    hh, mm, ss, ms = match.group("hh", "mm", "ss", "ms")
    seconds = 0.0
    if hh:
        seconds += int(hh) * 3600.0
    if mm:
        seconds += int(mm) * 60.0
    seconds += int(ss)
    seconds += float("0." + ms)
    return seconds
