"""
Level thresholds for the XP system.

Level N requires the sum of the first (N-1) multiples of 100:
Level 1: 0 XP, Level 2: 100 XP, Level 3: 300 XP, Level 4: 600 XP, ...
which is the closed form 50 * (N-1) * N.
"""

import math

XP_PER_LEVEL_STEP = 100


def threshold_for_level(level: int) -> int:
    """Total XP needed to reach ``level``."""
    if level <= 1:
        return 0
    return (XP_PER_LEVEL_STEP // 2) * (level - 1) * level


def level_for_xp(total_xp: int) -> int:
    """
    Largest level L such that threshold_for_level(L) <= total_xp.

    50 * L * (L-1) <= xp  <=>  L * (L-1) <= xp // 50, solved with an
    integer square root so large XP values never lose precision.
    """
    if total_xp is None or total_xp <= 0:
        return 1
    steps = int(total_xp) // (XP_PER_LEVEL_STEP // 2)
    return (1 + math.isqrt(1 + 4 * steps)) // 2


def level_progress(total_xp: int) -> dict:
    """Position of ``total_xp`` between the current and the next level."""
    level = level_for_xp(total_xp)
    current_level_xp = threshold_for_level(level)
    next_level_xp = threshold_for_level(level + 1)
    span = next_level_xp - current_level_xp
    progress = ((total_xp - current_level_xp) / span) * 100 if span > 0 else 100
    return {
        "level": level,
        "current_level_xp": current_level_xp,
        "next_level_xp": next_level_xp,
        "progress_to_next_level": min(100, math.floor(progress + 0.5)),
        "xp_to_next_level": next_level_xp - total_xp,
    }
