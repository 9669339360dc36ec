# ninja_duel/engine/rules.py
from typing import Tuple

from ..content.balance import DAMAGE, DEFENSE


def clamp(x: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, x))


def damage_range(base: int) -> Tuple[int, int]:
    spread = DAMAGE["spread"]
    return max(DAMAGE["min_damage"], base - spread), base + spread


def is_critical(base: int, damage: int) -> bool:
    lo = base + DAMAGE["crit_margin"]
    hi = base + DAMAGE["spread"]
    return lo <= damage <= hi


def blocked_damage(incoming: int) -> int:
    # flat reduction, not proportional
    return max(0, incoming - DEFENSE["block_reduction"])
