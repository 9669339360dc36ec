# ninja_duel/engine/dice.py
import random


def rng_for(seed: int, index: int) -> random.Random:
    # deterministic per match seed + draw index
    return random.Random(f"{seed}:{index}")


def roll(dice: str, r: random.Random) -> int:
    # supports "d6", "d20" etc.
    if not dice.startswith("d"):
        raise ValueError("dice must be like 'd20'")
    sides = int(dice[1:])
    return r.randint(1, sides)


class MatchDice:
    """
    Random source bound to one match. Every draw advances match.roll_index,
    so draws are independent per call yet replayable from the seed.
    """

    def __init__(self, match):
        self.match = match

    def _next_rng(self) -> random.Random:
        r = rng_for(self.match.seed, self.match.roll_index)
        self.match.roll_index += 1
        return r

    def roll_die(self) -> int:
        return roll("d6", self._next_rng())

    def roll_damage(self, lo: int, hi: int) -> int:
        return self._next_rng().randint(lo, hi)
