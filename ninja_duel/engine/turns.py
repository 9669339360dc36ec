# ninja_duel/engine/turns.py
from typing import List, Optional

from .models import FINISHED, P1, P2, Match, other_side

ATTACK_RESOLVED = "attack-resolved"
DEFENSE_DODGE = "defense:dodge"
DEFENSE_BLOCK = "defense:block"
DEFENSE_REFLECT = "defense:reflect"
SKIPPED_HAD_INVENTORY = "defense:skipped-had-inventory"
SKIPPED_NO_INVENTORY = "defense:skipped-no-inventory"
DEFENSE_ITEM_ADDED = "defense-item-added"
TURN_PASSED = "turn-passed"

# True: the acting side keeps the turn. False: it goes to the opponent.
KEEPS_TURN = {
    ATTACK_RESOLVED: False,
    DEFENSE_DODGE: True,
    DEFENSE_BLOCK: False,
    DEFENSE_REFLECT: False,
    SKIPPED_HAD_INVENTORY: True,
    SKIPPED_NO_INVENTORY: True,
    DEFENSE_ITEM_ADDED: False,
    TURN_PASSED: False,
}


def decide_first_turn(roll_a: int, roll_b: int) -> Optional[str]:
    """player1 rolled roll_a, player2 rolled roll_b. A tie means roll again."""
    if roll_a > roll_b:
        return P1
    if roll_b > roll_a:
        return P2
    return None


def next_turn(acting_side: str, event_kind: str) -> str:
    if event_kind not in KEEPS_TURN:
        raise ValueError(f"unknown turn event: {event_kind}")
    return acting_side if KEEPS_TURN[event_kind] else other_side(acting_side)


def check_defeat(match: Match, side: str) -> bool:
    """
    Clamps a non-positive health to 0 and finalizes the match.
    Does nothing once a winner exists, so the first side checked keeps
    priority as the loser.
    """
    if match.winner is not None:
        return False
    ps = match.combatant(side)
    if ps.current_health > 0:
        return False
    ps.current_health = 0
    match.game_status = FINISHED
    match.winner = other_side(side)
    return True


def detect_winner(match: Match, order: List[str]) -> Optional[str]:
    # order: the original defender first, then (reflect) the attacker
    for side in order:
        check_defeat(match, side)
    return match.winner
