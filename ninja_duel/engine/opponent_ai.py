# ninja_duel/engine/opponent_ai.py
"""
Scripted opponent for local (vs AI) matches.

Move selection is not strategic: the opponent rolls a die like a human and
plays whatever occupies that slot, rolling again when the slot cannot be
played right now. Only the response to an incoming attack is scored.
"""
import random
from typing import Dict, Optional

from . import inventory, ledger
from .models import (
    BLOCK,
    CHARACTER_SELECT,
    DODGE,
    IN_PROGRESS,
    REFLECT,
    WAITING,
    Action,
    Match,
    PassTurn,
    RollAbility,
    RollFirstTurn,
    SelectCharacter,
    SkipDefense,
    UseDefense,
    other_side,
)
from ..content.balance import AI
from ..content.characters import CHARACTERS

# dodge first: on equal scores the earlier type is kept
EVALUATION_ORDER = (DODGE, BLOCK, REFLECT)


def _reflect_score(incoming: int, own_pct: float, opp_pct: float) -> int:
    score = 0
    if incoming > 35:
        score += 50
    elif incoming > 25:
        score += 30
    elif incoming > 15:
        score += 15
    if own_pct < 30 and opp_pct > 70:
        score -= 20
    if own_pct > 70 and opp_pct < 30:
        score += 25
    return score


def _block_score(incoming: int, own_pct: float, opp_pct: float) -> int:
    score = 0
    if 20 < incoming <= 35:
        score += 30
    elif incoming > 15:
        score += 20
    if own_pct < 40:
        score += 15
    if own_pct > opp_pct:
        score += 10
    return score


def _dodge_score(incoming: int, own_pct: float, opp_pct: float, last_charge: bool) -> int:
    score = 0
    if incoming <= 15:
        score += 40
    elif incoming <= 25:
        score += 25
    if own_pct < 25:
        score += 30
    if own_pct - opp_pct > 20:
        score += 15
    if last_charge:
        score += 10
    return score


def score_defenses(match: Match, side: str, incoming: int) -> Dict[str, int]:
    """Scores every defense type the side currently holds against `incoming` damage."""
    own = match.combatant(side)
    opponent = match.combatant(other_side(side))
    own_pct = own.health_percent()
    opp_pct = opponent.health_percent()
    last_charge = inventory.total(own) == 1

    scores: Dict[str, int] = {}
    for defense_type in EVALUATION_ORDER:
        if inventory.count(own, defense_type) <= 0:
            continue
        if defense_type == DODGE:
            scores[DODGE] = _dodge_score(incoming, own_pct, opp_pct, last_charge)
        elif defense_type == BLOCK:
            scores[BLOCK] = _block_score(incoming, own_pct, opp_pct)
        else:
            scores[REFLECT] = _reflect_score(incoming, own_pct, opp_pct)
    return scores


def choose_defense(match: Match, side: str, incoming: int) -> Optional[str]:
    best_type = None
    best_score = 0
    for defense_type, score in score_defenses(match, side, incoming).items():
        if best_type is None or score > best_score:
            best_type, best_score = defense_type, score
    if best_type is None or best_score < AI["defense_threshold"]:
        return None
    return best_type


def random_character_id(rng: random.Random) -> str:
    return rng.choice(sorted(CHARACTERS))


def has_move(match: Match, side: Optional[str]) -> bool:
    if side is None:
        return False
    if match.game_status == WAITING:
        return match.sides.get(side) is None
    if match.game_status == CHARACTER_SELECT:
        return side not in match.dice_rolls
    return match.game_status == IN_PROGRESS and match.current_turn == side


def plan_move(match: Match, side: str, rng: random.Random) -> Optional[Action]:
    """
    Returns the action the automated side would submit right now, or None
    when it has nothing to do in the current phase.
    """
    if match.game_status == WAITING:
        if match.sides.get(side) is not None:
            return None
        return SelectCharacter(side=side, player_id=AI["player_id"], character_id=random_character_id(rng))

    if match.game_status == CHARACTER_SELECT:
        if side in match.dice_rolls:
            return None
        return RollFirstTurn(side=side, roll=rng.randint(1, 6))

    if match.game_status != IN_PROGRESS or match.current_turn != side:
        return None

    pending = match.last_attack
    if pending is not None and pending.attacking_side != side:
        choice = choose_defense(match, side, pending.damage)
        if choice is None:
            return SkipDefense(side=side)
        return UseDefense(side=side, defense_type=choice)

    ps = match.combatant(side)
    usable = ledger.usable_slots(ps)
    if not usable:
        return PassTurn(side=side)
    for _ in range(AI["max_rerolls"]):
        roll = rng.randint(1, 6)
        if roll in usable:
            return RollAbility(side=side, roll=roll)
    # out of rerolls: play any usable slot
    return RollAbility(side=side, roll=rng.choice(usable))
