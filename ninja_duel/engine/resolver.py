# ninja_duel/engine/resolver.py
import copy
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from . import inventory, ledger
from .battle_log import record_event
from .dice import MatchDice
from .errors import (
    AlreadyFinished,
    CharacterAlreadySelected,
    DefensePending,
    DefenseUnavailable,
    DuelError,
    InvalidPhase,
    InvalidRoll,
    InvalidTurn,
    NoPendingAttack,
    PassNotAllowed,
    UnknownDefenseType,
)
from .models import (
    BLOCK,
    CHARACTER_SELECT,
    DEFENSE_TYPES,
    DODGE,
    FINISHED,
    IN_PROGRESS,
    REFLECT,
    SIDES,
    WAITING,
    Action,
    AttackAbility,
    BattleEvent,
    Combatant,
    DefenseAbility,
    Forfeit,
    LastAttack,
    Match,
    PassTurn,
    RollAbility,
    RollFirstTurn,
    SelectCharacter,
    SkipDefense,
    SkippedDefense,
    UseDefense,
    other_side,
)
from .opponent_ai import choose_defense
from .rules import blocked_damage, damage_range, is_critical
from .turns import (
    ATTACK_RESOLVED,
    DEFENSE_BLOCK,
    DEFENSE_DODGE,
    DEFENSE_ITEM_ADDED,
    DEFENSE_REFLECT,
    SKIPPED_HAD_INVENTORY,
    SKIPPED_NO_INVENTORY,
    TURN_PASSED,
    decide_first_turn,
    detect_winner,
    next_turn,
)
from ..content.balance import STAMINA, XP_REWARD
from ..content.characters import get_character

logger = logging.getLogger(__name__)

DEFENSE_EVENTS = {
    DODGE: DEFENSE_DODGE,
    BLOCK: DEFENSE_BLOCK,
    REFLECT: DEFENSE_REFLECT,
}


@dataclass
class DefenseOutcome:
    damage_applied: int
    reflected_damage: int
    turn_holder: str
    event_kind: str


def apply_action(match: Match, action: Action, dice=None) -> Tuple[Match, List[BattleEvent]]:
    """
    Applies one action to a copy of `match`.

    Returns the new match and the battle-log events the action produced.
    A rejected action raises a DuelError and the caller's match is untouched.
    `dice` needs roll_die() and roll_damage(lo, hi); by default draws come
    from the new match's seed.
    """
    new_match = copy.deepcopy(match)
    if dice is None:
        dice = MatchDice(new_match)
    start = len(new_match.battle_log)
    try:
        _dispatch(new_match, action, dice)
    except UnknownDefenseType as exc:
        logger.error("defense data integrity fault in room %s: %s", match.room_id, exc.message)
        raise
    new_match.version += 1
    events = new_match.battle_log[start:]
    logger.debug(
        "room %s v%s: %s by %s -> %s",
        new_match.room_id,
        new_match.version,
        type(action).__name__,
        action.side,
        [event.kind for event in events],
    )
    return new_match, events


def pending_defender(match: Match) -> Optional[str]:
    if match.last_attack is None:
        return None
    return other_side(match.last_attack.attacking_side)


def _dispatch(match: Match, action: Action, dice) -> None:
    if match.game_status == FINISHED or match.winner is not None:
        raise AlreadyFinished("The duel is already over.")
    if action.side not in SIDES:
        raise InvalidTurn(f"Unknown side '{action.side}'.")

    if isinstance(action, SelectCharacter):
        select_character(match, action)
        return
    if isinstance(action, RollFirstTurn):
        roll_first_turn(match, action.side, action.roll if action.roll is not None else dice.roll_die())
        return
    if isinstance(action, Forfeit):
        forfeit(match, action.side)
        return

    if match.game_status != IN_PROGRESS:
        raise InvalidPhase("The duel has not started yet.")
    if action.side != match.current_turn:
        raise InvalidTurn("It is not your turn.")

    defending = pending_defender(match) == action.side
    if isinstance(action, (UseDefense, SkipDefense)):
        if not defending:
            raise NoPendingAttack("There is no attack to defend against.")
        defense_type = action.defense_type if isinstance(action, UseDefense) else None
        resolve_defense(match, action.side, defense_type)
        return
    if defending:
        raise DefensePending("Choose a defense or take the hit first.")

    if isinstance(action, RollAbility):
        roll_ability(match, action.side, action.roll if action.roll is not None else dice.roll_die(), dice)
    elif isinstance(action, PassTurn):
        pass_turn(match, action.side)
    else:
        raise DuelError(f"Unsupported action {type(action).__name__}.")


# --- setup phases -----------------------------------------------------------

def select_character(match: Match, action: SelectCharacter) -> None:
    if match.game_status != WAITING:
        raise InvalidPhase("Character selection is closed.")
    if match.sides.get(action.side) is not None:
        raise CharacterAlreadySelected(f"{action.side} already picked a character.")

    character = get_character(action.character_id)
    match.sides[action.side] = Combatant(
        player_id=action.player_id,
        character=character,
        current_health=character.max_health,
        stamina=STAMINA["starting"],
        active_buffs=[buff.copy() for buff in action.buffs],
    )
    record_event(
        match,
        "character-selected",
        action.side,
        f"{action.side} picks {character.nickname}.",
        {"characterId": character.id, "buffs": [buff.to_dict() for buff in action.buffs]},
    )

    if all(match.sides.get(side) is not None for side in SIDES):
        match.game_status = CHARACTER_SELECT
        record_event(match, "character-select", None, "Both fighters are ready. Roll for the first turn.")


def roll_first_turn(match: Match, side: str, roll: int) -> None:
    if match.game_status != CHARACTER_SELECT:
        raise InvalidPhase("The first-turn roll is not open.")
    if side in match.dice_rolls:
        raise InvalidTurn("You already rolled for the first turn.")
    if not 1 <= roll <= 6:
        raise InvalidRoll(f"Roll must be 1..6, got {roll}.")

    match.dice_rolls[side] = roll
    record_event(match, "first-turn-roll", side, f"{side} rolls a {roll} for the first turn.", {"roll": roll})
    if len(match.dice_rolls) < len(SIDES):
        return

    first = decide_first_turn(match.dice_rolls[SIDES[0]], match.dice_rolls[SIDES[1]])
    if first is None:
        rolls = dict(match.dice_rolls)
        match.dice_rolls.clear()
        record_event(match, "first-turn-tie", None, "Tie! Both sides roll again.", {"rolls": rolls})
        return

    match.current_turn = first
    match.game_status = IN_PROGRESS
    logger.info("room %s: duel started, %s moves first", match.room_id, first)
    record_event(
        match,
        "match-started",
        first,
        f"{match.combatant(first).character.nickname} takes the first turn.",
        {"rolls": dict(match.dice_rolls)},
    )


def forfeit(match: Match, side: str) -> None:
    if match.game_status not in (CHARACTER_SELECT, IN_PROGRESS):
        raise InvalidPhase("Nothing to forfeit yet.")
    match.last_attack = None
    match.game_status = FINISHED
    match.winner = other_side(side)
    record_event(match, "forfeit", side, f"{side} leaves the duel.")
    _finish(match)


# --- in-progress actions ----------------------------------------------------

def roll_ability(match: Match, side: str, roll: int, dice) -> None:
    ps = match.combatant(side)
    ability = ps.character.ability_for_roll(roll)
    match.turn += 1
    if isinstance(ability, AttackAbility):
        resolve_attack(match, side, ability, dice, roll=roll)
    elif isinstance(ability, DefenseAbility):
        add_defense(match, side, ability, roll=roll)
    else:
        raise DuelError(f"Slot {roll} holds no playable ability.")


def resolve_attack(match: Match, side: str, ability: AttackAbility, dice, roll: Optional[int] = None) -> LastAttack:
    """
    Ledger order: cost, critical reward, regen and cooldown decay, then the
    ability's own cooldown. Leaves the attack pending on the defender unless
    the defender has nothing to defend with or is the automated side.
    """
    attacker = match.combatant(side)
    defender_side = other_side(side)
    defender = match.combatant(defender_side)
    if not attacker.character.owns(ability.id):
        raise DuelError(f"{ability.name} is not in {attacker.character.nickname}'s catalog.")
    ledger.check_usable(attacker, ability)

    lo, hi = damage_range(ability.value)
    base = dice.roll_damage(lo, hi)
    critical = is_critical(ability.value, base)
    bonus = ledger.consume_buffs(attacker)
    damage = base + bonus

    cost = ledger.stamina_cost(ability)
    ledger.spend(attacker, cost)
    crit_bonus = ledger.reward_critical(attacker) if critical else 0
    regen = ledger.end_of_action(attacker)
    ledger.start_cooldown(attacker, ability)

    match.last_attack = LastAttack(
        ability=ability,
        attacking_side=side,
        damage=damage,
        base_damage=base,
        is_critical=critical,
    )
    match.current_turn = next_turn(side, ATTACK_RESOLVED)

    line = f"{attacker.character.nickname} uses {ability.name} for {damage} damage"
    if critical:
        line += " (critical hit!)"
    record_event(match, "attack", side, f"{line}.", {
        "roll": roll,
        "abilityId": ability.id,
        "abilityName": ability.name,
        "baseDamage": base,
        "buffBonus": bonus,
        "damage": damage,
        "isCritical": critical,
        "staminaCost": cost,
        "criticalReward": crit_bonus,
        "regenerated": regen,
    })

    pending = match.last_attack
    if not inventory.has_any(defender):
        resolve_defense(match, defender_side, None)
    elif match.automated_side == defender_side:
        resolve_defense(match, defender_side, choose_defense(match, defender_side, damage))
    return pending


def resolve_defense(match: Match, defender_side: str, defense_type: Optional[str]) -> DefenseOutcome:
    """
    Answers the pending attack with one stored charge, or takes it in full
    when defense_type is None.
    """
    pending = match.last_attack
    if pending is None or pending.attacking_side == defender_side:
        raise NoPendingAttack("There is no attack to defend against.")
    if defense_type is not None and defense_type not in DEFENSE_TYPES:
        raise DefenseUnavailable(f"There is no '{defense_type}' defense.")
    attacker_side = pending.attacking_side
    defender = match.combatant(defender_side)
    attacker = match.combatant(attacker_side)
    incoming = pending.damage

    applied = incoming
    reflected = 0
    if defense_type is None:
        event_kind = SKIPPED_HAD_INVENTORY if inventory.has_any(defender) else SKIPPED_NO_INVENTORY
    else:
        inventory.consume(defender, defense_type)
        defender.skipped_defense = None
        event_kind = DEFENSE_EVENTS[defense_type]
        if defense_type == DODGE:
            applied = 0
        elif defense_type == BLOCK:
            applied = blocked_damage(incoming)
        else:
            applied = 0
            reflected = incoming

    defender.current_health -= applied
    attacker.current_health -= reflected
    if defense_type is None:
        defender.skipped_defense = SkippedDefense(ability=pending.ability, damage=incoming)
    match.last_attack = None

    detect_winner(match, [defender_side, attacker_side])
    turn_holder = next_turn(defender_side, event_kind)
    if match.winner is None:
        if defense_type is not None:
            ledger.end_of_action(defender)
        match.current_turn = turn_holder

    name = defender.character.nickname
    if defense_type is None:
        line = f"{name} takes {applied} damage."
    elif defense_type == DODGE:
        line = f"{name} dodges {pending.ability.name}."
    elif defense_type == BLOCK:
        line = f"{name} blocks and takes {applied} damage."
    else:
        line = f"{name} reflects {reflected} damage back to {attacker.character.nickname}."
    record_event(match, "defense", defender_side, line, {
        "eventKind": event_kind,
        "defenseType": defense_type,
        "incoming": incoming,
        "damageApplied": applied,
        "reflectedDamage": reflected,
        "turnHolder": turn_holder,
    })
    if match.winner is not None:
        _finish(match)

    return DefenseOutcome(
        damage_applied=applied,
        reflected_damage=reflected,
        turn_holder=turn_holder,
        event_kind=event_kind,
    )


def add_defense(match: Match, side: str, ability: DefenseAbility, roll: Optional[int] = None) -> None:
    ps = match.combatant(side)
    inventory.check_can_add(ps, ability.defense_type)
    ledger.check_usable(ps, ability)

    cost = ledger.stamina_cost(ability)
    ledger.spend(ps, cost)
    inventory.add_defense(ps, ability.defense_type)
    regen = ledger.end_of_action(ps)
    match.current_turn = next_turn(side, DEFENSE_ITEM_ADDED)

    record_event(match, "defense-added", side, f"{ps.character.nickname} prepares {ability.name}.", {
        "roll": roll,
        "abilityId": ability.id,
        "defenseType": ability.defense_type,
        "staminaCost": cost,
        "regenerated": regen,
        "inventory": dict(ps.defense_inventory),
    })


def pass_turn(match: Match, side: str) -> None:
    ps = match.combatant(side)
    if ledger.any_slot_usable(ps):
        raise PassNotAllowed("You still have a playable ability.")
    match.turn += 1
    regen = ledger.end_of_action(ps)
    match.current_turn = next_turn(side, TURN_PASSED)
    record_event(match, "turn-passed", side, f"{ps.character.nickname} passes the turn.", {"regenerated": regen})


def _finish(match: Match) -> None:
    winner = match.winner
    details = {"winner": winner}
    if match.automated_side is not None and winner != match.automated_side:
        details["xpReward"] = XP_REWARD
    winner_ps = match.sides.get(winner)
    name = winner_ps.character.nickname if winner_ps is not None else winner
    logger.info("room %s: %s wins", match.room_id, winner)
    record_event(match, "match-finished", winner, f"{name} wins the duel.", details)
