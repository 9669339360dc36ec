# ninja_duel/engine/ledger.py
from typing import List

from . import inventory
from .errors import InsufficientResource, OnCooldown
from .models import Ability, AttackAbility, Buff, Combatant, DefenseAbility
from .rules import clamp
from ..content.balance import (
    COOLDOWN_ABILITY_VALUE,
    DEFAULT_ATTACK_COST,
    DEFENSE_COST,
    STAMINA,
    STAMINA_COSTS,
)


def stamina_cost(ability: Ability) -> int:
    if not isinstance(ability, AttackAbility):
        return DEFENSE_COST
    return STAMINA_COSTS.get(ability.value, DEFAULT_ATTACK_COST)


def can_afford(ps: Combatant, ability: Ability) -> bool:
    return ps.stamina >= stamina_cost(ability)


def is_on_cooldown(ps: Combatant, ability_id: str) -> bool:
    return ps.ability_cooldowns.get(ability_id, 0) > 0


def check_usable(ps: Combatant, ability: Ability) -> None:
    """Raises the rejection a player would see for this ability right now."""
    if isinstance(ability, AttackAbility) and is_on_cooldown(ps, ability.id):
        remaining = ps.ability_cooldowns[ability.id]
        raise OnCooldown(f"{ability.name} is on cooldown for {remaining} more turn(s).")
    cost = stamina_cost(ability)
    if ps.stamina < cost:
        raise InsufficientResource(f"Not enough stamina for {ability.name} ({ps.stamina}/{cost}).")


def spend(ps: Combatant, cost: int) -> None:
    if ps.stamina < cost:
        raise InsufficientResource(f"Not enough stamina ({ps.stamina}/{cost}).")
    ps.stamina = clamp(ps.stamina - cost, 0, STAMINA["max"])


def restore(ps: Combatant, amount: int) -> int:
    before = ps.stamina
    ps.stamina = clamp(ps.stamina + amount, 0, STAMINA["max"])
    return ps.stamina - before


def reward_critical(ps: Combatant) -> int:
    return restore(ps, STAMINA["critical_hit_reward"])


def tick_cooldowns(ps: Combatant) -> None:
    updated = {}
    for ability_id, remaining in ps.ability_cooldowns.items():
        remaining_turns = int(remaining) - 1
        if remaining_turns > 0:
            updated[ability_id] = remaining_turns
    ps.ability_cooldowns = updated


def end_of_action(ps: Combatant) -> int:
    """
    Bookkeeping for one of this side's own resolved actions:
    per-turn regeneration and cooldown decay. Returns stamina regained.
    """
    tick_cooldowns(ps)
    return restore(ps, STAMINA["regen_per_turn"])


def start_cooldown(ps: Combatant, ability: Ability) -> None:
    if isinstance(ability, AttackAbility) and ability.value == COOLDOWN_ABILITY_VALUE:
        ps.ability_cooldowns[ability.id] = STAMINA["cooldown_turns"]


def consume_buffs(ps: Combatant) -> int:
    """Sums buff effects for this attack, then ages every applied buff by one."""
    if not ps.active_buffs:
        return 0
    bonus = sum(int(buff.effect) for buff in ps.active_buffs)
    remaining: List[Buff] = []
    for buff in ps.active_buffs:
        turns = int(buff.remaining_turns) - 1
        if turns > 0:
            remaining.append(Buff(name=buff.name, effect=buff.effect, remaining_turns=turns))
    ps.active_buffs = remaining
    return bonus


def slot_usable(ps: Combatant, roll: int) -> bool:
    ability = ps.character.ability_for_roll(roll)
    if isinstance(ability, AttackAbility):
        return not is_on_cooldown(ps, ability.id) and can_afford(ps, ability)
    if isinstance(ability, DefenseAbility):
        return inventory.can_add(ps, ability.defense_type) and can_afford(ps, ability)
    return False


def usable_slots(ps: Combatant) -> List[int]:
    return [roll for roll in range(1, len(ps.character.abilities) + 1) if slot_usable(ps, roll)]


def any_slot_usable(ps: Combatant) -> bool:
    return bool(usable_slots(ps))
