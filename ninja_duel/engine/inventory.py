# ninja_duel/engine/inventory.py
from .errors import DefenseUnavailable, DuplicateDefense, InventoryFull, UnknownDefenseType
from .models import DEFENSE_TYPES, Combatant
from ..content.balance import DEFENSE


def total(ps: Combatant) -> int:
    return sum(int(count) for count in ps.defense_inventory.values())


def has_any(ps: Combatant) -> bool:
    return total(ps) > 0


def count(ps: Combatant, defense_type: str) -> int:
    return int(ps.defense_inventory.get(defense_type, 0))


def check_type(defense_type: str) -> None:
    if defense_type not in DEFENSE_TYPES:
        raise UnknownDefenseType(f"unknown defense type: {defense_type!r}")


def check_can_add(ps: Combatant, defense_type: str) -> None:
    check_type(defense_type)
    if count(ps, defense_type) > 0:
        raise DuplicateDefense(f"{defense_type.title()} is already stored.")
    if total(ps) >= DEFENSE["max_charges"]:
        raise InventoryFull(f"Defense inventory is full ({DEFENSE['max_charges']} charges).")


def can_add(ps: Combatant, defense_type: str) -> bool:
    if defense_type not in DEFENSE_TYPES:
        return False
    return count(ps, defense_type) == 0 and total(ps) < DEFENSE["max_charges"]


def add_defense(ps: Combatant, defense_type: str) -> None:
    check_can_add(ps, defense_type)
    ps.defense_inventory[defense_type] = count(ps, defense_type) + 1


def consume(ps: Combatant, defense_type: str) -> None:
    """Removes exactly one charge of defense_type; other types are untouched."""
    check_type(defense_type)
    remaining = count(ps, defense_type)
    if remaining <= 0:
        raise DefenseUnavailable(f"No {defense_type} charge stored.")
    if remaining == 1:
        ps.defense_inventory.pop(defense_type, None)
    else:
        ps.defense_inventory[defense_type] = remaining - 1
