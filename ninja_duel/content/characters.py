# ninja_duel/content/characters.py
from typing import Dict, List, Tuple

from ..engine.errors import UnknownCharacter, UnknownDefenseType
from ..engine.models import AttackAbility, Character, DefenseAbility, DEFENSE_TYPES

BASE_HEALTH = 200

VILLAGES = {
    "hidden_leaf": "Hidden Leaf",
    "hidden_sand": "Hidden Sand",
    "hidden_mist": "Hidden Mist",
    "hidden_cloud": "Hidden Cloud",
}

ELEMENT_JUTSU = {
    "fire": ("Fire Style: Fireball Jutsu", "Fire Style: Phoenix Sage Fire"),
    "water": ("Water Style: Water Dragon Jutsu", "Water Style: Water Prison"),
    "wind": ("Wind Style: Gale Palm", "Wind Style: Vacuum Blade"),
    "earth": ("Earth Style: Earth Wall", "Earth Style: Mudslide"),
    "lightning": ("Lightning Style: Chidori", "Lightning Style: Lightning Net"),
}

WEAPON_TECHNIQUES = {
    "Scythe": ("Reaper's Sweep", "Deadly Arc"),
    "Sword": ("Blade Rush", "Whirlwind Slash"),
    "Kunai": ("Kunai Flurry", "Piercing Fang"),
    "Shuriken": ("Demon Wind Shuriken", "Shadow Shuriken Barrage"),
}

ATTACK_VALUES = (20, 25, 30, 35)
DEFENSE_VALUES = (25, 30)

# id -> (nickname, weapon, (def1 name, def1 type), (def2 name, def2 type))
ROSTER: Dict[str, Tuple[str, str, Tuple[str, str], Tuple[str, str]]] = {
    "hidden_leaf-fire": ("Blazefang", "Scythe", ("Chakra Mirror", "dodge"), ("Substitution Jutsu", "reflect")),
    "hidden_leaf-water": ("Stillmist", "Scythe", ("Substitution Jutsu", "dodge"), ("Chakra Mirror", "reflect")),
    "hidden_leaf-wind": ("Galecut", "Scythe", ("Substitution Jutsu", "block"), ("Stone Shield", "dodge")),
    "hidden_leaf-earth": ("Gravemark", "Sword", ("Chakra Mirror", "dodge"), ("Substitution Jutsu", "reflect")),
    "hidden_leaf-lightning": ("Boltveil", "Sword", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
    "hidden_sand-fire": ("Cindershard", "Kunai", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
    "hidden_sand-water": ("Miragebite", "Shuriken", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_sand-wind": ("Dustveil", "Shuriken", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_sand-earth": ("Cragthorn", "Kunai", ("Stone Shield", "block"), ("Substitution Jutsu", "dodge")),
    "hidden_sand-lightning": ("Shocklash", "Shuriken", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_mist-fire": ("Smokejaw", "Shuriken", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
    "hidden_mist-water": ("Frostrill", "Sword", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_mist-wind": ("Ripplecut", "Scythe", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_mist-earth": ("Mudveil", "Sword", ("Substitution Jutsu", "block"), ("Stone Shield", "dodge")),
    "hidden_mist-lightning": ("Mistvolt", "Sword", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
    "hidden_cloud-fire": ("Brandclap", "Shuriken", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
    "hidden_cloud-water": ("Raindrift", "Kunai", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_cloud-wind": ("Stormshade", "Scythe", ("Stone Shield", "block"), ("Chakra Mirror", "reflect")),
    "hidden_cloud-earth": ("Stonewire", "Scythe", ("Stone Shield", "block"), ("Substitution Jutsu", "dodge")),
    "hidden_cloud-lightning": ("Blinkrend", "Sword", ("Chakra Mirror", "block"), ("Stone Shield", "reflect")),
}


def build_character(character_id: str) -> Character:
    """
    Expands one roster row into a Character with its six die-slot abilities:
    slots 1-4 are attacks (20/25/30/35), slots 5-6 are defenses.
    """
    if character_id not in ROSTER:
        raise UnknownCharacter(f"Unknown character '{character_id}'.")
    nickname, weapon, def1, def2 = ROSTER[character_id]
    village_id, element = character_id.split("-", 1)
    village = VILLAGES[village_id]
    element_name = element.title()

    attack_names = ELEMENT_JUTSU[element] + WEAPON_TECHNIQUES[weapon]
    abilities: List = []
    for idx, (name, value) in enumerate(zip(attack_names, ATTACK_VALUES), start=1):
        abilities.append(AttackAbility(
            id=f"{character_id}-atk{idx}",
            name=name,
            value=value,
            description=f"Executes {name} using {element_name} chakra and {weapon.lower()} mastery",
        ))
    for idx, ((name, defense_type), value) in enumerate(zip((def1, def2), DEFENSE_VALUES), start=1):
        if defense_type not in DEFENSE_TYPES:
            raise UnknownDefenseType(f"{character_id}-def{idx} has defense type '{defense_type}'.")
        abilities.append(DefenseAbility(
            id=f"{character_id}-def{idx}",
            name=name,
            defense_type=defense_type,
            value=value,
            description=f"Uses {defense_type} technique for defense",
        ))

    return Character(
        id=character_id,
        nickname=nickname,
        village=village,
        specialty=f"{element_name} Style {weapon} Specialist from {village}",
        max_health=BASE_HEALTH,
        abilities=tuple(abilities),
    )


CHARACTERS: Dict[str, Character] = {cid: build_character(cid) for cid in ROSTER}


def get_character(character_id: str) -> Character:
    character = CHARACTERS.get(character_id)
    if character is None:
        raise UnknownCharacter(f"Unknown character '{character_id}'.")
    return character


def catalog_payload() -> List[Dict]:
    return [character.to_dict() for character in CHARACTERS.values()]
