# ninja_duel/content/buffs.py
from typing import Dict, List, Tuple

from ..engine.models import Buff

# Shop powerups; one per village per power level.
BUFFS: Dict[str, Dict] = {
    "kunai_precision": {"name": "Kunai Precision", "effect": 5, "duration": 3, "price": 150, "village": "hidden_leaf"},
    "sand_shield": {"name": "Sand Shield", "effect": 5, "duration": 3, "price": 150, "village": "hidden_sand"},
    "water_shuriken": {"name": "Water Shuriken", "effect": 5, "duration": 3, "price": 150, "village": "hidden_mist"},
    "static_kunai": {"name": "Static Kunai", "effect": 5, "duration": 3, "price": 150, "village": "hidden_cloud"},
    "basic_chakra_control": {"name": "Basic Chakra Control", "effect": 10, "duration": 3, "price": 250, "village": "hidden_leaf"},
    "desert_step": {"name": "Desert Step", "effect": 10, "duration": 3, "price": 250, "village": "hidden_sand"},
    "mist_veil": {"name": "Mist Veil", "effect": 10, "duration": 3, "price": 250, "village": "hidden_mist"},
    "lightning_step": {"name": "Lightning Step", "effect": 10, "duration": 3, "price": 250, "village": "hidden_cloud"},
    "leaf_whirlwind": {"name": "Leaf Whirlwind", "effect": 15, "duration": 4, "price": 400, "village": "hidden_leaf"},
    "sand_blade_technique": {"name": "Sand Blade Technique", "effect": 15, "duration": 4, "price": 400, "village": "hidden_sand"},
    "aqua_blade_formation": {"name": "Aqua Blade Formation", "effect": 15, "duration": 4, "price": 400, "village": "hidden_mist"},
    "electric_palm_strike": {"name": "Electric Palm Strike", "effect": 15, "duration": 4, "price": 400, "village": "hidden_cloud"},
    "shadow_clone_tactics": {"name": "Shadow Clone Tactics", "effect": 20, "duration": 4, "price": 600, "village": "hidden_leaf"},
    "granule_barrage": {"name": "Granule Barrage", "effect": 20, "duration": 4, "price": 600, "village": "hidden_sand"},
    "water_wall_defense": {"name": "Water Wall Defense", "effect": 20, "duration": 4, "price": 600, "village": "hidden_mist"},
    "thunder_charge": {"name": "Thunder Charge", "effect": 20, "duration": 4, "price": 600, "village": "hidden_cloud"},
    "advanced_chakra_infusion": {"name": "Advanced Chakra Infusion", "effect": 25, "duration": 5, "price": 850, "village": "hidden_leaf"},
    "hardened_sand_armor": {"name": "Hardened Sand Armor", "effect": 25, "duration": 5, "price": 850, "village": "hidden_sand"},
    "hydro_step_mastery": {"name": "Hydro Step Mastery", "effect": 25, "duration": 5, "price": 850, "village": "hidden_mist"},
    "storm_edge_technique": {"name": "Storm Edge Technique", "effect": 25, "duration": 5, "price": 850, "village": "hidden_cloud"},
}

# (player_id, character_id) -> buffs bought for that character and not yet used up
_owned: Dict[Tuple[str, str], List[Buff]] = {}


def build_buff(buff_id: str) -> Buff:
    data = BUFFS.get(buff_id)
    if data is None:
        raise KeyError(f"Unknown buff '{buff_id}'")
    return Buff(name=data["name"], effect=data["effect"], remaining_turns=data["duration"])


def grant_buff(player_id: str, character_id: str, buff_id: str) -> Buff:
    buff = build_buff(buff_id)
    _owned.setdefault((player_id, character_id), []).append(buff)
    return buff


def get_active_buffs_for(player_id: str, character_id: str) -> List[Buff]:
    """Copies, so a match never mutates the owner's stored bonuses."""
    return [buff.copy() for buff in _owned.get((player_id, character_id), [])]


def clear_owned() -> None:
    _owned.clear()
