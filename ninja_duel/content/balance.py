# ninja_duel/content/balance.py
import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


STAMINA = {
    "max": _env_int("DUEL_STAMINA_MAX", 100),
    "starting": _env_int("DUEL_STAMINA_STARTING", 100),
    "regen_per_turn": _env_int("DUEL_STAMINA_REGEN", 8),
    "critical_hit_reward": _env_int("DUEL_CRIT_REWARD", 20),
    "cooldown_turns": _env_int("DUEL_COOLDOWN_TURNS", 2),
}

# attack base value -> stamina cost
STAMINA_COSTS = {
    20: 15,
    25: 20,
    30: 30,
    35: 50,
}

DEFAULT_ATTACK_COST = 20
DEFENSE_COST = 10
COOLDOWN_ABILITY_VALUE = 35

DAMAGE = {
    "spread": 5,        # roll range is base +/- spread
    "min_damage": 1,
    "crit_margin": 3,   # base+3 .. base+5 is a critical hit
}

DEFENSE = {
    "block_reduction": 25,
    "max_charges": 2,
}

AI = {
    "player_id": "ai-opponent",
    "think_delay_min": 1.0,
    "think_delay_max": 1.5,
    "defense_threshold": 15,
    "max_rerolls": 6,
}

XP_REWARD = 50
