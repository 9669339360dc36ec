# ninja_duel/engine/models.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import InvalidRoll

P1 = "player1"
P2 = "player2"
SIDES = (P1, P2)

WAITING = "waiting"
CHARACTER_SELECT = "character-select"
IN_PROGRESS = "inProgress"
FINISHED = "finished"
STATUS_ORDER = (WAITING, CHARACTER_SELECT, IN_PROGRESS, FINISHED)

DODGE = "dodge"
BLOCK = "block"
REFLECT = "reflect"
DEFENSE_TYPES = (DODGE, BLOCK, REFLECT)


def other_side(side: str) -> str:
    return P2 if side == P1 else P1


@dataclass(frozen=True)
class AttackAbility:
    id: str
    name: str
    value: int
    description: str = ""
    kind: str = field(default="attack", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind,
            "value": self.value,
            "description": self.description,
        }


@dataclass(frozen=True)
class DefenseAbility:
    id: str
    name: str
    defense_type: str
    value: int
    description: str = ""
    kind: str = field(default="defense", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.kind,
            "defenseType": self.defense_type,
            "value": self.value,
            "description": self.description,
        }


Ability = Union[AttackAbility, DefenseAbility]


@dataclass(frozen=True)
class Character:
    id: str
    nickname: str
    village: str
    specialty: str
    max_health: int
    abilities: Tuple[Ability, ...]

    def ability_for_roll(self, roll: int) -> Ability:
        if not 1 <= roll <= len(self.abilities):
            raise InvalidRoll(f"Roll must be 1..{len(self.abilities)}, got {roll}.")
        return self.abilities[roll - 1]

    def owns(self, ability_id: str) -> bool:
        return any(ability.id == ability_id for ability in self.abilities)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nickname": self.nickname,
            "village": self.village,
            "specialty": self.specialty,
            "baseHealth": self.max_health,
            "abilities": [ability.to_dict() for ability in self.abilities],
        }


@dataclass
class Buff:
    name: str
    effect: int
    remaining_turns: int

    def copy(self) -> "Buff":
        return Buff(name=self.name, effect=self.effect, remaining_turns=self.remaining_turns)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "effect": self.effect, "remainingTurns": self.remaining_turns}


@dataclass
class SkippedDefense:
    ability: AttackAbility
    damage: int


@dataclass
class Combatant:
    player_id: str
    character: Character
    current_health: int
    stamina: int
    ability_cooldowns: Dict[str, int] = field(default_factory=dict)
    defense_inventory: Dict[str, int] = field(default_factory=dict)
    active_buffs: List[Buff] = field(default_factory=list)
    skipped_defense: Optional[SkippedDefense] = None

    @property
    def max_health(self) -> int:
        return self.character.max_health

    def health_percent(self) -> float:
        return self.current_health / max(1, self.max_health) * 100


@dataclass
class LastAttack:
    ability: AttackAbility
    attacking_side: str
    damage: int          # final rolled damage, buffs included
    base_damage: int     # the raw draw before buffs
    is_critical: bool


@dataclass
class BattleEvent:
    turn: int
    kind: str
    side: Optional[str]
    message: str
    timestamp: str
    details: Dict[str, Any] = field(default_factory=dict)
    health: Dict[str, int] = field(default_factory=dict)
    stamina: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "turn": self.turn,
            "event": self.kind,
            "side": self.side,
            "message": self.message,
            "health": dict(self.health),
            "stamina": dict(self.stamina),
            "details": dict(self.details),
        }


@dataclass
class Match:
    room_id: str
    seed: int = 0                          # for replayable dice
    sides: Dict[str, Optional[Combatant]] = field(default_factory=lambda: {P1: None, P2: None})
    current_turn: str = P1
    game_status: str = WAITING
    winner: Optional[str] = None
    last_attack: Optional[LastAttack] = None
    dice_rolls: Dict[str, int] = field(default_factory=dict)
    automated_side: Optional[str] = None   # set in local (vs AI) mode
    turn: int = 0
    roll_index: int = 0
    log: List[str] = field(default_factory=list)
    battle_log: List[BattleEvent] = field(default_factory=list)
    version: int = 0

    def combatant(self, side: str) -> Combatant:
        combatant = self.sides.get(side)
        if combatant is None:
            raise LookupError(f"{side} has not selected a character")
        return combatant


# Actions submitted by a side (human, remote human, or the automated policy).

@dataclass(frozen=True)
class SelectCharacter:
    side: str
    player_id: str
    character_id: str
    buffs: Tuple[Buff, ...] = ()


@dataclass(frozen=True)
class RollFirstTurn:
    side: str
    roll: Optional[int] = None


@dataclass(frozen=True)
class RollAbility:
    side: str
    roll: Optional[int] = None


@dataclass(frozen=True)
class UseDefense:
    side: str
    defense_type: str


@dataclass(frozen=True)
class SkipDefense:
    side: str


@dataclass(frozen=True)
class PassTurn:
    side: str


@dataclass(frozen=True)
class Forfeit:
    side: str


Action = Union[SelectCharacter, RollFirstTurn, RollAbility, UseDefense, SkipDefense, PassTurn, Forfeit]
