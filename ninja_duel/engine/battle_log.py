# ninja_duel/engine/battle_log.py
"""
Structured battle log.

Every resolver step appends one BattleEvent to match.battle_log next to the
plain text line in match.log. Each entry carries the health and stamina of
both sides at the moment it was written, so an exported log can be replayed
as a timeline without the match object.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .models import SIDES, BattleEvent, Match


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _side_values(match: Match, attr: str) -> Dict[str, int]:
    values = {}
    for side in SIDES:
        ps = match.sides.get(side)
        if ps is not None:
            values[side] = int(getattr(ps, attr))
    return values


def record_event(
    match: Match,
    kind: str,
    side: Optional[str],
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> BattleEvent:
    event = BattleEvent(
        turn=match.turn,
        kind=kind,
        side=side,
        message=message,
        timestamp=_now(),
        details=dict(details or {}),
        health=_side_values(match, "current_health"),
        stamina=_side_values(match, "stamina"),
    )
    match.battle_log.append(event)
    match.log.append(message)
    return event


def export_battle_log(match: Match) -> Dict[str, Any]:
    players = {}
    for side in SIDES:
        ps = match.sides.get(side)
        if ps is None:
            players[side] = None
            continue
        players[side] = {
            "playerId": ps.player_id,
            "characterId": ps.character.id,
            "nickname": ps.character.nickname,
            "maxHealth": ps.max_health,
            "finalHealth": ps.current_health,
            "finalStamina": ps.stamina,
        }
    return {
        "gameInfo": {
            "roomId": match.room_id,
            "seed": match.seed,
            "status": match.game_status,
            "winner": match.winner,
            "turns": match.turn,
            "automatedSide": match.automated_side,
            "players": players,
            "exportedAt": _now(),
        },
        "entries": [event.to_dict() for event in match.battle_log],
    }
