# ninja_duel/sockets.py
import logging

from flask import request
from flask_socketio import emit, join_room, leave_room

from . import state
from .content.balance import STAMINA
from .content.buffs import get_active_buffs_for
from .engine import opponent_ai
from .engine.errors import DuelError
from .engine.models import (
    CHARACTER_SELECT,
    DEFENSE_TYPES,
    FINISHED,
    IN_PROGRESS,
    P2,
    SIDES,
    Forfeit,
    PassTurn,
    RollAbility,
    RollFirstTurn,
    SelectCharacter,
    SkipDefense,
    UseDefense,
    other_side,
)
from .engine.resolver import pending_defender
from .engine.scheduler import OpponentTurnScheduler

logger = logging.getLogger(__name__)


def snapshot_for(match, viewer_side):
    """
    Read-only view of the match for one side (or a spectator when
    viewer_side is None).
    """

    def pack(side):
        ps = match.sides.get(side)
        if ps is None:
            return None
        return {
            "playerId": ps.player_id,
            "character": {
                "id": ps.character.id,
                "nickname": ps.character.nickname,
                "abilities": [ability.to_dict() for ability in ps.character.abilities],
            },
            "health": ps.current_health,
            "maxHealth": ps.max_health,
            "stamina": ps.stamina,
            "staminaMax": STAMINA["max"],
            "defenseInventory": {dtype: int(ps.defense_inventory.get(dtype, 0)) for dtype in DEFENSE_TYPES},
            "activeBuffs": [buff.to_dict() for buff in ps.active_buffs],
            "abilityCooldowns": dict(ps.ability_cooldowns),
            "skippedDefense": (
                {"ability": ps.skipped_defense.ability.to_dict(), "damage": ps.skipped_defense.damage}
                if ps.skipped_defense else None
            ),
        }

    last = match.last_attack
    return {
        "roomId": match.room_id,
        "version": match.version,
        "status": match.game_status,
        "turn": match.turn,
        "currentTurn": match.current_turn if match.game_status == IN_PROGRESS else None,
        "you": viewer_side,
        "yourTurn": match.game_status == IN_PROGRESS and match.current_turn == viewer_side,
        "mustDefend": viewer_side is not None and pending_defender(match) == viewer_side,
        "winner": match.winner,
        "players": {side: pack(side) for side in SIDES},
        "lastAttack": {
            "ability": last.ability.to_dict(),
            "attackingSide": last.attacking_side,
            "damage": last.damage,
            "isCritical": last.is_critical,
        } if last else None,
        "diceRolls": dict(match.dice_rolls) if match.game_status == CHARACTER_SELECT else {},
        "log": match.log[-30:],
        "log_length": len(match.log),
    }


def _payload(payload):
    return payload if isinstance(payload, dict) else {}


def register_duel_socket_handlers(socketio, scheduler=None):
    scheduler = scheduler or OpponentTurnScheduler(
        spawn=socketio.start_background_task,
        sleep=socketio.sleep,
    )

    def broadcast(store, match, events):
        for sid, side in list(store.seats.items()):
            socketio.emit("duel_snapshot", snapshot_for(match, side), to=sid)
        for event in events:
            socketio.emit("duel_system", event.message, to=match.room_id)
        if match.game_status == FINISHED:
            scheduler.cancel(match.room_id)
        elif opponent_ai.has_move(match, match.automated_side):
            scheduler.schedule(match.room_id, lambda: run_opponent_turn(match.room_id))

    def watch(store):
        if store.has_subscribers():
            return
        store.subscribe(lambda match, events: broadcast(store, match, events))

    def run_opponent_turn(room_id):
        store = state.get_store(room_id)
        if store is None:
            return
        match = store.read()
        side = match.automated_side
        if not opponent_ai.has_move(match, side):
            logger.warning("room %s: opponent move no longer valid, dropped", room_id)
            return
        action = opponent_ai.plan_move(match, side, store.rng)
        if action is None:
            return
        try:
            store.apply(action, expected_version=match.version)
        except DuelError as exc:
            logger.warning("room %s: stale opponent move dropped (%s)", room_id, exc.code)

    def submit(build_action):
        sid = request.sid
        store = state.get_store_by_sid(sid)
        if not store:
            emit("duel_error", {"code": "not_in_duel", "message": "Not in a duel."})
            return
        side = store.seats.get(sid)
        try:
            action = build_action(store, side)
            store.apply(action)
        except DuelError as exc:
            logger.warning("room %s: %s rejected: %s", store.room_id, side, exc.code)
            emit("duel_error", {"code": exc.code, "message": exc.message})

    @socketio.on("duel_join")
    def duel_join(payload=None):
        payload = _payload(payload)
        sid = request.sid
        room_id = str(payload.get("room_id") or "").strip()
        if not room_id:
            emit("duel_error", {"code": "missing_room", "message": "A room id is required."})
            return
        if state.get_store_by_sid(sid):
            emit("duel_system", "Already in a duel.")
            return
        store = state.get_or_create_room(room_id)
        try:
            side = state.join(store, sid)
        except DuelError as exc:
            emit("duel_error", {"code": exc.code, "message": exc.message})
            return
        join_room(room_id)
        watch(store)
        emit("duel_joined", {"room_id": room_id, "side": side})
        emit("duel_snapshot", snapshot_for(store.read(), side))
        socketio.emit("duel_system", f"{side} joined the duel.", to=room_id)

    @socketio.on("duel_vs_ai")
    def duel_vs_ai(payload=None):
        sid = request.sid
        if state.get_store_by_sid(sid):
            emit("duel_system", "Already in a duel.")
            return
        room_id = f"duel-{sid[:5]}-ai"
        store = state.create_room(room_id, automated_side=P2)
        side = state.join(store, sid)
        join_room(room_id)
        watch(store)
        emit("duel_joined", {"room_id": room_id, "side": side})
        emit("duel_snapshot", snapshot_for(store.read(), side))
        scheduler.schedule(room_id, lambda: run_opponent_turn(room_id))

    @socketio.on("duel_select_character")
    def duel_select_character(payload=None):
        payload = _payload(payload)

        def build(store, side):
            character_id = str(payload.get("character_id") or "")
            player_id = str(payload.get("player_id") or request.sid)
            buffs = tuple(get_active_buffs_for(player_id, character_id))
            return SelectCharacter(side=side, player_id=player_id, character_id=character_id, buffs=buffs)

        submit(build)

    @socketio.on("duel_first_roll")
    def duel_first_roll(payload=None):
        submit(lambda store, side: RollFirstTurn(side=side, roll=store.roll_die()))

    @socketio.on("duel_roll")
    def duel_roll(payload=None):
        submit(lambda store, side: RollAbility(side=side, roll=store.roll_die()))

    @socketio.on("duel_defend")
    def duel_defend(payload=None):
        payload = _payload(payload)

        def build(store, side):
            defense_type = payload.get("defense_type")
            if not defense_type:
                return SkipDefense(side=side)
            return UseDefense(side=side, defense_type=str(defense_type))

        submit(build)

    @socketio.on("duel_pass")
    def duel_pass(payload=None):
        submit(lambda store, side: PassTurn(side=side))

    @socketio.on("disconnect")
    def duel_disconnect(reason=None):
        sid = request.sid
        store = state.get_store_by_sid(sid)
        if not store:
            return
        room_id = store.room_id
        side = store.seats.get(sid)
        scheduler.cancel(room_id)
        match = store.read()
        if match.game_status in (CHARACTER_SELECT, IN_PROGRESS):
            try:
                store.apply(Forfeit(side=side))
                logger.info("room %s: %s disconnected, %s wins by forfeit", room_id, side, other_side(side))
            except DuelError as exc:
                logger.warning("room %s: forfeit on disconnect rejected (%s)", room_id, exc.code)
        leave_room(room_id)
        socketio.emit("duel_system", "Opponent disconnected. Duel ended.", to=room_id)
        state.cleanup_room(room_id)
