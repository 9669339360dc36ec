# ninja_duel/routes.py
from flask import Blueprint, abort, jsonify, request

from . import state
from .content.buffs import BUFFS
from .content.characters import catalog_payload
from .engine.battle_log import export_battle_log
from .engine.models import SIDES
from .sockets import snapshot_for

duel_bp = Blueprint("duel", __name__)


@duel_bp.route("/duel/characters")
def duel_characters():
    return jsonify(catalog_payload())


@duel_bp.route("/duel/buffs")
def duel_buffs():
    return jsonify([{"id": buff_id, **data} for buff_id, data in BUFFS.items()])


@duel_bp.route("/duel/<room_id>")
def duel_snapshot(room_id):
    store = state.get_store(room_id)
    if store is None:
        abort(404)
    side = request.args.get("side")
    return jsonify(snapshot_for(store.read(), side if side in SIDES else None))


@duel_bp.route("/duel/<room_id>/log")
def duel_log(room_id):
    store = state.get_store(room_id)
    if store is None:
        abort(404)
    return jsonify(export_battle_log(store.read()))
