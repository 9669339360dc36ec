import random

import pytest
from flask import Flask
from flask_socketio import SocketIO

from ninja_duel import init_duel, state
from ninja_duel.content.balance import AI
from ninja_duel.content.buffs import clear_owned, grant_buff
from ninja_duel.engine import ledger
from ninja_duel.engine.models import CHARACTER_SELECT, FINISHED, IN_PROGRESS, P1, P2, SIDES
from ninja_duel.engine.resolver import pending_defender
from ninja_duel.engine.scheduler import OpponentTurnScheduler


@pytest.fixture
def duel_app():
    state.reset()
    clear_owned()
    app = Flask(__name__)
    app.config["TESTING"] = True
    socketio = SocketIO(app)
    # opponent moves run inline, without the thinking delay
    scheduler = OpponentTurnScheduler(spawn=lambda fn: fn(), sleep=lambda seconds: None)
    init_duel(app, socketio, scheduler=scheduler)
    yield app, socketio
    state.reset()
    clear_owned()


def drain(client):
    out = {}
    for message in client.get_received():
        out.setdefault(message["name"], []).append(message["args"][0])
    return out


def start_duel(store, clients, limit=50):
    for _ in range(limit):
        if store.read().game_status == IN_PROGRESS:
            return
        for client in clients:
            client.emit("duel_first_roll")
    raise AssertionError("first-turn rolls never resolved")


def test_catalog_routes(duel_app):
    app, _ = duel_app
    http = app.test_client()

    characters = http.get("/duel/characters").get_json()
    assert len(characters) == 20
    assert all(len(character["abilities"]) == 6 for character in characters)

    buffs = http.get("/duel/buffs").get_json()
    assert len(buffs) == 20
    assert {"id", "name", "effect", "duration", "price", "village"} <= set(buffs[0])

    assert http.get("/duel/missing-room").status_code == 404
    assert http.get("/duel/missing-room/log").status_code == 404


def test_action_outside_a_duel_is_rejected(duel_app):
    app, socketio = duel_app
    client = socketio.test_client(app)
    client.emit("duel_roll")
    errors = drain(client)["duel_error"]
    assert errors[0]["code"] == "not_in_duel"


def test_remote_duel_flow(duel_app):
    app, socketio = duel_app
    c1 = socketio.test_client(app)
    c2 = socketio.test_client(app)

    c1.emit("duel_join", {"room_id": "duel-test"})
    c2.emit("duel_join", {"room_id": "duel-test"})
    assert drain(c1)["duel_joined"][0]["side"] == P1
    assert drain(c2)["duel_joined"][0]["side"] == P2

    grant_buff("wallet-1", "hidden_sand-earth", "kunai_precision")
    c1.emit("duel_select_character", {"character_id": "hidden_sand-earth", "player_id": "wallet-1"})
    c2.emit("duel_select_character", {"character_id": "hidden_leaf-fire", "player_id": "wallet-2"})
    snapshots = drain(c1)["duel_snapshot"]
    assert snapshots[-1]["status"] == CHARACTER_SELECT
    assert snapshots[-1]["players"][P1]["activeBuffs"][0]["name"] == "Kunai Precision"

    c2.emit("duel_select_character", {"character_id": "hidden_mist-fire"})
    assert drain(c2)["duel_error"][-1]["code"] == "invalid_phase"

    store = state.get_store("duel-test")
    store.rng = random.Random(4)
    start_duel(store, [c1, c2])
    drain(c1)
    drain(c2)

    clients = {P1: c1, P2: c2}
    current = store.read().current_turn
    waiting = P2 if current == P1 else P1

    clients[waiting].emit("duel_roll")
    assert drain(clients[waiting])["duel_error"][0]["code"] == "invalid_turn"

    clients[current].emit("duel_pass")
    assert drain(clients[current])["duel_error"][0]["code"] == "pass_not_allowed"

    version = store.version
    clients[current].emit("duel_roll")
    assert store.version == version + 1
    seen_by_current = drain(clients[current])["duel_snapshot"][-1]
    seen_by_waiting = drain(clients[waiting])["duel_snapshot"][-1]
    assert seen_by_current["you"] == current and seen_by_waiting["you"] == waiting
    assert seen_by_current["version"] == seen_by_waiting["version"] == store.version

    http = app.test_client()
    snapshot = http.get("/duel/duel-test?side=player1").get_json()
    assert snapshot["you"] == P1 and snapshot["status"] == IN_PROGRESS

    c2.disconnect()
    remaining = drain(c1)
    assert remaining["duel_snapshot"][-1]["winner"] == P1
    assert "Opponent disconnected. Duel ended." in remaining["duel_system"]
    assert state.get_store("duel-test") is None


def test_duel_against_automated_opponent(duel_app):
    app, socketio = duel_app
    client = socketio.test_client(app)

    client.emit("duel_vs_ai")
    room_id = drain(client)["duel_joined"][0]["room_id"]
    store = state.get_store(room_id)
    assert store.read().combatant(P2).player_id == AI["player_id"]

    client.emit("duel_select_character", {"character_id": "hidden_cloud-earth", "player_id": "wallet-9"})
    assert P2 in store.read().dice_rolls
    store.rng = random.Random(21)
    start_duel(store, [client])

    for _ in range(600):
        match = store.read()
        if match.game_status == FINISHED:
            break
        assert match.current_turn == P1, "the opponent never keeps the turn between human actions"
        if pending_defender(match) == P1:
            client.emit("duel_defend", {"defense_type": None})
        elif not ledger.any_slot_usable(match.combatant(P1)):
            client.emit("duel_pass")
        else:
            client.emit("duel_roll")
    match = store.read()
    assert match.game_status == FINISHED
    assert match.winner in SIDES

    exported = app.test_client().get(f"/duel/{room_id}/log").get_json()
    assert exported["gameInfo"]["status"] == FINISHED
    assert exported["gameInfo"]["automatedSide"] == P2
    assert exported["entries"][-1]["event"] == "match-finished"
