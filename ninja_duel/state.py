# ninja_duel/state.py
import logging
import random
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from .engine import resolver
from .engine.errors import ConcurrencyConflict, InvalidPhase
from .engine.models import SIDES, Action, BattleEvent, Match

logger = logging.getLogger(__name__)

Subscriber = Callable[[Match, List[BattleEvent]], None]


class MatchStore:
    """
    Authoritative, serialized writer for one match.

    Every write goes through apply(): one at a time under the lock, validated
    by the resolver, committed with a new version, then pushed to subscribers
    in commit order. A subscriber that raises is logged and skipped; the
    caller still gets the committed result. The committed Match is never
    mutated in place, so read() hands it out directly.
    """

    def __init__(self, match: Match, rng: Optional[random.Random] = None):
        self._match = match
        self._lock = threading.RLock()
        self._subscribers: List[Subscriber] = []
        self.rng = rng or random.Random()
        self.seats: Dict[str, str] = {}  # sid -> side

    @property
    def room_id(self) -> str:
        return self._match.room_id

    @property
    def version(self) -> int:
        return self._match.version

    def read(self) -> Match:
        return self._match

    def roll_die(self) -> int:
        # host-side roll; a rejected roll must not come back identical
        return self.rng.randint(1, 6)

    def apply(self, action: Action, expected_version: Optional[int] = None, dice=None) -> Tuple[Match, List[BattleEvent]]:
        with self._lock:
            current = self._match
            if expected_version is not None and expected_version != current.version:
                raise ConcurrencyConflict(
                    f"Match moved on (version {current.version}, expected {expected_version})."
                )
            new_match, events = resolver.apply_action(current, action, dice)
            self._match = new_match
            for subscriber in list(self._subscribers):
                # committed already; listener errors stay with the listener
                try:
                    subscriber(new_match, events)
                except Exception:
                    logger.exception("room %s: subscriber failed on v%s", new_match.room_id, new_match.version)
        return new_match, events

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        with self._lock:
            self._subscribers.append(subscriber)

        def unsubscribe():
            with self._lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def has_subscribers(self) -> bool:
        with self._lock:
            return bool(self._subscribers)

    def seat(self, sid: str) -> str:
        with self._lock:
            if sid in self.seats:
                return self.seats[sid]
            taken = set(self.seats.values())
            if self._match.automated_side is not None:
                taken.add(self._match.automated_side)
            for side in SIDES:
                if side not in taken:
                    self.seats[sid] = side
                    return side
        raise InvalidPhase("This duel room is full.")


duel_rooms: Dict[str, MatchStore] = {}
sid_to_room: Dict[str, str] = {}
_registry_lock = threading.Lock()


def new_seed() -> int:
    return int(time.time() * 1000) & 0xFFFFFFFF


def create_room(room_id: str, seed: Optional[int] = None, automated_side: Optional[str] = None) -> MatchStore:
    match = Match(
        room_id=room_id,
        seed=new_seed() if seed is None else seed,
        automated_side=automated_side,
    )
    store = MatchStore(match)
    with _registry_lock:
        duel_rooms[room_id] = store
    logger.info("room %s created (automated side: %s)", room_id, automated_side)
    return store


def get_or_create_room(room_id: str) -> MatchStore:
    with _registry_lock:
        store = duel_rooms.get(room_id)
        if store is None:
            store = MatchStore(Match(room_id=room_id, seed=new_seed()))
            duel_rooms[room_id] = store
            logger.info("room %s created", room_id)
    return store


def get_store(room_id: str) -> Optional[MatchStore]:
    return duel_rooms.get(room_id)


def join(store: MatchStore, sid: str) -> str:
    side = store.seat(sid)
    sid_to_room[sid] = store.room_id
    return side


def get_store_by_sid(sid: str) -> Optional[MatchStore]:
    room = sid_to_room.get(sid)
    if not room:
        return None
    return duel_rooms.get(room)


def cleanup_room(room_id: str) -> None:
    with _registry_lock:
        store = duel_rooms.pop(room_id, None)
    if not store:
        return
    for sid in list(store.seats):
        sid_to_room.pop(sid, None)
    logger.info("room %s closed", room_id)


def reset() -> None:
    with _registry_lock:
        duel_rooms.clear()
    sid_to_room.clear()
