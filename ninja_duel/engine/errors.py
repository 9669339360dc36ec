# ninja_duel/engine/errors.py


class DuelError(Exception):
    """Base for every rejected action. The match is left untouched."""

    code = "duel_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidTurn(DuelError):
    code = "invalid_turn"


class InsufficientResource(DuelError):
    code = "insufficient_resource"


class OnCooldown(DuelError):
    code = "on_cooldown"


class DuplicateDefense(DuelError):
    code = "duplicate_defense"


class InventoryFull(DuelError):
    code = "inventory_full"


class UnknownDefenseType(DuelError):
    """Malformed catalog data. Surfaced to the host, never defaulted."""

    code = "unknown_defense_type"


class AlreadyFinished(DuelError):
    code = "already_finished"


class InvalidPhase(DuelError):
    code = "invalid_phase"


class NoPendingAttack(DuelError):
    code = "no_pending_attack"


class DefensePending(DuelError):
    code = "defense_pending"


class DefenseUnavailable(DuelError):
    code = "defense_unavailable"


class UnknownCharacter(DuelError):
    code = "unknown_character"


class CharacterAlreadySelected(DuelError):
    code = "character_already_selected"


class ConcurrencyConflict(DuelError):
    code = "concurrency_conflict"


class InvalidRoll(DuelError):
    code = "invalid_roll"


class PassNotAllowed(DuelError):
    """Passing is only for a side with no playable slot left."""

    code = "pass_not_allowed"
