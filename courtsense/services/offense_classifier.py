"""
Offense classification flow.

Ending an offense takes a few taps: turnover or shot, then shot type,
shooter, result, and for misses and fouls a follow-up step. Each step is an
immutable state value and each tap is a pure function returning the next
state, so impossible combinations (a rebound without a shot type, free
throws on a score) cannot be represented.

A flow ends in one of three outcomes:

* :class:`Completed` carries the result to record,
* :class:`Continued` means the offense goes on after an offensive rebound,
* :class:`Cancelled` means the user backed out.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..errors import FreeThrowValidationError, InvalidTransition
from ..models import FoulShot, OffenseResult, ResultType
from ..utils import FREE_THROW_SLOTS, SHOT_TYPES


class SlotState(Enum):
    """State of one free throw slot."""
    NOT_TAKEN = "not_taken"
    MADE = "made"
    MISSED = "missed"


# Flow steps -----------------------------------------------------------------

@dataclass(frozen=True)
class Idle:
    """No flow in progress."""


@dataclass(frozen=True)
class TurnoverEntry:
    player_id: Optional[str] = None


@dataclass(frozen=True)
class ShotTypeSelection:
    pass


@dataclass(frozen=True)
class PlayerAndResult:
    shot_type: int
    player_id: Optional[str] = None


@dataclass(frozen=True)
class ReboundSelection:
    shot_type: int
    player_id: Optional[str] = None


@dataclass(frozen=True)
class FreeThrowEntry:
    shot_type: int
    player_id: Optional[str] = None
    slots: Tuple[SlotState, ...] = (SlotState.NOT_TAKEN,) * FREE_THROW_SLOTS

    @property
    def taken_shots(self) -> Tuple[FoulShot, ...]:
        """Taken slots in slot order; not-taken slots are skipped."""
        return tuple(
            FoulShot(slot is SlotState.MADE)
            for slot in self.slots
            if slot is not SlotState.NOT_TAKEN
        )


# Outcomes -------------------------------------------------------------------

@dataclass(frozen=True)
class Completed:
    result: OffenseResult


@dataclass(frozen=True)
class Continued:
    result: OffenseResult


@dataclass(frozen=True)
class Cancelled:
    pass


FlowStep = Union[Idle, TurnoverEntry, ShotTypeSelection, PlayerAndResult, ReboundSelection, FreeThrowEntry]
FlowOutcome = Union[Completed, Continued, Cancelled]
Transition = Union[FlowStep, FlowOutcome]

IDLE = Idle()


def is_active(state: Transition) -> bool:
    """True while the flow is waiting for user input."""
    return isinstance(
        state, (TurnoverEntry, ShotTypeSelection, PlayerAndResult, ReboundSelection, FreeThrowEntry)
    )


def is_outcome(state: Transition) -> bool:
    return isinstance(state, (Completed, Continued, Cancelled))


def step_name(state: Transition) -> str:
    return type(state).__name__


def _require(state: Transition, expected, action: str) -> None:
    if not isinstance(state, expected):
        raise InvalidTransition(f"Cannot {action} during {step_name(state)}")


# Entry ----------------------------------------------------------------------

def begin_turnover(state: Transition) -> TurnoverEntry:
    _require(state, Idle, "start a turnover")
    return TurnoverEntry()


def begin_shot(state: Transition) -> ShotTypeSelection:
    _require(state, Idle, "start a shot")
    return ShotTypeSelection()


# Player assignment ----------------------------------------------------------

def select_player(state: Transition, player_id: Optional[str]) -> Union[TurnoverEntry, PlayerAndResult]:
    """Assign the result to a player, or to the team with ``None``."""
    _require(state, (TurnoverEntry, PlayerAndResult), "assign a player")
    return replace(state, player_id=player_id or None)


def confirm_turnover(state: Transition, player_id: Optional[str] = None) -> Completed:
    """Finish a turnover; ``player_id`` overrides an earlier selection."""
    _require(state, TurnoverEntry, "confirm a turnover")
    return Completed(OffenseResult.turnover(player_id or state.player_id))


# Shot path ------------------------------------------------------------------

def select_shot_type(state: Transition, shot_type: int) -> PlayerAndResult:
    _require(state, ShotTypeSelection, "choose a shot type")
    try:
        shot_type = int(shot_type)
    except (TypeError, ValueError):
        raise InvalidTransition(f"Shot type must be one of {SHOT_TYPES}") from None
    if shot_type not in SHOT_TYPES:
        raise InvalidTransition(f"Shot type must be one of {SHOT_TYPES}")
    return PlayerAndResult(shot_type=shot_type)


def select_result(
    state: Transition, result: Union[ResultType, str]
) -> Union[Completed, ReboundSelection, FreeThrowEntry]:
    """Pick score, miss or foul for the shot; scores finish immediately."""
    _require(state, PlayerAndResult, "choose a shot result")
    try:
        kind = ResultType(result)
    except ValueError:
        raise InvalidTransition(f"Unknown shot result: {result!r}") from None

    if kind is ResultType.SCORE:
        return Completed(OffenseResult.score(state.shot_type, state.player_id))
    if kind is ResultType.MISS:
        return ReboundSelection(shot_type=state.shot_type, player_id=state.player_id)
    if kind is ResultType.FOUL:
        return FreeThrowEntry(shot_type=state.shot_type, player_id=state.player_id)
    raise InvalidTransition("A shot cannot end in a turnover")


def select_rebound(state: Transition, offensive: bool) -> Union[Completed, Continued]:
    """Resolve a miss: offensive rebounds keep the offense alive."""
    _require(state, ReboundSelection, "choose a rebound")
    if not isinstance(offensive, bool):
        raise InvalidTransition(f"Rebound choice must be true or false, got {offensive!r}")
    result = OffenseResult.miss(state.shot_type, state.player_id, offensive_rebound=offensive)
    if offensive:
        return Continued(result)
    return Completed(result)


def toggle_free_throw(state: Transition, slot: int, made: Optional[bool]) -> FreeThrowEntry:
    """
    Set free throw ``slot`` (counted from 0) to made (True), missed (False)
    or not taken (None).

    Choosing the state a slot already has puts it back to not taken.
    """
    _require(state, FreeThrowEntry, "record a free throw")
    if isinstance(slot, bool) or not isinstance(slot, int) or not 0 <= slot < len(state.slots):
        raise InvalidTransition(f"Free throw slot must be between 0 and {len(state.slots) - 1}")
    if made is not None and not isinstance(made, bool):
        raise InvalidTransition(f"Free throw result must be true, false or null, got {made!r}")

    if made is None:
        target = SlotState.NOT_TAKEN
    else:
        target = SlotState.MADE if made else SlotState.MISSED
    if state.slots[slot] is target:
        target = SlotState.NOT_TAKEN

    slots = list(state.slots)
    slots[slot] = target
    return replace(state, slots=tuple(slots))


def confirm_free_throws(state: Transition) -> Completed:
    _require(state, FreeThrowEntry, "confirm free throws")
    shots = state.taken_shots
    if not shots:
        raise FreeThrowValidationError("Please indicate at least one free throw result")
    return Completed(OffenseResult.foul(state.shot_type, shots, state.player_id))


def back(state: Transition) -> PlayerAndResult:
    """Step back from the rebound or free throw step to the result choice."""
    _require(state, (ReboundSelection, FreeThrowEntry), "go back")
    return PlayerAndResult(shot_type=state.shot_type, player_id=state.player_id)


def cancel(state: Transition) -> Cancelled:
    if not is_active(state):
        raise InvalidTransition(f"Nothing to cancel during {step_name(state)}")
    return Cancelled()


# Named dispatch for callers that receive actions as data (the JSON API).
ACTIONS: Dict[str, Callable[..., Transition]] = {
    "select_player": select_player,
    "confirm_turnover": confirm_turnover,
    "select_shot_type": select_shot_type,
    "select_result": select_result,
    "select_rebound": select_rebound,
    "toggle_free_throw": toggle_free_throw,
    "confirm_free_throws": confirm_free_throws,
    "back": back,
    "cancel": cancel,
}


def apply_action(state: Transition, action: str, **params: Any) -> Transition:
    """Run a named transition with keyword parameters."""
    try:
        transition = ACTIONS[action]
    except KeyError:
        raise InvalidTransition(f"Unknown action: {action!r}") from None
    try:
        return transition(state, **params)
    except TypeError as exc:
        raise InvalidTransition(f"Bad parameters for {action}: {exc}") from None


def describe(state: Transition) -> Dict[str, Any]:
    """JSON-ready description of a flow step."""
    data: Dict[str, Any] = {"step": step_name(state), "active": is_active(state)}
    for attr in ("shot_type", "player_id"):
        if hasattr(state, attr):
            data[attr] = getattr(state, attr)
    if isinstance(state, FreeThrowEntry):
        data["slots"] = [slot.value for slot in state.slots]
    return data
