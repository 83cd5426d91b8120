"""
Live offense session for the Court Sense offense tracker.

A session is the sideline view of one game: the offense clock, the pass
counter, who is on the court and the classification flow in progress. All
of that ephemeral state lives in one :class:`SessionState` value; recorded
offenses live on the :class:`Game` and are persisted through the
:class:`GameRepository`.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import InvalidTransition, LineupError, LineupFullError, LineupLockedError
from ..models import Game, Offense, OffenseResult
from ..utils import MAX_PLAYERS_ON_COURT, new_id, now_ms
from . import offense_classifier as flow
from .offense_classifier import IDLE, FlowStep
from .clock_service import OffenseClock
from .persistence_service import GameRepository
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class PassCounter:
    """Counts passes in the live offense; never drops below zero."""

    def __init__(self, count: int = 0):
        self.count = max(0, int(count))

    def increment(self) -> int:
        self.count += 1
        return self.count

    def decrement(self) -> int:
        self.count = max(0, self.count - 1)
        return self.count

    def reset(self) -> None:
        self.count = 0


@dataclass
class _PreEntry:
    """Clock and pass values captured when a flow starts."""
    elapsed_ms: int
    passes: int


@dataclass
class SessionState:
    """Everything about the live offense that is not yet recorded."""
    clock: OffenseClock
    passes: PassCounter = field(default_factory=PassCounter)
    players_on_court: List[str] = field(default_factory=list)
    flow: FlowStep = IDLE
    pre_entry: Optional[_PreEntry] = None


class OffenseSession:
    """
    Drives one game's live offense capture.

    The classification flow and a running clock are mutually exclusive:
    starting a turnover or shot pauses the clock, and it only runs again
    after an offensive rebound or a cancel.
    """

    def __init__(
        self,
        game: Game,
        repository: GameRepository,
        clock: Optional[OffenseClock] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.game = game
        self.repository = repository
        self.state = SessionState(clock=clock or OffenseClock(scheduler=scheduler))
        self.state.players_on_court = self.game.your_team.player_ids()[:MAX_PLAYERS_ON_COURT]
        self.last_saved = True

    @property
    def clock(self) -> OffenseClock:
        return self.state.clock

    @property
    def passes(self) -> int:
        return self.state.passes.count

    @property
    def players_on_court(self) -> List[str]:
        return list(self.state.players_on_court)

    @property
    def in_flow(self) -> bool:
        return flow.is_active(self.state.flow)

    # ------------------------------------------------------------------
    # Clock and passes
    # ------------------------------------------------------------------
    def _require_no_flow(self, action: str) -> None:
        if self.in_flow:
            raise InvalidTransition(f"Finish or cancel the current entry before you {action}")

    def start_clock(self) -> None:
        self._require_no_flow("start the clock")
        self.clock.start()

    def pause_clock(self) -> None:
        self.clock.pause()

    def toggle_clock(self) -> None:
        self._require_no_flow("start the clock")
        self.clock.toggle()

    def adjust_clock(self, delta_seconds: int) -> int:
        return self.clock.adjust(delta_seconds)

    def increment_passes(self) -> int:
        return self.state.passes.increment()

    def decrement_passes(self) -> int:
        return self.state.passes.decrement()

    # ------------------------------------------------------------------
    # Lineup
    # ------------------------------------------------------------------
    def toggle_player(self, player_id: str) -> List[str]:
        """
        Move a player between the bench and the court.

        Raises:
            LineupLockedError: While the clock is running
            LineupFullError: If the court already has five players
            LineupError: If the player is not on the roster
        """
        if self.clock.is_running:
            raise LineupLockedError("Pause the clock before changing the lineup")
        if self.game.your_team.get_player(player_id) is None:
            raise LineupError(f"Player '{player_id}' is not on the roster")

        on_court = self.state.players_on_court
        if player_id in on_court:
            on_court.remove(player_id)
        elif len(on_court) >= MAX_PLAYERS_ON_COURT:
            logger.warning("Refused to add %s: court already has %d players", player_id, len(on_court))
            raise LineupFullError(f"Maximum {MAX_PLAYERS_ON_COURT} players on court")
        else:
            on_court.append(player_id)
        return self.players_on_court

    def sync_roster(self, game: Game) -> None:
        """
        Adopt roster and setup edits from ``game``.

        The live offense log is kept, and on-court players no longer on the
        roster are dropped.
        """
        if game is not self.game:
            game.offenses = list(self.game.offenses)
            self.game = game
        roster = set(game.your_team.player_ids())
        self.state.players_on_court = [pid for pid in self.state.players_on_court if pid in roster]

    # ------------------------------------------------------------------
    # Classification flow
    # ------------------------------------------------------------------
    def begin_turnover(self) -> flow.FlowStep:
        return self._enter(flow.begin_turnover)

    def begin_shot(self) -> flow.FlowStep:
        return self._enter(flow.begin_shot)

    def _enter(self, transition) -> flow.FlowStep:
        next_step = transition(self.state.flow)
        self.clock.pause()
        self.state.pre_entry = _PreEntry(self.clock.elapsed_ms, self.passes)
        self.state.flow = next_step
        return next_step

    def perform(self, action: str, **params: Any) -> flow.Transition:
        """
        Apply a named classifier action to the flow in progress.

        Returns:
            The next flow step, or the outcome when the flow ended
        """
        if action in ("select_player", "confirm_turnover"):
            self._check_assignable(params.get("player_id"))
        outcome = flow.apply_action(self.state.flow, action, **params)
        return self._advance(outcome)

    def select_player(self, player_id: Optional[str]) -> flow.Transition:
        return self.perform("select_player", player_id=player_id)

    def confirm_turnover(self, player_id: Optional[str] = None) -> flow.Transition:
        return self.perform("confirm_turnover", player_id=player_id)

    def select_shot_type(self, shot_type: int) -> flow.Transition:
        return self.perform("select_shot_type", shot_type=shot_type)

    def select_result(self, result) -> flow.Transition:
        return self.perform("select_result", result=result)

    def select_rebound(self, offensive: bool) -> flow.Transition:
        return self.perform("select_rebound", offensive=offensive)

    def toggle_free_throw(self, slot: int, made: Optional[bool]) -> flow.Transition:
        return self.perform("toggle_free_throw", slot=slot, made=made)

    def confirm_free_throws(self) -> flow.Transition:
        return self.perform("confirm_free_throws")

    def back(self) -> flow.Transition:
        return self.perform("back")

    def cancel(self) -> flow.Transition:
        return self.perform("cancel")

    def _check_assignable(self, player_id: Optional[str]) -> None:
        if player_id and player_id not in self.state.players_on_court:
            raise LineupError(f"Player '{player_id}' is not on the court")

    def _advance(self, outcome: flow.Transition) -> flow.Transition:
        if isinstance(outcome, flow.Completed):
            self._end_flow()
            self.finalize(outcome.result)
        elif isinstance(outcome, flow.Continued):
            logger.debug("Offensive rebound, offense continues")
            self._end_flow()
            self.clock.resume()
        elif isinstance(outcome, flow.Cancelled):
            pre_entry = self.state.pre_entry
            self._end_flow()
            if pre_entry is not None:
                self.clock.set_elapsed(pre_entry.elapsed_ms)
                self.state.passes.count = pre_entry.passes
            self.clock.resume()
        else:
            self.state.flow = outcome
        return outcome

    def _end_flow(self) -> None:
        self.state.flow = flow.IDLE
        self.state.pre_entry = None

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def finalize(self, result: OffenseResult) -> Optional[Offense]:
        """
        Record the live offense with ``result`` and reset for the next one.

        An offense with no elapsed time is discarded silently. Either way the
        clock returns to idle and the pass counter to zero.

        Returns:
            The recorded offense, or None if nothing was recorded
        """
        elapsed_ms = self.clock.elapsed_ms
        offense = None
        if elapsed_ms // 1000 > 0:
            offense = Offense(
                id=new_id(),
                time=elapsed_ms // 1000,
                passes=self.passes,
                result=result,
                players_on_court=tuple(self.state.players_on_court),
                timestamp=now_ms(),
            )
            self.last_saved = self.repository.append_offense(self.game, offense)
            if not self.last_saved:
                logger.warning("Offense %s recorded in memory only; storage write failed", offense.id)
            logger.info(
                "Recorded %s offense %s (%ss, %d passes)",
                result.type.value, offense.id, offense.time, offense.passes,
            )
        else:
            logger.debug("Discarded %s with no elapsed time", result.type.value)

        self.clock.reset()
        self.state.passes.reset()
        return offense

    def remove_offense(self, offense_id: str) -> bool:
        return self.repository.remove_offense(self.game, offense_id)

    def teardown(self) -> None:
        """Stop the clock's periodic updates when the session is closed."""
        self.clock.teardown()

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the live session."""
        return {
            "game_id": self.game.id,
            "clock": {
                "state": self.clock.state.value,
                "running": self.clock.is_running,
                "elapsed_ms": self.clock.elapsed_ms,
                "display": self.clock.display(),
            },
            "passes": self.passes,
            "players_on_court": self.players_on_court,
            "flow": flow.describe(self.state.flow),
            "offense_count": len(self.game.offenses),
            "last_saved": self.last_saved,
        }
