"""
Persistence service for the Court Sense offense tracker.

Games and teams are stored as JSON documents in a key-value store. The
store itself is injected so the same repositories work with files, memory
or any other backend that can get and set strings.

Storage failures never interrupt a live game. Listing falls back to empty
data and writes report ``False``, both after logging the error. A stored
document that cannot be read is never overwritten: read-modify-write
operations refuse to write, and single entries that fail to parse are
written back unchanged.
"""
import json
import logging
import os
import tempfile
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol, Union

from ..errors import StorageError
from ..models import Game, Offense, Player, Team
from ..utils.constants import GAMES_STORAGE_KEY, TEAMS_STORAGE_KEY

logger = logging.getLogger(__name__)

# Parse failures on a single stored entry
ENTRY_ERRORS = (ValueError, TypeError, KeyError, AttributeError)


class KeyValueStore(Protocol):
    """Minimal durable store contract."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """In-process store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """
    Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written document.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        # Ensure directory exists
        if self.directory and not os.path.exists(self.directory):
            os.makedirs(self.directory)

        fd, tmp_path = tempfile.mkstemp(dir=self.directory or ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def _read_document(store: KeyValueStore, key: str) -> List[Any]:
    """
    Read the JSON list stored under ``key``.

    Raises:
        StorageError: If the store fails or the document is not a JSON list
    """
    try:
        raw = store.get(key)
        items = json.loads(raw) if raw else []
    except (OSError, ValueError) as exc:
        raise StorageError(f"Stored '{key}' could not be read") from exc
    if not isinstance(items, list):
        raise StorageError(f"Stored '{key}' is not a list")
    return items


def _write_document(store: KeyValueStore, key: str, items: List[Any]) -> bool:
    try:
        store.set(key, json.dumps(items))
        return True
    except (OSError, TypeError, ValueError):
        logger.error("Failed to save %s", key, exc_info=True)
        return False


# Stored entries are parsed models, or the raw JSON of entries that failed to parse
GameEntry = Union[Game, Any]
TeamEntry = Union[Team, Any]


class GameRepository:
    """
    Load and save games.

    Every mutation is a read-modify-write of the whole game list performed
    under one lock, so two writers cannot lose each other's updates.
    """

    def __init__(self, store: KeyValueStore, key: str = GAMES_STORAGE_KEY):
        self.store = store
        self.key = key
        self._lock = threading.RLock()

    def _read_entries(self) -> List[GameEntry]:
        entries: List[GameEntry] = []
        for index, item in enumerate(_read_document(self.store, self.key)):
            try:
                entries.append(Game.from_json(item))
            except ENTRY_ERRORS:
                logger.error("Stored game #%d is unreadable; keeping it unchanged", index, exc_info=True)
                entries.append(item)
        return entries

    def _entries_for_write(self, action: str) -> Optional[List[GameEntry]]:
        try:
            return self._read_entries()
        except StorageError:
            logger.error("Refusing to %s: stored games could not be read", action, exc_info=True)
            return None

    def _write_entries(self, entries: List[GameEntry]) -> bool:
        items = [entry.to_json() if isinstance(entry, Game) else entry for entry in entries]
        return _write_document(self.store, self.key, items)

    def load_games(self) -> List[Game]:
        """Return all readable stored games, or an empty list if the store cannot be read."""
        with self._lock:
            try:
                entries = self._read_entries()
            except StorageError:
                logger.error("Failed to load games", exc_info=True)
                return []
            return [entry for entry in entries if isinstance(entry, Game)]

    def save_games(self, games: List[Game]) -> bool:
        """Overwrite the stored game list; returns False if the write failed."""
        with self._lock:
            return self._write_entries(list(games))

    def get_game(self, game_id: str) -> Optional[Game]:
        return next((g for g in self.load_games() if g.id == game_id), None)

    def save_game(self, game: Game) -> bool:
        """Insert or replace a game by id."""
        with self._lock:
            entries = self._entries_for_write("save game")
            if entries is None:
                return False
            for index, entry in enumerate(entries):
                if isinstance(entry, Game) and entry.id == game.id:
                    entries[index] = game
                    break
            else:
                entries.append(game)
            return self._write_entries(entries)

    def delete_game(self, game_id: str) -> bool:
        with self._lock:
            entries = self._entries_for_write("delete game")
            if entries is None:
                return False
            remaining = [e for e in entries if not (isinstance(e, Game) and e.id == game_id)]
            if len(remaining) == len(entries):
                return False
            return self._write_entries(remaining)

    def update_game(self, game_id: str, mutator: Callable[[Game], None]) -> Optional[Game]:
        """
        Apply ``mutator`` to the stored copy of a game and write it back.

        Returns:
            The updated game, or None when no game has that id or the store
            cannot be read
        """
        with self._lock:
            entries = self._entries_for_write("update game")
            if entries is None:
                return None
            game = next((e for e in entries if isinstance(e, Game) and e.id == game_id), None)
            if game is None:
                return None
            mutator(game)
            self._write_entries(entries)
            return game

    def _store_offenses(self, game: Game) -> bool:
        """
        Write the offense log of ``game`` into its stored copy.

        The in-memory log is authoritative; roster and setup fields of the
        stored copy are left as they are. A game never saved is inserted.
        """
        entries = self._entries_for_write("record offenses")
        if entries is None:
            return False
        for entry in entries:
            if isinstance(entry, Game) and entry.id == game.id:
                entry.offenses = list(game.offenses)
                break
        else:
            entries.append(game)
        return self._write_entries(entries)

    def append_offense(self, game: Game, offense: Offense) -> bool:
        """
        Record an offense on ``game`` and persist it.

        The in-memory game is always updated; the return value tells whether
        the change also reached the store. Offenses kept in memory after an
        earlier failed write are stored by the next successful one.
        """
        with self._lock:
            game.append_offense(offense)
            return self._store_offenses(game)

    def remove_offense(self, game: Game, offense_id: str) -> bool:
        """Delete one offense from ``game`` and from the store."""
        with self._lock:
            if not game.remove_offense(offense_id):
                return False
            if not self._store_offenses(game):
                logger.warning("Offense %s removed in memory only; storage write failed", offense_id)
            return True


def merge_team_players(teams: List[Team]) -> List[Player]:
    """Combine rosters, keeping the first player seen for each name."""
    merged: Dict[str, Player] = {}
    for team in teams:
        for player in team.players:
            if player.name not in merged:
                merged[player.name] = player
    return list(merged.values())


class TeamRepository:
    """
    Saved teams, reused as roster templates for new games.

    Teams are keyed by name: saving a team whose name already exists merges
    every roster with that name into the first stored team.
    """

    def __init__(self, store: KeyValueStore, key: str = TEAMS_STORAGE_KEY):
        self.store = store
        self.key = key
        self._lock = threading.RLock()

    def _read_entries(self) -> List[TeamEntry]:
        entries: List[TeamEntry] = []
        for index, item in enumerate(_read_document(self.store, self.key)):
            try:
                entries.append(Team.from_json(item))
            except ENTRY_ERRORS:
                logger.error("Stored team #%d is unreadable; keeping it unchanged", index, exc_info=True)
                entries.append(item)
        return entries

    def load_teams(self) -> List[Team]:
        with self._lock:
            try:
                entries = self._read_entries()
            except StorageError:
                logger.error("Failed to load teams", exc_info=True)
                return []
            return [entry for entry in entries if isinstance(entry, Team)]

    def save_team(self, team: Team) -> bool:
        with self._lock:
            try:
                entries = self._read_entries()
            except StorageError:
                logger.error("Refusing to save team: stored teams could not be read", exc_info=True)
                return False

            same_name = [e for e in entries if isinstance(e, Team) and e.name == team.name]
            if not same_name:
                entries.append(team)
            else:
                first = same_name[0]
                merged = Team(
                    id=first.id,
                    name=first.name,
                    players=merge_team_players(same_name + [team]),
                )
                entries = [
                    merged if entry is first else entry
                    for entry in entries
                    if entry is first or not any(entry is t for t in same_name)
                ]
                logger.debug("Merged %d stored team(s) named %r", len(same_name), team.name)

            items = [entry.to_json() if isinstance(entry, Team) else entry for entry in entries]
            return _write_document(self.store, self.key, items)

    def get_team_by_name(self, name: str) -> Optional[Team]:
        teams = [t for t in self.load_teams() if t.name == name]
        if not teams:
            return None
        first = teams[0]
        return Team(id=first.id, name=first.name, players=merge_team_players(teams))

    def get_all_team_names(self) -> List[str]:
        names: List[str] = []
        for team in self.load_teams():
            if team.name and team.name not in names:
                names.append(team.name)
        return names
