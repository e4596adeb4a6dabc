"""
Account discovery session.

Holds one customer's browsing state: the active locale, the chosen game,
the hero picks and the revealed part of the result list.

State machine:
    NO_GAME_SELECTED -> GAME_SELECTED -> ACCOUNTS_SHOWN          (no roster)
    NO_GAME_SELECTED -> GAME_SELECTED -> HEROES_BEING_PICKED
                     -> SEARCH_TRIGGERED -> ACCOUNTS_SHOWN       (roster)

Selecting a game always returns to GAME_SELECTED and discards the picks.

Catalog loads run as tasks tagged with a generation number. Starting a
new load cancels the one in flight, and a load that completes after being
superseded is discarded instead of applied.
"""

import asyncio
import logging
import uuid
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from enum import Enum

from startaccount.analysis.multiset import build_hero_multiset
from startaccount.filtering.matching import CatalogResult
from startaccount.filtering.window import CatalogWindow
from startaccount.models.catalog import Account
from startaccount.models.failure import FailureKind, KnownError, NotFoundError
from startaccount.models.locale import Locale, LocaleContext
from startaccount.services.catalog import CatalogSnapshot, search_snapshot

logger = logging.getLogger(__name__)

SnapshotLoader = Callable[[str], Awaitable[CatalogSnapshot]]


class DiscoveryState(str, Enum):
    NO_GAME_SELECTED = "no_game_selected"
    GAME_SELECTED = "game_selected"
    HEROES_BEING_PICKED = "heroes_being_picked"
    SEARCH_TRIGGERED = "search_triggered"
    ACCOUNTS_SHOWN = "accounts_shown"


class SelectionError(KnownError):
    """A hero pick or search is not possible in the current session state."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            status_code=409,
        )


class StaleLoadError(Exception):
    """A catalog load was superseded by a newer one before it completed."""


class DiscoverySession:
    """
    One customer's discovery flow.

    Args:
        loader: Coroutine function loading a CatalogSnapshot for a game ref
        locale: Initial display locale
    """

    def __init__(self, loader: SnapshotLoader, locale: Locale = Locale.RU) -> None:
        self._loader = loader
        self.locale_context = LocaleContext(locale=locale)
        self.state = DiscoveryState.NO_GAME_SELECTED
        self.snapshot: CatalogSnapshot | None = None
        self.picks: list[str] = []
        self.result: CatalogResult | None = None
        self.window: CatalogWindow[Account] = CatalogWindow([])
        self._generation = 0
        self._inflight: asyncio.Task[CatalogSnapshot] | None = None

    @property
    def locale(self) -> Locale:
        return self.locale_context.locale

    @property
    def generation(self) -> int:
        return self._generation

    def set_locale(self, locale: Locale) -> None:
        self.locale_context = self.locale_context.with_locale(locale)

    # --- Loading ---

    async def _load(self, game_ref: str) -> CatalogSnapshot:
        """
        Load a snapshot as the newest generation.

        Raises:
            StaleLoadError: A newer load started before this one finished
        """
        self._generation += 1
        generation = self._generation

        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.ensure_future(self._loader(game_ref))
        self._inflight = task
        try:
            snapshot = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug("Catalog load %d for %s was superseded", generation, game_ref)
                raise StaleLoadError(game_ref) from None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

        if generation != self._generation:
            logger.debug("Discarding stale catalog load %d for %s", generation, game_ref)
            raise StaleLoadError(game_ref)
        return snapshot

    # --- Transitions ---

    async def select_game(self, game_ref: str) -> bool:
        """
        Switch to a game, discarding any hero picks.

        Returns False if a newer selection superseded this one (nothing
        applied). Load failures propagate and leave no game selected.
        """
        self.picks.clear()
        self.result = None
        self.window.reset([])
        self.snapshot = None
        self.state = DiscoveryState.NO_GAME_SELECTED

        try:
            snapshot = await self._load(game_ref)
        except StaleLoadError:
            return False

        self.snapshot = snapshot
        self.state = DiscoveryState.GAME_SELECTED
        logger.info(
            "Game selected",
            extra={"game_id": snapshot.game.id, "accounts": len(snapshot.accounts)},
        )

        if not snapshot.game.has_gacha_heroes:
            self._show(search_snapshot(snapshot, {}))
        return True

    def pick_hero(self, hero_id: str) -> int:
        """
        Add one copy of a hero to the selection.

        Returns the number of copies of that hero now requested.
        """
        snapshot = self._require_roster_game()
        if hero_id not in snapshot.heroes_by_id:
            raise NotFoundError("hero", hero_id)
        if hero_id not in snapshot.availability:
            raise SelectionError(
                "This hero is not available on any account.",
                detail=f"hero {hero_id} is unobtainable",
            )

        self.picks.append(hero_id)
        self.state = DiscoveryState.HEROES_BEING_PICKED
        return self.picks.count(hero_id)

    def remove_hero(self, hero_id: str) -> int:
        """
        Remove one copy of a hero from the selection.

        Returns the number of copies still requested. Removing a hero that
        was not picked changes nothing.
        """
        self._require_roster_game()
        for index in range(len(self.picks) - 1, -1, -1):
            if self.picks[index] == hero_id:
                del self.picks[index]
                self.state = DiscoveryState.HEROES_BEING_PICKED
                break
        return self.picks.count(hero_id)

    async def search(self) -> bool:
        """
        Reload the game's accounts and apply the current picks.

        Returns False if superseded by a newer load.
        """
        if self.snapshot is None:
            raise SelectionError("Select a game first.")

        game_ref = self.snapshot.game.id
        previous_state = self.state
        self.state = DiscoveryState.SEARCH_TRIGGERED
        try:
            snapshot = await self._load(game_ref)
        except StaleLoadError:
            return False
        except KnownError:
            self.state = previous_state
            raise

        self.snapshot = snapshot
        self._show(search_snapshot(snapshot, build_hero_multiset(self.picks)))
        return True

    def load_more(self) -> bool:
        """Reveal the next page. No-op once every result is visible."""
        if self.result is None:
            return False
        return self.window.load_more()

    # --- Helpers ---

    def _show(self, result: CatalogResult) -> None:
        self.result = result
        self.window.reset(result.accounts)
        self.state = DiscoveryState.ACCOUNTS_SHOWN

    def _require_roster_game(self) -> CatalogSnapshot:
        if self.snapshot is None:
            raise SelectionError("Select a game first.")
        if not self.snapshot.game.has_gacha_heroes:
            raise SelectionError(
                "This game has no hero selection.",
                detail=f"game {self.snapshot.game.id} has no hero roster",
            )
        return self.snapshot


class SessionRegistry:
    """
    In-process store of discovery sessions.

    Sessions are created explicitly and live only as long as the process.
    The oldest sessions are evicted once `max_sessions` is exceeded.
    """

    def __init__(self, loader: SnapshotLoader, max_sessions: int = 1000) -> None:
        self._loader = loader
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, DiscoverySession] = OrderedDict()

    def create(self, locale: Locale = Locale.RU) -> tuple[str, DiscoverySession]:
        session_id = uuid.uuid4().hex
        session = DiscoverySession(self._loader, locale=locale)
        self._sessions[session_id] = session
        while len(self._sessions) > self._max_sessions:
            evicted, _ = self._sessions.popitem(last=False)
            logger.debug("Evicted discovery session %s", evicted)
        return session_id, session

    def get(self, session_id: str) -> DiscoverySession:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("session", session_id)
        self._sessions.move_to_end(session_id)
        return session

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
