import logging
from collections import OrderedDict

from config import settings
from core.filter import QueryState, query_listings
from core.loader import DatasetLoadError, load_dataset
from core.parser import Listing
from core.projection import DisplayRecord, project_listings, status_text
from core.sink import PresentationSink
from db.favorites import FavoriteStore

log = logging.getLogger(__name__)

LOADING_STATUS = "Loading listings…"
LOAD_FAILED_STATUS = (
    "Failed to load the listings dataset. Check that DATASET_SOURCE points to a "
    "readable JSON file or URL."
)


class BrowsingSession:
    """Dataset plus favorite store; re-runs the whole pipeline per action."""

    def __init__(
        self,
        favorites: FavoriteStore,
        cap: int | None = None,
        top_amenities: int | None = None,
        description_max_chars: int | None = None,
    ):
        self.favorites = favorites
        self.cap = cap if cap is not None else settings.display_cap
        self.top_amenities = top_amenities if top_amenities is not None else settings.top_amenities
        self.description_max_chars = (
            description_max_chars
            if description_max_chars is not None
            else settings.description_max_chars
        )
        self.dataset: list[Listing] = []
        self.loaded = False
        self.error: str | None = None

    @property
    def status(self) -> str:
        if self.error:
            return self.error
        if not self.loaded:
            return LOADING_STATUS
        return f"{len(self.dataset)} listings loaded, {len(self.favorites.favorites)} favorites"

    async def load(self, source: str | None = None, **kwargs) -> bool:
        try:
            self.dataset = await load_dataset(source, **kwargs)
        except DatasetLoadError as e:
            log.error(f"Dataset load failed: {e}")
            self.dataset = []
            self.error = LOAD_FAILED_STATUS
            return False
        self.loaded = True
        self.error = None
        return True

    def query(self, state: QueryState) -> list[Listing]:
        return query_listings(self.dataset, self.favorites.favorites, state, cap=self.cap)

    def records(self, state: QueryState) -> list[DisplayRecord]:
        return project_listings(
            self.query(state),
            self.favorites.favorites,
            top_amenities=self.top_amenities,
            description_max_chars=self.description_max_chars,
        )

    async def refresh(self, state: QueryState, sink: PresentationSink) -> list[DisplayRecord]:
        if self.error or not self.loaded:
            await sink.show_status(self.status)
            return []
        records = self.records(state)
        log.debug(f"Query {state} -> {len(records)} records")
        await sink.present(records, status_text(len(records)))
        return records

    async def toggle_favorite(
        self, listing_id: str, state: QueryState, sink: PresentationSink
    ) -> list[DisplayRecord]:
        self.favorites.toggle(listing_id)
        return await self.refresh(state, sink)


class QueryStateCache:
    """Last query state per user, evicting the least recently used past *max_size*."""

    def __init__(self, max_size: int | None = None):
        self.max_size = max_size if max_size is not None else settings.max_query_states
        self._states: OrderedDict[int, QueryState] = OrderedDict()

    def __len__(self) -> int:
        return len(self._states)

    def get(self, user_id: int) -> QueryState:
        state = self._states.get(user_id)
        if state is None:
            return QueryState()
        self._states.move_to_end(user_id)
        return state

    def remember(self, user_id: int, state: QueryState) -> None:
        self._states[user_id] = state
        self._states.move_to_end(user_id)
        while len(self._states) > max(1, self.max_size):
            self._states.popitem(last=False)
