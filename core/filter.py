from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from core.parser import Listing

DISPLAY_CAP = 50


class SortMode(Enum):
    DEFAULT = "default"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"
    RATING_DESC = "ratingDesc"


@dataclass(frozen=True)
class QueryState:
    text: str = ""
    sort: SortMode = SortMode.DEFAULT
    favorites_only: bool = False

    @property
    def needle(self) -> str:
        return self.text.strip().casefold()


def cap_listings(listings: Sequence[Listing], cap: int = DISPLAY_CAP) -> list[Listing]:
    return list(listings[: max(0, cap)])


def search_haystack(listing: Listing) -> str:
    parts = [listing.name, listing.host_name, listing.neighborhood, listing.description]
    return " ".join(part for part in parts if part).casefold()


def matches_text(listing: Listing, needle: str) -> bool:
    if not needle:
        return True
    return needle in search_haystack(listing)


def matches_favorites(listing: Listing, favorites: Iterable[str]) -> bool:
    return listing.id in favorites


def _price_key(listing: Listing) -> float:
    price = listing.price
    return 0.0 if price is None else price


def _rating_key(listing: Listing) -> float:
    rating = listing.rating
    return -1.0 if rating is None else rating


def sort_listings(listings: list[Listing], mode: SortMode) -> list[Listing]:
    # sorted() is stable, including with reverse=True
    if mode is SortMode.PRICE_ASC:
        return sorted(listings, key=_price_key)
    if mode is SortMode.PRICE_DESC:
        return sorted(listings, key=_price_key, reverse=True)
    if mode is SortMode.RATING_DESC:
        return sorted(listings, key=_rating_key, reverse=True)
    return listings


def query_listings(
    listings: Sequence[Listing],
    favorites: frozenset[str] | set[str],
    state: QueryState,
    cap: int = DISPLAY_CAP,
) -> list[Listing]:
    """Cap, search, favorites-filter and sort the dataset, in that order.

    The cap is taken first, so records past it never appear in any result,
    whatever the search text.
    """
    result = cap_listings(listings, cap)

    needle = state.needle
    if needle:
        result = [item for item in result if matches_text(item, needle)]

    if state.favorites_only:
        result = [item for item in result if matches_favorites(item, favorites)]

    return sort_listings(result, state.sort)
