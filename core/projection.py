from collections.abc import Iterable
from dataclasses import dataclass, field

from core.coerce import truncate
from core.parser import Listing

UNTITLED_LISTING = "Untitled listing"
UNKNOWN_HOST = "Unknown host"
TOP_AMENITIES = 6
DESCRIPTION_MAX_CHARS = 180


@dataclass(frozen=True)
class DisplayRecord:
    """Render-ready view of one listing. Holds no markup."""

    listing_id: str
    name: str
    host_name: str
    price_label: str
    rating_label: str | None
    is_superhost: bool
    description: str
    is_favorite: bool
    amenities: tuple[str, ...] = field(default_factory=tuple)
    more_amenities: int = 0
    neighborhood: str = ""
    listing_url: str | None = None
    picture_url: str | None = None
    host_thumbnail_url: str | None = None


def project_listing(
    listing: Listing,
    is_favorite: bool,
    top_amenities: int = TOP_AMENITIES,
    description_max_chars: int = DESCRIPTION_MAX_CHARS,
) -> DisplayRecord:
    amenities = listing.amenities
    shown = tuple(amenities[:top_amenities])
    rating = listing.rating

    return DisplayRecord(
        listing_id=listing.id,
        name=listing.name or UNTITLED_LISTING,
        host_name=listing.host_name or UNKNOWN_HOST,
        price_label="" if listing.price_raw is None else str(listing.price_raw),
        rating_label=f"{rating:.1f}" if rating is not None else None,
        is_superhost=listing.is_superhost,
        description=truncate(listing.description, description_max_chars),
        is_favorite=is_favorite,
        amenities=shown,
        more_amenities=max(0, len(amenities) - len(shown)),
        neighborhood=listing.neighborhood or "",
        listing_url=listing.listing_url or None,
        picture_url=listing.picture_url or None,
        host_thumbnail_url=listing.host_thumbnail_url or None,
    )


def project_listings(
    listings: Iterable[Listing],
    favorites: frozenset[str] | set[str],
    top_amenities: int = TOP_AMENITIES,
    description_max_chars: int = DESCRIPTION_MAX_CHARS,
) -> list[DisplayRecord]:
    return [
        project_listing(
            item,
            item.id in favorites,
            top_amenities=top_amenities,
            description_max_chars=description_max_chars,
        )
        for item in listings
    ]


def status_text(count: int) -> str:
    return f"Showing {count} listing(s)"
