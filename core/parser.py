import logging
from dataclasses import dataclass
from typing import Any

from core.coerce import coerce_amenities, coerce_price, coerce_rating, coerce_superhost

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Listing:
    id: str
    name: str | None = None
    host_name: str | None = None
    host_thumbnail_url: str | None = None
    picture_url: str | None = None
    listing_url: str | None = None
    description: str | None = None
    neighbourhood_cleansed: str | None = None
    neighbourhood: str | None = None
    price_raw: Any = None
    rating_raw: Any = None
    superhost_raw: Any = None
    amenities_raw: Any = None

    @property
    def price(self) -> float | None:
        return coerce_price(self.price_raw)

    @property
    def rating(self) -> float | None:
        return coerce_rating(self.rating_raw)

    @property
    def amenities(self) -> list[str]:
        return coerce_amenities(self.amenities_raw)

    @property
    def is_superhost(self) -> bool:
        return coerce_superhost(self.superhost_raw)

    @property
    def neighborhood(self) -> str | None:
        """Primary neighborhood, falling back to the alternate field."""
        return self.neighbourhood_cleansed or self.neighbourhood


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def normalize_listing(raw: dict) -> Listing:
    raw_id = raw.get("id")
    return Listing(
        id="" if raw_id is None else str(raw_id),
        name=_text(raw.get("name")),
        host_name=_text(raw.get("host_name")),
        host_thumbnail_url=_text(raw.get("host_thumbnail_url")),
        picture_url=_text(raw.get("picture_url")),
        listing_url=_text(raw.get("listing_url")),
        description=_text(raw.get("description")),
        neighbourhood_cleansed=_text(raw.get("neighbourhood_cleansed")),
        neighbourhood=_text(raw.get("neighbourhood")),
        price_raw=raw.get("price"),
        rating_raw=raw.get("review_scores_rating"),
        superhost_raw=raw.get("host_is_superhost"),
        amenities_raw=raw.get("amenities"),
    )


def parse_dataset(document: Any) -> list[Listing]:
    """Turn a decoded JSON document into listings.

    Anything other than a top-level array is an empty dataset. Array entries
    that are not objects are skipped.
    """
    if not isinstance(document, list):
        log.warning(f"Dataset is not a JSON array ({type(document).__name__}), using empty dataset")
        return []

    listings = []
    for index, item in enumerate(document):
        if not isinstance(item, dict):
            log.debug(f"Skipping non-object dataset entry #{index}")
            continue
        listings.append(normalize_listing(item))

    log.info(f"Parsed {len(listings)} listings")
    return listings
