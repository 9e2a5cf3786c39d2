import asyncio
import json
import math
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest

from core.coerce import (
    coerce_amenities,
    coerce_price,
    coerce_rating,
    coerce_superhost,
    truncate,
)
from core.loader import DatasetLoadError, load_dataset
from core.parser import Listing, normalize_listing, parse_dataset


class TestCoercePrice:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("$187.00", 187),
            ("1,234.50", 1234.5),
            ("$ 95", 95),
            (".5", 0.5),
            (42, 42),
            (1e-05, 1e-05),
            (1e20, 1e20),
            (187.5, 187.5),
        ],
    )
    def test_parses_currency_strings(self, raw, expected):
        assert coerce_price(raw) == expected

    @pytest.mark.parametrize("raw", ["", "N/A", "abc", "1.2.3", ".", None, True])
    def test_malformed_prices_are_none(self, raw):
        assert coerce_price(raw) is None

    @pytest.mark.parametrize("raw", [math.inf, -math.inf, math.nan])
    def test_non_finite_numbers_are_none(self, raw):
        assert coerce_price(raw) is None


class TestCoerceAmenities:
    def test_double_encoded_array(self):
        assert coerce_amenities('["Wifi","Kitchen"]') == ["Wifi", "Kitchen"]

    def test_empty_array(self):
        assert coerce_amenities("[]") == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            None,
            "",
            '{"Wifi": true}',
            '"Wifi"',
            "[1, 2]",
            '["Wifi", null]',
            ["Wifi", "Kitchen"],
        ],
    )
    def test_anything_else_is_empty(self, raw):
        assert coerce_amenities(raw) == []

    @pytest.mark.parametrize("raw", ["[" * 100000, "[" * 100000 + "]" * 100000, "{\"a\":" * 100000])
    def test_deeply_nested_json_is_empty(self, raw):
        assert coerce_amenities(raw) == []


class TestCoerceSuperhost:
    @pytest.mark.parametrize("raw", [True, "t"])
    def test_true_tokens(self, raw):
        assert coerce_superhost(raw) is True

    @pytest.mark.parametrize("raw", [False, "f", "T", "true", "yes", 1, None, ""])
    def test_everything_else_is_false(self, raw):
        assert coerce_superhost(raw) is False


class TestCoerceRating:
    @pytest.mark.parametrize("raw,expected", [(4.5, 4.5), (5, 5.0), ("4.87", 4.87), (" 3 ", 3.0)])
    def test_numeric_values(self, raw, expected):
        assert coerce_rating(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "abc", "", math.nan, [4.5]])
    def test_absent_or_malformed(self, raw):
        assert coerce_rating(raw) is None


class TestTruncate:
    def test_short_text_is_trimmed_only(self):
        assert truncate("  cozy loft  ", 20) == "cozy loft"

    def test_long_text_is_cut_with_ellipsis(self):
        assert truncate("a" * 200, 180) == "a" * 180 + "…"

    def test_cut_drops_trailing_whitespace(self):
        assert truncate("hello world", 6) == "hello…"

    def test_cuts_mid_word(self):
        assert truncate("sunny apartment", 8) == "sunny ap…"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_input(self, text):
        assert truncate(text, 10) == ""


class TestParseDataset:
    def test_maps_source_fields(self):
        listing = normalize_listing(
            {
                "id": 958,
                "name": "Bright Victorian",
                "host_name": "Holly",
                "host_thumbnail_url": "https://example.com/host.jpg",
                "picture_url": "https://example.com/pic.jpg",
                "listing_url": "https://www.airbnb.com/rooms/958",
                "description": "Free WiFi included",
                "neighbourhood_cleansed": "Western Addition",
                "neighbourhood": "San Francisco, California",
                "price": "$187.00",
                "review_scores_rating": 4.87,
                "host_is_superhost": "t",
                "amenities": '["Wifi","Kitchen"]',
            }
        )
        assert listing.id == "958"
        assert listing.name == "Bright Victorian"
        assert listing.price == 187
        assert listing.rating == 4.87
        assert listing.is_superhost is True
        assert listing.amenities == ["Wifi", "Kitchen"]
        assert listing.neighborhood == "Western Addition"

    def test_neighborhood_falls_back_to_alternate(self):
        listing = normalize_listing({"id": "1", "neighbourhood": "Mission"})
        assert listing.neighborhood == "Mission"

    def test_missing_fields_use_defaults(self):
        listing = normalize_listing({"id": "1"})
        assert listing.price is None
        assert listing.rating is None
        assert listing.amenities == []
        assert listing.is_superhost is False
        assert listing.neighborhood is None

    @pytest.mark.parametrize("document", [{"id": "1"}, "listings", 3, None])
    def test_non_array_document_is_empty(self, document):
        assert parse_dataset(document) == []

    def test_non_object_entries_are_skipped(self):
        listings = parse_dataset([{"id": "1"}, "junk", 7, {"id": "2"}])
        assert [item.id for item in listings] == ["1", "2"]

    def test_listing_is_immutable(self):
        listing = Listing(id="1")
        with pytest.raises(AttributeError):
            listing.name = "changed"  # type: ignore[misc]


class TestLoadDataset:
    def _load_remote(self, handler):
        async def run():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
                return await load_dataset("https://example.com/listings.json", client=client)

        return asyncio.run(run())

    def test_remote_document(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])

        listings = self._load_remote(handler)
        assert [item.id for item in listings] == ["1", "2"]

    def test_remote_non_array_is_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"listings": []})

        assert self._load_remote(handler) == []

    def test_remote_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with pytest.raises(DatasetLoadError):
            self._load_remote(handler)

    def test_remote_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(DatasetLoadError):
            self._load_remote(handler)

    def test_remote_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DatasetLoadError):
            self._load_remote(handler)

    def test_remote_invalid_utf8(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"[\xff\xfe\xfa]")

        with pytest.raises(DatasetLoadError):
            self._load_remote(handler)

    def test_remote_deeply_nested_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"[" * 100000)

        with pytest.raises(DatasetLoadError):
            self._load_remote(handler)

    def test_local_invalid_utf8(self, tmp_path):
        path = tmp_path / "listings.json"
        path.write_bytes(b"[\xff\xfe\xfa]")

        with pytest.raises(DatasetLoadError):
            asyncio.run(load_dataset(str(path)))

    def test_local_file(self, tmp_path):
        path = tmp_path / "listings.json"
        path.write_text(json.dumps([{"id": "a"}, {"id": "b"}]), encoding="utf-8")

        listings = asyncio.run(load_dataset(str(path)))
        assert [item.id for item in listings] == ["a", "b"]

    def test_local_missing_file(self, tmp_path):
        with pytest.raises(DatasetLoadError):
            asyncio.run(load_dataset(str(tmp_path / "missing.json")))

    def test_local_invalid_json(self, tmp_path):
        path = tmp_path / "listings.json"
        path.write_text("[{", encoding="utf-8")

        with pytest.raises(DatasetLoadError):
            asyncio.run(load_dataset(str(path)))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
