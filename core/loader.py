import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from config import settings
from core.parser import Listing, parse_dataset

log = logging.getLogger(__name__)


class DatasetLoadError(Exception):
    """The listings document could not be fetched or decoded."""


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def _fetch_remote(source: str, client: httpx.AsyncClient | None, timeout: float) -> Any:
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
    try:
        resp = await client.get(source)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPError as e:
        raise DatasetLoadError(f"Failed to fetch {source}: {e}") from e
    except (ValueError, RecursionError) as e:
        raise DatasetLoadError(f"{source} is not valid JSON: {e}") from e
    finally:
        if owns_client:
            await client.aclose()


def _read_local(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise DatasetLoadError(f"Failed to read {path}: {e}") from e
    except (ValueError, RecursionError) as e:
        raise DatasetLoadError(f"{path} is not valid JSON: {e}") from e


async def load_dataset(
    source: str | None = None,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = None,
) -> list[Listing]:
    """Fetch the listings document once and parse it.

    *source* is an HTTP(S) URL or a local path. There is no retry: any
    failure raises DatasetLoadError.
    """
    source = source or settings.dataset_source
    timeout = timeout if timeout is not None else settings.dataset_timeout_seconds

    log.info(f"Loading listings from {source}")
    if _is_remote(source):
        document = await _fetch_remote(source, client, timeout)
    else:
        document = await asyncio.to_thread(_read_local, Path(source))

    return parse_dataset(document)
