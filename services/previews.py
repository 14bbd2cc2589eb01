"""
Public preview operations.

Every operation has a blocking and an ``_async`` form. The async forms run the
blocking fetch in the event loop's default executor, one task per URL, and the
blocking text operations simply run their async form to completion. None of
them raise for fetch, parse or matching problems: a failed URL is just missing
from the output.
"""
import asyncio
import logging
from typing import List, Optional

import requests

from models.preview import PreviewMatch, PreviewResult
from services.errors import NoMatch
from services.extractor import extract_urls
from services.scraper import fetch_prepared_preview, fetch_preview

logger = logging.getLogger("preview-service.previews")

__all__ = [
    "fetch_preview",
    "fetch_preview_async",
    "fetch_prepared_preview",
    "fetch_prepared_preview_async",
    "extract_all_previews",
    "extract_all_previews_async",
    "extract_first_preview",
    "extract_first_preview_async",
]


async def fetch_preview_async(uri: str, session: Optional[requests.Session] = None) -> Optional[PreviewResult]:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fetch_preview, uri, session)


async def fetch_prepared_preview_async(
    session: requests.Session, request: requests.PreparedRequest
) -> Optional[PreviewResult]:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, fetch_prepared_preview, session, request)


async def _match(matched: str, session: Optional[requests.Session]) -> Optional[PreviewMatch]:
    result = await fetch_preview_async(matched, session)
    if result is None:
        return None
    return PreviewMatch(matched_text=matched, result=result)


def _dispatch(text: str, session: Optional[requests.Session]) -> List[asyncio.Task]:
    matches = list(extract_urls(text))
    if not matches:
        raise NoMatch("No URL found in text")
    return [asyncio.create_task(_match(matched, session)) for matched in matches]


async def extract_all_previews_async(text: str, session: Optional[requests.Session] = None) -> List[PreviewMatch]:
    """Previews for every URL in ``text``, in the order the URLs appear."""
    try:
        tasks = _dispatch(text, session)
        results = await asyncio.gather(*tasks)
    except NoMatch:
        return []
    except Exception as exc:
        logger.warning(f"Preview batch failed: {exc}")
        return []
    return [match for match in results if match is not None]


async def extract_first_preview_async(text: str, session: Optional[requests.Session] = None) -> Optional[PreviewMatch]:
    """
    The preview of the left-most URL in ``text`` that produced one.

    All fetches start together; tasks are awaited in text order and the rest
    are cancelled as soon as one succeeds.
    """
    try:
        tasks = _dispatch(text, session)
    except NoMatch:
        return None
    except Exception as exc:
        logger.warning(f"Preview batch failed: {exc}")
        return None

    try:
        for index, task in enumerate(tasks):
            match = await task
            if match is not None:
                for pending in tasks[index + 1:]:
                    pending.cancel()
                return match
    except Exception as exc:
        logger.warning(f"Preview batch failed: {exc}")
        for pending in tasks:
            pending.cancel()
    return None


def extract_all_previews(text: str, session: Optional[requests.Session] = None) -> List[PreviewMatch]:
    return asyncio.run(extract_all_previews_async(text, session))


def extract_first_preview(text: str, session: Optional[requests.Session] = None) -> Optional[PreviewMatch]:
    return asyncio.run(extract_first_preview_async(text, session))
