import logging
import re
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from config import REQUEST_TIMEOUT, USER_AGENT
from models.preview import PreviewResult
from services.errors import MalformedURI, ParseFailure, PreviewError, TransportFailure, UnsupportedContentType
from services.media import get_favicons, get_images, get_videos
from services.metadata import extract_metadata
from services.transport import default_session

logger = logging.getLogger("preview-service.scraper")

SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
# tried in order when the caller leaves the scheme out
INFERRED_SCHEMES = ("https", "http")


def has_scheme(uri: str) -> bool:
    return bool(SCHEME_PATTERN.match(uri))


def build_request(uri: str, scheme: str = "https") -> requests.PreparedRequest:
    """
    Build the GET request for a preview. ``scheme`` is only used when ``uri``
    does not carry one itself.
    """
    if not has_scheme(uri):
        uri = f"{scheme}://{uri}"
    try:
        return requests.Request("GET", uri, headers={"User-Agent": USER_AGENT}).prepare()
    except (requests.RequestException, ValueError) as exc:
        raise MalformedURI(f"Cannot build a request for {uri!r}") from exc


def candidate_schemes(uri: str) -> List[Optional[str]]:
    if has_scheme(uri):
        return [None]
    return list(INFERRED_SCHEMES)


def fetch_preview(uri: str, session: Optional[requests.Session] = None) -> Optional[PreviewResult]:
    """
    Fetch ``uri`` and build its preview. Returns None on any failure.

    Without a scheme, ``https`` is tried first and ``http`` once more if the
    request cannot be built or sent. Explicit schemes are never retried.
    """
    session = session or default_session()
    uri = uri.strip()
    try:
        response = _send_candidates(session, uri)
        return handle_response(response)
    except PreviewError as exc:
        logger.debug(f"No preview for {uri}: {exc}")
        return None
    except Exception as exc:
        logger.debug(f"No preview for {uri}, unexpected error: {exc!r}")
        return None


def fetch_prepared_preview(session: requests.Session, request: requests.PreparedRequest) -> Optional[PreviewResult]:
    """Send a caller-built request and build the preview. Returns None on any failure."""
    try:
        response = _send(session, request)
        return handle_response(response)
    except PreviewError as exc:
        logger.debug(f"No preview for {request.url}: {exc}")
        return None
    except Exception as exc:
        logger.debug(f"No preview for {request.url}, unexpected error: {exc!r}")
        return None


def _send_candidates(session: requests.Session, uri: str) -> requests.Response:
    last_error: Optional[PreviewError] = None
    for scheme in candidate_schemes(uri):
        try:
            request = build_request(uri, scheme or "https")
            return _send(session, request)
        except (MalformedURI, TransportFailure) as exc:
            logger.debug(f"Request for {uri} failed (scheme={scheme or 'explicit'}): {exc}")
            last_error = exc
    raise last_error


def _send(session: requests.Session, request: requests.PreparedRequest) -> requests.Response:
    try:
        return session.send(request, allow_redirects=True, timeout=REQUEST_TIMEOUT)
    except Exception as exc:
        raise TransportFailure(f"Request to {request.url} failed: {exc}") from exc


def content_type(response: requests.Response) -> Optional[str]:
    value = response.headers.get("Content-Type")
    if not value:
        return None
    return value.split(";", 1)[0].strip().lower()


def declared_charset(response: requests.Response) -> Optional[str]:
    """The charset named in the Content-Type header, if there is one."""
    value = response.headers.get("Content-Type") or ""
    for param in value.split(";")[1:]:
        key, _, charset = param.partition("=")
        if key.strip().lower() == "charset":
            return charset.strip().strip("\"'") or None
    return None


def handle_response(response: requests.Response) -> PreviewResult:
    media_type = content_type(response)
    if media_type != "text/html":
        raise UnsupportedContentType(media_type)

    base_uri = response.url
    try:
        # without a header charset the markup and its <meta charset> decide
        soup = BeautifulSoup(response.content, "html.parser", from_encoding=declared_charset(response))
        metadata = extract_metadata(soup)
        return PreviewResult(
            uri=base_uri,
            title=metadata.title,
            site_name=metadata.site_name,
            description=metadata.description,
            media_type=metadata.media_type,
            images=get_images(soup, base_uri),
            videos=get_videos(soup),
            favicons=get_favicons(soup, base_uri),
        )
    except Exception as exc:
        raise ParseFailure(f"Cannot extract a preview from {base_uri}: {exc}") from exc
