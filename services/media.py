"""
Image, video and favicon resolution for a parsed page.

All references except videos are resolved against the base URI, which is the
final URL of the response after redirects. Dimensions coming from
``og:*:width``/``og:*:height`` tags are paired with the media by position:
the n-th width and n-th height belong to the n-th media tag, and pairing stops
as soon as either sequence runs out. A tag with a blank reference still takes
its width/height slot but produces no media. Repeated references keep only
their first tag.
"""
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from models.preview import Media
from services.metadata import find_meta

FAVICON_RELS = ("icon", "shortcut icon", "apple-touch-icon")
DEFAULT_FAVICON = "/favicon.ico"


def parse_dimension(value: Optional[str]) -> Optional[int]:
    """Parse an unsigned integer attribute. Missing or malformed values give None."""
    if value is None:
        return None
    value = value.strip()
    if not value.isdigit() or not value.isascii():
        return None
    return int(value)


def _dedupe(values: Iterable[Optional[str]]) -> List[Optional[str]]:
    # None marks a blank tag and is kept in place
    seen = set()
    result = []
    for value in values:
        if value is None:
            result.append(None)
        elif value not in seen:
            seen.add(value)
            result.append(value)
    return result


def _media_set(media: Iterable[Media]) -> frozenset:
    # the first entry for a given uri wins
    unique = {}
    for item in media:
        unique.setdefault(item.uri, item)
    return frozenset(unique.values())


def _contents(soup: BeautifulSoup, key: str) -> List[Optional[str]]:
    return [tag.get("content", "").strip() or None for tag in find_meta(soup, key)]


def pair_dimensions(soup: BeautifulSoup, uris: List[Optional[str]], prefix: str) -> frozenset:
    widths = iter(tag.get("content") for tag in find_meta(soup, f"{prefix}:width"))
    heights = iter(tag.get("content") for tag in find_meta(soup, f"{prefix}:height"))
    media = []
    for uri in uris:
        try:
            width, height = next(widths), next(heights)
        except StopIteration:
            width = height = None
        if uri is None:
            continue
        media.append(Media(uri=uri, width=parse_dimension(width), height=parse_dimension(height)))
    return _media_set(media)


def _get_og_images(soup: BeautifulSoup, base_uri: str) -> frozenset:
    uris = _dedupe(
        urljoin(base_uri, content) if content else None for content in _contents(soup, "og:image")
    )
    if not any(uris):
        return frozenset()
    return pair_dimensions(soup, uris, "og:image")


def _get_image_src(soup: BeautifulSoup, base_uri: str) -> frozenset:
    tag = soup.find("link", rel="image_src")
    if tag and tag.get("href", "").strip():
        return frozenset({Media(uri=urljoin(base_uri, tag["href"]))})
    return frozenset()


def _get_img_tags(soup: BeautifulSoup, base_uri: str) -> frozenset:
    return _media_set(
        Media(
            uri=urljoin(base_uri, tag["src"]),
            width=parse_dimension(tag.get("width")),
            height=parse_dimension(tag.get("height")),
        )
        for tag in soup.find_all("img")
        if tag.get("src", "").strip()
    )


IMAGE_SOURCES = (_get_og_images, _get_image_src, _get_img_tags)


def get_images(soup: BeautifulSoup, base_uri: str) -> frozenset:
    for source in IMAGE_SOURCES:
        images = source(soup, base_uri)
        if images:
            return images
    return frozenset()


def get_videos(soup: BeautifulSoup) -> frozenset:
    uris = _dedupe(
        urlsplit(content).geturl() if content else None
        for key in ("og:video:secure_url", "og:video:url")
        for content in _contents(soup, key)
    )
    if not any(uris):
        return frozenset()
    return pair_dimensions(soup, uris, "og:video")


def get_favicons(soup: BeautifulSoup, base_uri: str) -> frozenset:
    favicons = frozenset(
        urljoin(base_uri, tag["href"])
        for tag in soup.find_all("link")
        if " ".join(tag.get_attribute_list("rel", [])).lower() in FAVICON_RELS
        and tag.get("href", "").strip()
    )
    return favicons or frozenset({urljoin(base_uri, DEFAULT_FAVICON)})
