from typing import Callable, List, NamedTuple, Optional, Sequence

from bs4 import BeautifulSoup, Tag

Strategy = Callable[[BeautifulSoup], Optional[str]]


class PageMetadata(NamedTuple):
    title: str
    site_name: str
    description: str
    media_type: str


def find_meta(soup: BeautifulSoup, key: str) -> List[Tag]:
    """All ``<meta property=key>`` tags, or the ``<meta name=key>`` ones if there are none."""
    tags = soup.find_all("meta", attrs={"property": key})
    if tags:
        return tags
    return soup.find_all("meta", attrs={"name": key})


def lookup(soup: BeautifulSoup, key: str) -> Optional[str]:
    tags = find_meta(soup, key)
    if tags:
        return tags[0].get("content") or None
    return None


def meta(key: str) -> Strategy:
    return lambda soup: lookup(soup, key)


def title_text(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return " ".join(tag.get_text().split()) or None


def first_of(soup: BeautifulSoup, strategies: Sequence[Strategy], default: str = "") -> str:
    for strategy in strategies:
        value = strategy(soup)
        if value:
            return value
    return default


TITLE = (meta("og:title"), title_text)
SITE_NAME = (meta("og:site_name"),)
DESCRIPTION = (meta("description"), meta("Description"), meta("og:description"))
MEDIA_TYPE = (meta("medium"), meta("og:type"))


def _get_title(soup: BeautifulSoup) -> str:
    return first_of(soup, TITLE)


def _get_site_name(soup: BeautifulSoup) -> str:
    return first_of(soup, SITE_NAME)


def _get_description(soup: BeautifulSoup) -> str:
    return first_of(soup, DESCRIPTION)


def _get_media_type(soup: BeautifulSoup) -> str:
    return first_of(soup, MEDIA_TYPE, default="website")


def extract_metadata(soup: BeautifulSoup) -> PageMetadata:
    return PageMetadata(
        title=_get_title(soup),
        site_name=_get_site_name(soup),
        description=_get_description(soup),
        media_type=_get_media_type(soup),
    )
