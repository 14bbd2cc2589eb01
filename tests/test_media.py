from bs4 import BeautifulSoup

from models.preview import Media
from services.media import get_favicons, get_images, get_videos, parse_dimension

BASE = "https://example.com/blog/post"


def make_soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def by_uri(media) -> dict:
    return {item.uri: item for item in media}


# --- dimensions ---

def test_parse_dimension():
    assert parse_dimension("100") == 100
    assert parse_dimension(" 20 ") == 20
    assert parse_dimension("0") == 0
    assert parse_dimension("-5") is None
    assert parse_dimension("10px") is None
    assert parse_dimension("") is None
    assert parse_dimension(None) is None


def test_media_identity_is_the_uri():
    assert Media(uri="a", width=1, height=2) == Media(uri="a")
    assert len({Media(uri="a", width=1, height=2), Media(uri="a")}) == 1
    assert Media(uri="a", width=1, height=2).has_dimensions()
    assert not Media(uri="a", width=1).has_dimensions()


# --- images ---

def test_og_images_resolved_and_paired():
    soup = make_soup(
        '<meta property="og:image" content="/a.png">'
        '<meta property="og:image" content="https://cdn.example.com/b.png">'
        '<meta property="og:image" content="c.png">'
        '<meta property="og:image:width" content="100">'
        '<meta property="og:image:width" content="200">'
        '<meta property="og:image:height" content="50">'
    )
    images = by_uri(get_images(soup, BASE))
    assert set(images) == {
        "https://example.com/a.png",
        "https://cdn.example.com/b.png",
        "https://example.com/blog/c.png",
    }
    assert (images["https://example.com/a.png"].width, images["https://example.com/a.png"].height) == (100, 50)
    assert not images["https://cdn.example.com/b.png"].has_dimensions()
    assert not images["https://example.com/blog/c.png"].has_dimensions()


def test_og_images_win_over_img_tags():
    soup = make_soup('<meta property="og:image" content="/og.png"><img src="/inline.png">')
    assert get_images(soup, BASE) == frozenset({Media(uri="https://example.com/og.png")})


def test_image_src_link():
    soup = make_soup('<link rel="image_src" href="/thumb.png"><img src="/inline.png">')
    images = get_images(soup, BASE)
    assert images == frozenset({Media(uri="https://example.com/thumb.png")})
    assert not next(iter(images)).has_dimensions()


def test_img_tags_with_partial_dimensions():
    soup = make_soup(
        '<img src="/one.png" width="10" height="20">'
        '<img src="/two.png" width="30" height="40">'
        '<img src="/three.png" width="wide">'
    )
    images = by_uri(get_images(soup, BASE))
    assert len(images) == 3
    assert (images["https://example.com/one.png"].width, images["https://example.com/one.png"].height) == (10, 20)
    assert images["https://example.com/two.png"].has_dimensions()
    assert images["https://example.com/three.png"].width is None
    assert images["https://example.com/three.png"].height is None


def test_duplicate_images_keep_first_dimensions():
    soup = make_soup(
        '<img src="/same.png" width="100" height="100">'
        '<img src="https://example.com/same.png" width="999" height="999">'
    )
    images = get_images(soup, BASE)
    assert len(images) == 1
    assert next(iter(images)).width == 100


def test_img_without_src_is_skipped():
    soup = make_soup('<img alt="nothing"><img src="/real.png">')
    assert set(by_uri(get_images(soup, BASE))) == {"https://example.com/real.png"}


def test_no_images():
    assert get_images(make_soup("<html></html>"), BASE) == frozenset()


# --- videos ---

def test_videos_are_deduplicated_and_paired():
    soup = make_soup(
        '<meta property="og:video:secure_url" content="https://example.com/v.mp4">'
        '<meta property="og:video:url" content="https://example.com/v.mp4">'
        '<meta property="og:video:url" content="https://example.com/w.mp4">'
        '<meta property="og:video:width" content="640">'
        '<meta property="og:video:height" content="360">'
    )
    videos = by_uri(get_videos(soup))
    assert set(videos) == {"https://example.com/v.mp4", "https://example.com/w.mp4"}
    assert (videos["https://example.com/v.mp4"].width, videos["https://example.com/v.mp4"].height) == (640, 360)
    assert not videos["https://example.com/w.mp4"].has_dimensions()


def test_videos_are_not_resolved():
    soup = make_soup('<meta property="og:video:url" content="/relative.mp4">')
    assert set(by_uri(get_videos(soup))) == {"/relative.mp4"}


def test_no_videos():
    assert get_videos(make_soup("<html></html>")) == frozenset()


# --- favicons ---

def test_favicons_union():
    soup = make_soup(
        '<link rel="icon" href="/favicon.png">'
        '<link rel="shortcut icon" href="https://static.example.com/favicon.ico">'
        '<link rel="apple-touch-icon" href="touch.png">'
        '<link rel="stylesheet" href="/style.css">'
    )
    assert get_favicons(soup, BASE) == frozenset(
        {
            "https://example.com/favicon.png",
            "https://static.example.com/favicon.ico",
            "https://example.com/blog/touch.png",
        }
    )


def test_favicon_default_fallback():
    assert get_favicons(make_soup("<html></html>"), BASE) == frozenset({"https://example.com/favicon.ico"})


def test_favicon_rel_must_match_exactly():
    soup = make_soup('<link rel="mask-icon" href="/mask.svg">')
    assert get_favicons(soup, BASE) == frozenset({"https://example.com/favicon.ico"})


def test_favicon_rel_is_case_insensitive():
    soup = make_soup('<link rel="Shortcut Icon" href="/shortcut.ico"><link rel="ICON" href="/upper.png">')
    assert get_favicons(soup, BASE) == frozenset(
        {"https://example.com/shortcut.ico", "https://example.com/upper.png"}
    )


def test_duplicate_og_images_keep_first_dimensions():
    soup = make_soup(
        '<meta property="og:image" content="/same.png">'
        '<meta property="og:image" content="https://example.com/same.png">'
        '<meta property="og:image:width" content="100">'
        '<meta property="og:image:width" content="999">'
        '<meta property="og:image:height" content="50">'
        '<meta property="og:image:height" content="888">'
    )
    images = get_images(soup, BASE)
    assert len(images) == 1
    image = next(iter(images))
    assert (image.uri, image.width, image.height) == ("https://example.com/same.png", 100, 50)


def test_blank_og_image_keeps_its_dimension_slot():
    soup = make_soup(
        '<meta property="og:image" content="">'
        '<meta property="og:image" content="/second.png">'
        '<meta property="og:image:width" content="10">'
        '<meta property="og:image:width" content="20">'
        '<meta property="og:image:height" content="11">'
        '<meta property="og:image:height" content="21">'
    )
    images = by_uri(get_images(soup, BASE))
    assert set(images) == {"https://example.com/second.png"}
    assert (images["https://example.com/second.png"].width, images["https://example.com/second.png"].height) == (20, 21)


def test_blank_og_video_keeps_its_dimension_slot():
    soup = make_soup(
        '<meta property="og:video:secure_url" content=" ">'
        '<meta property="og:video:url" content="https://example.com/v.mp4">'
        '<meta property="og:video:width" content="640">'
        '<meta property="og:video:width" content="1280">'
        '<meta property="og:video:height" content="360">'
        '<meta property="og:video:height" content="720">'
    )
    videos = by_uri(get_videos(soup))
    assert (videos["https://example.com/v.mp4"].width, videos["https://example.com/v.mp4"].height) == (1280, 720)


def test_only_blank_og_images_fall_through_to_img_tags():
    soup = make_soup('<meta property="og:image" content=""><img src="/inline.png">')
    assert set(by_uri(get_images(soup, BASE))) == {"https://example.com/inline.png"}
