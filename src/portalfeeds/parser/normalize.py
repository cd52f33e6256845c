"""Field normalization shared by the feed dialect parsers.

- `slugify` / `SlugRegistry`: deterministic URL slugs, unique per parse pass
- `parse_date`: permissive feed date parsing with a fallback timestamp
- `sanitize_html`: strip active markup before content is rendered as HTML
- `first_image`: pull a lead image out of article HTML

Example:
    >>> from portalfeeds.parser.normalize import SlugRegistry, slugify
    >>> slugify("Crème Brûlée: A Story!")
    'creme-brulee-a-story'
    >>> slugs = SlugRegistry()
    >>> slugs.claim("Hello"), slugs.claim("Hello")
    ('hello', 'hello-2')
"""

from __future__ import annotations

import contextlib
import logging
import re
import unicodedata
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from bs4 import BeautifulSoup, Comment
from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 80

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_URL_SCHEME_NOISE_RE = re.compile(r"[\x00-\x20]+")

# Elements removed together with their content
UNSAFE_TAGS = frozenset(
    {
        "script",
        "style",
        "iframe",
        "frame",
        "frameset",
        "object",
        "embed",
        "applet",
        "form",
        "input",
        "button",
        "textarea",
        "select",
        "link",
        "meta",
        "base",
        "noscript",
        "template",
        "svg",
        "math",
    }
)

URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "poster", "background", "srcset", "xlink:href"})

UNSAFE_SCHEMES = ("javascript:", "vbscript:", "data:")


# =============================================================================
# Slugs
# =============================================================================


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Convert text to a URL-friendly slug.

    Lowercases, strips diacritics, collapses every run of characters
    outside ``[a-z0-9]`` into a single ``-`` and trims separators from
    both ends. Idempotent: ``slugify(slugify(x)) == slugify(x)``.

    Example:
        >>> slugify("  Hello,   World  ")
        'hello-world'
        >>> slugify("¿Qué pasa?")
        'que-pasa'
        >>> slugify("!!!")
        ''
    """
    text = unicodedata.normalize("NFKD", text or "")
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.lower().encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM_RE.sub("-", text).strip("-")
    if len(slug) > max_length:
        slug = slug[:max_length].rstrip("-")
    return slug


class SlugRegistry:
    """Hands out slugs that are unique within one parse pass.

    The first entry to claim a slug keeps it; later collisions get
    ``-2``, ``-3``, ... appended, shortening the base so the result
    stays within ``max_length``.

    Example:
        >>> from portalfeeds.parser.normalize import SlugRegistry
        >>> slugs = SlugRegistry()
        >>> [slugs.claim("Same Title") for _ in range(3)]
        ['same-title', 'same-title-2', 'same-title-3']
        >>> slugs.claim("", "urn:guid:42")
        'urn-guid-42'
    """

    def __init__(self, fallback: str = "item", max_length: int = MAX_SLUG_LENGTH) -> None:
        self._seen: set[str] = set()
        self._fallback = fallback
        self._max_length = max_length

    def claim(self, *candidates: str | None) -> str:
        """Claim a slug derived from the first candidate that yields one."""
        base = next((s for s in (slugify(c or "") for c in candidates) if s), self._fallback)
        slug = base
        counter = 2
        while slug in self._seen:
            suffix = f"-{counter}"
            slug = base[: self._max_length - len(suffix)].rstrip("-") + suffix
            counter += 1
        self._seen.add(slug)
        return slug

    def __contains__(self, slug: str) -> bool:
        return slug in self._seen


# =============================================================================
# Dates
# =============================================================================


def parse_date(value: str | None, default: datetime) -> datetime:
    """Parse a feed date permissively.

    Tries RFC 822 (RSS ``pubDate``), then ISO 8601 (Atom), then a fuzzy
    parse. Naive results are taken as UTC. Anything unparsable yields
    ``default`` (normally the fetch time).

    Example:
        >>> from datetime import UTC, datetime
        >>> fallback = datetime(2026, 1, 1, tzinfo=UTC)
        >>> parse_date("Thu, 01 Jan 2026 12:00:00 GMT", fallback).hour
        12
        >>> parse_date("2026-01-02T08:30:00Z", fallback).day
        2
        >>> parse_date("whenever", fallback) == fallback
        True
    """
    if not value or not value.strip():
        return default
    value = value.strip()

    parsed: datetime | None = None
    with contextlib.suppress(TypeError, ValueError, IndexError):
        parsed = parsedate_to_datetime(value)

    if parsed is None:
        with contextlib.suppress(ValueError):
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))

    if parsed is None:
        try:
            parsed = date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            logger.debug("Unparsable date %r, using fallback: %s", value, e)
            return default

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# =============================================================================
# HTML
# =============================================================================


def _is_unsafe_url(value: str) -> bool:
    cleaned = _URL_SCHEME_NOISE_RE.sub("", value).lower()
    return cleaned.startswith(UNSAFE_SCHEMES)


def sanitize_html(html: str | None) -> str:
    """Strip script-bearing and otherwise unsafe markup from feed HTML.

    Removes active elements (script, iframe, object, form controls, ...)
    with their content, HTML comments, ``on*`` event handlers, inline
    ``style`` attributes and ``javascript:``/``vbscript:``/``data:`` URLs.
    Substack's ``image-link-expand`` overlay anchors are dropped too.

    The result may be rendered as trusted HTML.

    Example:
        >>> sanitize_html('<p onclick="x()">Hi<script>alert(1)</script></p>')
        '<p>Hi</p>'
        >>> sanitize_html('<a href="javascript:alert(1)">x</a>')
        '<a>x</a>'
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    for tag in soup.find_all(list(UNSAFE_TAGS)):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.select("a.image-link-expand"):
        if not tag.decomposed:
            tag.decompose()

    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            name = attr.lower()
            value = tag.attrs[attr]
            if name.startswith("on") or name == "style":
                del tag.attrs[attr]
            elif name in URL_ATTRIBUTES and isinstance(value, str) and _is_unsafe_url(value):
                del tag.attrs[attr]

    return str(soup).strip()


def first_image(html: str | None) -> str | None:
    """Return the ``src`` of the first ``<img>`` in ``html``, if any.

    Example:
        >>> first_image('<p><img src="https://cdn/a.png"><img src="b.png"></p>')
        'https://cdn/a.png'
        >>> first_image("<p>no images</p>") is None
        True
    """
    if not html:
        return None
    img = BeautifulSoup(html, "html.parser").find("img", src=True)
    if img is None:
        return None
    src = str(img["src"]).strip()
    return src or None
