"""Wikipedia client for plant images, summaries and page text."""

import logging
import random
import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Any, Dict, List, Optional
from urllib.parse import quote, unquote

import requests

from .config import Config
from .parsing import search_variants

logger = logging.getLogger(__name__)

_COMMONS_IMG_RE = re.compile(
    r'<img[^>]+src="((?:https?:)?//upload\.wikimedia\.org/wikipedia/commons/[^"]+)"[^>]*>',
    re.IGNORECASE,
)
_WIDTH_RE = re.compile(r"/(\d+)px-")
_GALLERY_EXCLUDE = ("OOjs_UI_icon", "edit-ltr.svg")


def _absolute(url: str) -> str:
    return url if url.startswith("http") else f"https:{url}"


def extract_image_urls(html: str) -> List[str]:
    """All Wikimedia Commons image URLs in rendered page HTML, in page order."""
    return [_absolute(m.group(1)) for m in _COMMONS_IMG_RE.finditer(html or "")]


def is_valid_plant_image(url: str, min_width: int = None) -> bool:
    """Reject SVGs, icons and thumbnails narrower than min_width pixels."""
    if min_width is None:
        min_width = Config.MIN_IMAGE_WIDTH

    lowered = url.lower()
    if ".svg" in lowered or "icon" in lowered:
        return False

    width = _WIDTH_RE.search(url)
    if width and int(width.group(1)) < min_width:
        return False
    return True


def first_valid_image(html: str) -> Optional[str]:
    for url in extract_image_urls(html):
        if is_valid_plant_image(url):
            return url
    return None


def search_url(query: str) -> str:
    return f"{Config.WIKIPEDIA_SEARCH_URL}{quote(query)}"


class _ParagraphCollector(HTMLParser):
    """Collect the text content of every <p> element."""

    def __init__(self):
        super().__init__()
        self.paragraphs: List[str] = []
        self._depth = 0
        self._buffer: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag == "p":
            if self._depth == 0:
                self._buffer = []
            self._depth += 1

    def handle_endtag(self, tag):
        if tag == "p" and self._depth:
            self._depth -= 1
            if self._depth == 0:
                self.paragraphs.append("".join(self._buffer))

    def handle_data(self, data):
        if self._depth:
            self._buffer.append(data)


def extract_paragraphs(html: str, limit: int = None) -> List[str]:
    """Non-empty paragraph texts from rendered page HTML."""
    if limit is None:
        limit = Config.MAX_EXTRACT_PARAGRAPHS

    collector = _ParagraphCollector()
    collector.feed(html or "")
    collector.close()
    paragraphs = [p.strip() for p in collector.paragraphs if p.strip()]
    return paragraphs[:limit]


@dataclass
class WikiPage:
    """Images and text pulled from a rendered Wikipedia page."""

    title: str
    main_image_url: Optional[str] = None
    images: List[str] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)


class WikipediaClient:
    """Client for Wikipedia's parse, query and REST summary endpoints."""

    def __init__(
        self,
        session: requests.Session = None,
        api_url: str = None,
        rest_url: str = None,
        timeout: float = None,
    ):
        """Initialize Wikipedia client.

        Args:
            session: HTTP session (a new requests.Session if omitted)
            api_url: Action API URL (defaults to Config.WIKIPEDIA_API_URL)
            rest_url: REST API base URL (defaults to Config.WIKIPEDIA_REST_URL)
            timeout: Per-request timeout in seconds (defaults to Config.HTTP_TIMEOUT)
        """
        self.session = session or requests.Session()
        self.api_url = api_url or Config.WIKIPEDIA_API_URL
        self.rest_url = rest_url or Config.WIKIPEDIA_REST_URL
        self.timeout = timeout or Config.HTTP_TIMEOUT
        self.headers = {"User-Agent": Config.USER_AGENT}

        self.api_calls = 0
        self.failures = 0

    def _get_json(self, url: str, params: Dict[str, Any] = None) -> Optional[Dict[str, Any]]:
        """GET a JSON document, returning None on any failure."""
        self.api_calls += 1
        try:
            resp = self.session.get(
                url, params=params, headers=self.headers, timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            self.failures += 1
            logger.warning("[wiki] request to %s failed: %s", url, e)
            return None
        return data if isinstance(data, dict) else None

    def parse_html(self, page: str) -> Optional[str]:
        """Rendered HTML of a page.

        Args:
            page: Page title, or a full https://en.wikipedia.org/wiki/ URL

        Returns:
            Page HTML, or None if the page is missing or the request failed
        """
        if page.startswith(Config.WIKIPEDIA_WIKI_URL):
            page = unquote(page.rsplit("/", 1)[-1])

        data = self._get_json(
            self.api_url,
            params={
                "action": "parse",
                "format": "json",
                "page": page,
                "prop": "text",
                "redirects": 1,
            },
        )
        if not data:
            return None
        text = (data.get("parse") or {}).get("text") or {}
        return text.get("*") if isinstance(text, dict) else None

    def summary(self, title: str) -> Optional[Dict[str, Any]]:
        """REST page summary (title, extract, thumbnail, type)."""
        return self._get_json(f"{self.rest_url}/page/summary/{quote(title, safe='')}")

    def find_image(self, query: str) -> Optional[str]:
        """First acceptable image on the page for query, if any."""
        html = self.parse_html(query)
        if not html:
            return None
        return first_valid_image(html)

    def resolve_image(self, name: str) -> str:
        """Image for a plant name, trying looser variants of the name in turn.

        Falls back to a Wikipedia search URL when no variant yields an image.
        """
        for variant in search_variants(name):
            image = self.find_image(variant)
            if image:
                return image
        logger.info("[wiki] no image for %r, falling back to search", name)
        return search_url(name)

    def resolve_species_image(self, scientific_name: str, common_name: str) -> str:
        """Image for one species of a multi-species answer.

        Tries the common name, the scientific name, then the /wiki/ pages of
        each. Falls back to the local placeholder image.
        """
        queries = [
            common_name,
            scientific_name,
            Config.WIKIPEDIA_WIKI_URL + quote(common_name.replace(" ", "_")),
            Config.WIKIPEDIA_WIKI_URL + quote(scientific_name.replace(" ", "_")),
        ]
        for query in queries:
            image = self.find_image(query)
            if image:
                return image
        return Config.SPECIES_PLACEHOLDER_IMAGE

    def thumbnail(self, name: str) -> str:
        """Summary thumbnail for a plant, falling back to the genus, then the raw name."""
        cleaned = name.split(" spp.")[0].strip()
        cleaned = re.sub(r"\s*\([^)]*\)", "", cleaned).strip()

        candidates = [cleaned]
        if " " in cleaned:
            candidates.append(cleaned.split(" ")[0])
        candidates.append(name)

        for candidate in candidates:
            data = self.summary(candidate) or {}
            source = (data.get("thumbnail") or {}).get("source")
            if source:
                return source
        return Config.FACT_PLACEHOLDER_IMAGE

    def page_details(self, scientific_name: str, common_name: str = "") -> WikiPage:
        """Main image, gallery images and paragraphs of a plant's page.

        The main image is the first Commons image whose file name contains
        the scientific or common name.
        """
        page = WikiPage(title=scientific_name)
        html = self.parse_html(scientific_name)
        if not html:
            return page

        names = [n.replace(" ", "_").lower() for n in (scientific_name, common_name) if n]
        images = extract_image_urls(html)
        for url in images:
            if "OOjs_UI_icon" in url:
                continue
            if any(n in url.lower() for n in names):
                page.main_image_url = url
                break

        gallery: List[str] = []
        for url in images:
            if any(x in url for x in _GALLERY_EXCLUDE) or url in gallery:
                continue
            gallery.append(url)
        page.images = gallery[: Config.MAX_ADDITIONAL_IMAGES]
        page.paragraphs = extract_paragraphs(html)
        return page

    def random_plant_title(self, rng: random.Random = None) -> Optional[str]:
        """A random article title from a random plant category."""
        rng = rng or random
        category = rng.choice(Config.PLANT_CATEGORIES)
        data = self._get_json(
            self.api_url,
            params={
                "action": "query",
                "list": "categorymembers",
                "cmtitle": f"Category:{category}",
                "cmtype": "page",
                "cmlimit": 500,
                "format": "json",
            },
        )
        members = ((data or {}).get("query") or {}).get("categorymembers") or []
        titles = [
            m["title"]
            for m in members
            if isinstance(m, dict)
            and m.get("title")
            and ":" not in m["title"]
            and "List of" not in m["title"]
        ]
        if not titles:
            logger.warning("[wiki] no usable pages in Category:%s", category)
            return None
        return rng.choice(titles)

    def get_stats(self) -> Dict[str, int]:
        """Get client statistics.

        Returns:
            Dictionary with api_calls and failures
        """
        return {"api_calls": self.api_calls, "failures": self.failures}
