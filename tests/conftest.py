from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} {self.reason}")


class FakeSession:
    """Records requests and answers them with a handler(method, url, kwargs)."""

    def __init__(self, handler: Callable[..., FakeResponse]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []

    def _request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.handler(method, url, kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)


def wiki_handler(
    pages: Dict[str, str] = None,
    summaries: Dict[str, Dict[str, Any]] = None,
    categories: Optional[List[str]] = None,
):
    """Handler serving parse, summary and categorymembers requests from dicts."""
    pages = pages or {}
    summaries = summaries or {}

    def handle(method, url, kwargs):
        params = kwargs.get("params") or {}
        if params.get("action") == "parse":
            html = pages.get(params["page"])
            if html is None:
                return FakeResponse(200, {"error": {"code": "missingtitle"}})
            return FakeResponse(200, {"parse": {"text": {"*": html}}})
        if params.get("action") == "query":
            members = [{"title": t} for t in (categories or [])]
            return FakeResponse(200, {"query": {"categorymembers": members}})
        if "/page/summary/" in url:
            title = unquote(url.rsplit("/", 1)[-1])
            if title in summaries:
                return FakeResponse(200, summaries[title])
            return FakeResponse(404, {"type": "not_found"}, reason="Not Found")
        raise AssertionError(f"unexpected request {method} {url}")

    return handle


class FakeGenerator:
    """Stand-in for PlantInfoGenerator with scripted replies."""

    def __init__(
        self,
        descriptions: List[str] = None,
        species_reply: str = "No multiple species",
        details_reply: str = "Family: Rosaceae\nWater needs: Moderate",
        facts: List[Dict[str, str]] = None,
        error: Exception = None,
    ):
        self.descriptions = list(descriptions or [])
        self.species_reply = species_reply
        self.details_reply = details_reply
        self.facts = facts or []
        self.error = error
        self.describe_calls = 0
        self.configured = True

    def _check(self):
        if self.error is not None:
            raise self.error

    def describe(self, term):
        self._check()
        self.describe_calls += 1
        if len(self.descriptions) > 1:
            return self.descriptions.pop(0)
        return self.descriptions[0] if self.descriptions else ""

    def check_species(self, term):
        self._check()
        return self.species_reply

    def species_details(self, common_name, scientific_name):
        self._check()
        return self.details_reply

    def plant_facts(self, count):
        self._check()
        return self.facts[:count]

    def get_stats(self):
        return {"call_count": self.describe_calls}


COMPLETE_DESCRIPTION = """**Common name:** Garden Rose
**Scientific name:** Rosa gallica
**Family:** Rosaceae
**Description:** A woody perennial flowering plant.
It is grown for its fragrant blooms.
**Water needs:** Moderate"""

INCOMPLETE_DESCRIPTION = """Common name: Garden Rose
Family: Rosaceae"""

ROSA_HTML = """
<div class="infobox">
  <img src="//upload.wikimedia.org/wikipedia/commons/thumb/a/a1/OOjs_UI_icon_edit-ltr.svg/20px-OOjs_UI_icon_edit-ltr.svg.png" width="20">
  <img src="//upload.wikimedia.org/wikipedia/commons/thumb/b/b2/Rosa_gallica_flower.jpg/50px-Rosa_gallica_flower.jpg">
  <img src="//upload.wikimedia.org/wikipedia/commons/thumb/c/c3/Rosa_gallica_flower.jpg/250px-Rosa_gallica_flower.jpg" alt="">
  <img src="//upload.wikimedia.org/wikipedia/en/thumb/d/d4/Local_only.jpg/250px-Local_only.jpg">
</div>
<p>Rosa gallica is a species of flowering plant.</p>
<p>   </p>
<p>It is native to <b>southern</b> Europe.</p>
"""

ROSA_IMAGE = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/c/c3/"
    "Rosa_gallica_flower.jpg/250px-Rosa_gallica_flower.jpg"
)


@pytest.fixture()
def no_sleep():
    delays = []
    return delays, delays.append
