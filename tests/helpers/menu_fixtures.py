from __future__ import annotations

import copy
import json
from typing import Any, Callable, Dict, List, Optional

import httpx

from src.api.models.menu import BusinessRecord, CategoryRecord, ItemRecord

BUSINESS_JSON: Dict[str, Any] = {
    "slug": "acme",
    "name": "Acme Diner",
    "theme": "Kardi",
    "colors": {"primary": "#aa0000", "secondary": "#ffffff"},
    "languages": ["en", "nl"],
    "currencies": ["USD", "EUR"],
    "default_language": "en",
    "default_currency": "USD",
    "subscription": {"feedback": True, "favorites": True},
    "logo": "https://cdn.example.com/acme/logo.png",
}

CATEGORIES_JSON: List[Dict[str, Any]] = [
    {"id": "drinks", "name": {"en": "Drinks", "nl": "Dranken"}, "order": 2},
    {"id": "mains", "name": {"en": "Mains", "nl": "Hoofdgerechten"}, "order": 1},
]

ITEMS_JSON: List[Dict[str, Any]] = [
    {
        "id": "burger",
        "titles": {"en": "Burger", "nl": "Hamburger"},
        "prices": {"USD": 10.00, "EUR": 9.50},
        "discount": {"type": "percent", "value": 20},
        "image": "https://cdn.example.com/acme/burger.jpg",
        "category_id": "mains",
    },
    {
        "id": "cola",
        "titles": {"en": "Cola"},
        "prices": {"USD": 2.50},
        "discount": None,
        "image": "",
        "category_id": "drinks",
    },
]

SOCIALS_JSON = [{"type": "instagram", "url": "https://instagram.com/acme"}]
HOURS_JSON = [{"day": "mon", "opens": "09:00", "closes": "22:00"}, {"day": "sun", "closed": True}]
TRANSLATIONS_JSON = {"en": {"all": "All", "other": "Other"}, "nl": {"all": "Alles", "other": "Overig"}}


def acme_business(**overrides: Any) -> BusinessRecord:
    data = dict(BUSINESS_JSON)
    data.update(overrides)
    return BusinessRecord.from_dict(data)


def acme_categories() -> List[CategoryRecord]:
    return [CategoryRecord.from_dict(c) for c in CATEGORIES_JSON]


def acme_items() -> List[ItemRecord]:
    return [ItemRecord.from_dict(i) for i in ITEMS_JSON]


class FakeBackend:
    """
    In-memory menu backend for httpx.MockTransport.
    `businesses` maps slug -> business JSON; everything else is shared.
    """

    def __init__(self, businesses: Optional[Dict[str, Dict[str, Any]]] = None):
        self.businesses = businesses if businesses is not None else {"acme": copy.deepcopy(BUSINESS_JSON)}
        self.categories = copy.deepcopy(CATEGORIES_JSON)
        self.items = copy.deepcopy(ITEMS_JSON)
        self.socials = copy.deepcopy(SOCIALS_JSON)
        self.hours = copy.deepcopy(HOURS_JSON)
        self.translations = copy.deepcopy(TRANSLATIONS_JSON)
        self.failing: set = set()  # resource names answering 500
        self.feedback: List[Dict[str, Any]] = []
        self.requests: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(f"{request.method} {path}")
        parts = [p for p in path.split("/") if p]
        if "business" not in parts:
            return httpx.Response(404)
        parts = parts[parts.index("business"):]
        if len(parts) < 2:
            return httpx.Response(404)
        slug = parts[1]
        resource = parts[2] if len(parts) > 2 else "business"

        if resource in self.failing:
            return httpx.Response(500, json={"error": "boom"})
        if slug not in self.businesses:
            return httpx.Response(404, json={"error": "not found"})

        if request.method == "POST" and resource == "feedback":
            self.feedback.append(json.loads(request.content or b"{}"))
            return httpx.Response(201, json={"ok": True})

        body: Any = {
            "business": self.businesses[slug],
            "categories": {"data": self.categories},
            "items": self.items,
            "socials": self.socials,
            "hours": self.hours,
            "qr_languages": self.translations,
        }.get(resource)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, json=body)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler), base_url="http://menu.test/api")
