from typing import Any, Callable, Dict, List

import pytest

API_URL = "https://lesbonneschoses.example.io/api"
SEARCH_URL = "https://lesbonneschoses.example.io/api/documents/search"

YOUTUBE_IFRAME = (
    '<iframe width="459" height="344" src="http://www.youtube.com/embed/Ye78F3-CuXY?feature=oembed"'
    ' frameborder="0" allowfullscreen></iframe>'
)


def _search_fields(q_default: Any = None) -> Dict[str, Any]:
    q: Dict[str, Any] = {"type": "String", "multiple": True}
    if q_default is not None:
        q["default"] = q_default
    return {
        "ref": {"type": "String", "multiple": False},
        "q": q,
        "page": {"type": "Integer", "multiple": False, "default": "1"},
        "pageSize": {"type": "Integer", "multiple": False, "default": "20"},
        "orderings": {"type": "String", "multiple": False},
    }


@pytest.fixture
def api_descriptor() -> Dict[str, Any]:
    return {
        "refs": [
            {"id": "master", "ref": "UlfoxUnM08QWYXdl", "label": "Master", "isMasterRef": True},
            {
                "id": "UlfoxUnM0wkXYXbe",
                "ref": "UlfoxUnM0wkXYXbe",
                "label": "St-Patrick specials",
                "scheduledAt": 1395187200000,
            },
        ],
        "bookmarks": {"about": "Ue0EDd_mqb8Dhk3j"},
        "types": {"blog-post": "Blog post", "product": "Product"},
        "tags": ["Cupcake", "Pie"],
        "forms": {
            "everything": {
                "method": "GET",
                "enctype": "application/x-www-form-urlencoded",
                "action": SEARCH_URL,
                "fields": _search_fields(),
            },
            "products": {
                "name": "All Products",
                "method": "GET",
                "rel": "collection",
                "enctype": "application/x-www-form-urlencoded",
                "action": SEARCH_URL,
                "fields": _search_fields('[[:d = any(document.type, ["product"])]]'),
            },
        },
    }


@pytest.fixture
def ganache_body() -> List[Dict[str, Any]]:
    return [
        {"type": "heading1", "text": "Get the right approach to ganache", "spans": []},
        {"type": "paragraph", "text": "A lot of people touch base with us.", "spans": []},
        {"type": "heading2", "text": "How to approach ganache", "spans": []},
        {
            "type": "image",
            "url": "https://images.example.com/ganache.jpg",
            "alt": "",
            "copyright": "",
            "dimensions": {"width": 640, "height": 425},
        },
        {
            "type": "list-item",
            "text": "working from the top down: start thick",
            "spans": [{"start": 0, "end": 25, "type": "strong"}],
        },
        {
            "type": "list-item",
            "text": "working from the bottom up: start liquid",
            "spans": [{"start": 0, "end": 26, "type": "strong"}],
        },
        {
            "type": "heading2",
            "text": "Ganache at Les Bonnes Choses",
            "spans": [{"start": 11, "end": 28, "type": "em"}],
        },
        {
            "type": "embed",
            "oembed": {
                "type": "video",
                "embed_url": "http://www.youtube.com/watch?v=Ye78F3-CuXY",
                "provider_name": "YouTube",
                "html": YOUTUBE_IFRAME,
                "width": 459,
                "height": 344,
            },
        },
    ]


@pytest.fixture
def blog_post_json(ganache_body: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": "UlfoxUnM0wkXYXbX",
        "uid": "get-the-right-approach-to-ganache",
        "type": "blog-post",
        "href": f"{API_URL}/documents/search?ref=UlfoxUnM08QWYXdl&q=%5B%5B%3Ad+%3D+at%28document.id%2C+%22UlfoxUnM0wkXYXbX%22%29+%5D%5D",
        "tags": ["Ganache"],
        "slugs": ["get-the-right-approach-to-ganache"],
        "data": {
            "blog-post": {
                "body": {"type": "StructuredText", "value": ganache_body},
                "author": {"type": "Text", "value": "John M. Martelle, Fine Pastry Magazine"},
                "category": {"type": "Select", "value": "Do it yourself"},
                "date": {"type": "Date", "value": "2013-08-17"},
                "update": {"type": "Timestamp", "value": "2014-06-18T15:07:21+0000"},
                "allowComments": {"type": "Text", "value": "Yes"},
                "relatedproduct": [
                    {
                        "type": "Link.document",
                        "value": {
                            "document": {
                                "id": "UlfoxUnM0wkXYXbO",
                                "type": "product",
                                "tags": ["Macaron"],
                                "slug": "cool-coconut-macaron",
                            },
                            "isBroken": False,
                        },
                    }
                ],
                "layout": {"type": "Slices", "value": []},
                "rating": {"type": "Number", "value": "not a number"},
            }
        },
    }


@pytest.fixture
def product_json() -> Dict[str, Any]:
    return {
        "id": "UlfoxUnM0wkXYXbO",
        "type": "product",
        "tags": ["Macaron"],
        "slugs": ["cool-coconut-macaron"],
        "data": {
            "product": {
                "name": {
                    "type": "StructuredText",
                    "value": [{"type": "heading1", "text": "Cool Coconut Macaron", "spans": []}],
                },
                "price": {"type": "Number", "value": 2.5},
                "color": {"type": "Color", "value": "#ffeacd"},
                "image": {
                    "type": "Image",
                    "value": {
                        "main": {
                            "url": "https://images.example.com/macaron.png",
                            "alt": "Coconut macaron",
                            "dimensions": {"width": 500, "height": 500},
                        },
                        "views": {
                            "icon": {
                                "url": "https://images.example.com/macaron-icon.png",
                                "alt": "",
                                "dimensions": {"width": 250, "height": 250},
                            }
                        },
                    },
                },
                "location": {"type": "GeoPoint", "value": {"latitude": 48.8768, "longitude": 2.3338}},
                "flavours": {
                    "type": "Group",
                    "value": [
                        {"name": {"type": "Text", "value": "Coconut"}},
                        {"name": {"type": "Text", "value": "Vanilla"}},
                    ],
                },
                "website": {"type": "Link.web", "value": {"url": "https://example.com/macarons"}},
            }
        },
    }


@pytest.fixture
def make_search_payload() -> Callable[..., Dict[str, Any]]:
    def _make(results: List[Dict[str, Any]], *, page: int = 1, per_page: int = 20) -> Dict[str, Any]:
        return {
            "page": page,
            "results_per_page": per_page,
            "results_size": len(results),
            "total_results_size": len(results),
            "total_pages": 1,
            "next_page": None,
            "prev_page": None,
            "results": results,
        }

    return _make
