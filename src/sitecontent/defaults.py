"""Built-in default site content.

Returned when neither the remote store nor the local cache has a
document.  It is never written anywhere automatically; only an
explicit save persists it.
"""

from __future__ import annotations

import copy

from sitecontent.models import SiteContent

DEFAULT_CONTENT: dict = {
    "siteName": "Podmotka",
    "contacts": {
        "phone": "",
        "email": "",
        "address": "",
    },
    "blocks": [
        {
            "id": "hero",
            "title": "Odometer correction modules",
            "type": "hero",
            "order": 1,
            "subtitle": "Installation and support",
        },
        {
            "id": "features",
            "title": "Why choose us",
            "type": "features",
            "order": 2,
            "items": [],
        },
        {
            "id": "modules",
            "title": "Modules",
            "type": "modules",
            "order": 3,
            "items": [],
        },
        {
            "id": "can-module",
            "title": "CAN module",
            "type": "module",
            "order": 4,
        },
        {
            "id": "analog-module",
            "title": "Analog module",
            "type": "module",
            "order": 5,
        },
        {
            "id": "ops-module",
            "title": "OPS module",
            "type": "module",
            "order": 6,
        },
        {
            "id": "videos",
            "title": "Videos",
            "type": "videos",
            "order": 50,
            "items": [],
        },
        {
            "id": "contacts",
            "title": "Contacts",
            "type": "contacts",
            "order": 51,
        },
    ],
}


def default_content() -> SiteContent:
    """Return a fresh copy of the built-in default document."""
    return SiteContent.model_validate(copy.deepcopy(DEFAULT_CONTENT))
