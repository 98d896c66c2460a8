"""Derived fields for listing results.

Listings are produced lazily: each ``MeetingItem`` is parsed and its derived
fields are computed only when the consumer advances the iterator, so a
malformed element fails at the point it is consumed and not before.
"""

from typing import Iterable, Iterator, Optional
from urllib.parse import urlsplit
from xml.etree.ElementTree import Element

from .marshalling import element_to_dict
from .models import MeetingItem


def resolve_full_url(service_url: str, url_path: Optional[str]) -> str:
    """Join the scheme and host of ``service_url`` with ``url_path``.

    ``resolve_full_url("https://host/api/xml", "/p123")`` is
    ``"https://host/p123"``; an empty or missing path yields ``""``.
    """
    if not url_path:
        return ""

    parts = urlsplit(service_url)
    # netloc keeps IPv6 brackets and the port; userinfo is dropped
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}{url_path}"


def produce_meeting_items(
    nodes: Iterable[Element], service_url: str
) -> Iterator[MeetingItem]:
    """Yield one ``MeetingItem`` per node with duration and full URL filled in.

    Args:
        nodes: ``<meeting>`` or ``<sco>`` elements of a listing reply
        service_url: Normalized service endpoint

    Yields:
        Parsed items; the generator is single-pass

    Raises:
        pydantic.ValidationError: When the element being consumed is malformed
    """
    for node in nodes:
        data = element_to_dict(node)
        # The server's own duration text is superseded by the computed value
        data.pop("duration", None)
        item = MeetingItem.model_validate(data)

        if item.date_begin is not None and item.date_end is not None:
            item.duration = item.date_end - item.date_begin
        item.full_url = resolve_full_url(service_url, item.url_path)

        yield item
