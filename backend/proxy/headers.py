# backend/proxy/headers.py
from typing import Dict, Iterator, List, Optional, Tuple


class HeaderMultiMap:
    """
    Ordered, case-insensitive header multimap.
    Every name keeps its values in arrival order, duplicates included
    (several Set-Cookie lines stay separate).
    """

    def __init__(self, items: Optional[List[Tuple[str, str]]] = None):
        # lowercased name -> (name as first seen, values)
        self._entries: Dict[str, Tuple[str, List[str]]] = {}
        for name, value in items or []:
            self.add(name, value)

    def add(self, name: str, value: str) -> None:
        key = name.lower()
        if key not in self._entries:
            self._entries[key] = (name, [])
        self._entries[key][1].append(value)

    def getlist(self, name: str) -> List[str]:
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value for name, or default."""
        values = self.getlist(name)
        return values[0] if values else default

    def items(self) -> Iterator[Tuple[str, str]]:
        for name, values in self._entries.values():
            for value in values:
                yield name, value

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._entries

    def __len__(self) -> int:
        return sum(len(values) for _, values in self._entries.values())

    def __repr__(self) -> str:
        return f"HeaderMultiMap({list(self.items())!r})"


def build_outbound_headers(upstream: HeaderMultiMap) -> List[Tuple[str, str]]:
    """
    Apply the outbound allow-list to upstream headers.
    Returns (name, value) pairs; anything not listed here is dropped so the
    upstream server identity never reaches the client.
    """
    out: List[Tuple[str, str]] = []
    content_type = upstream.get("Content-Type")
    if content_type:
        out.append(("Content-Type", content_type))
    out.append(("Cache-Control", "no-store"))
    content_language = upstream.get("Content-Language")
    if content_language:
        out.append(("Content-Language", content_language))
    for cookie in upstream.getlist("Set-Cookie"):
        out.append(("Set-Cookie", cookie))
    return out
