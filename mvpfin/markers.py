"""Entry marker registry.

The registry is the single source of truth for which entry categories exist
and the order they are shown in. Reports may carry other keys; they are
ignored everywhere the registry is consulted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from typing import Any

from .models import EntryMarker

KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

PIX_KEY = "pix"
MESSAGE_FALLBACK_ICON = "•"
MESSAGE_PIX_ICON = "💠"
INPUT_FALLBACK_ICON = "💰"


class LoadState(str, Enum):
    NOT_LOADED = "not_loaded"
    LOADED = "loaded"


def default_markers() -> list[EntryMarker]:
    """Return the catalogue a fresh record store is seeded with."""

    return [
        EntryMarker(key="pix", label="Pix", icon=None, order=1),
        EntryMarker(key="cartao", label="Cartão", icon="💳", order=2),
        EntryMarker(key="dizimo", label="Dízimo", icon="🙏", order=3),
        EntryMarker(key="oferta", label="Oferta", icon="🎁", order=4),
    ]


def validate_key(key: str) -> str:
    if not isinstance(key, str) or not KEY_PATTERN.match(key):
        raise ValueError(
            f"Invalid marker key {key!r}: use lowercase letters, digits and underscores"
        )
    return key


def marker_from_record(record: Mapping[str, Any]) -> EntryMarker:
    """Build a marker from a store row, treating blank icons as absent."""

    icon = record.get("icon") or None
    return EntryMarker(
        key=validate_key(str(record["key"])),
        label=str(record["label"]),
        icon=icon,
        order=int(record.get("order") or 0),
    )


def message_icon(marker: EntryMarker) -> str:
    """Icon used in the share message."""

    if marker.icon:
        return marker.icon
    return MESSAGE_PIX_ICON if marker.key == PIX_KEY else MESSAGE_FALLBACK_ICON


def input_icon(marker: EntryMarker) -> str:
    """Icon used beside the amount input of an enabled marker."""

    if marker.icon:
        return marker.icon
    return MESSAGE_PIX_ICON if marker.key == PIX_KEY else INPUT_FALLBACK_ICON


class MarkerRegistry:
    """Ordered, key-unique collection of entry markers.

    A registry created without markers is ``NOT_LOADED``; one built through
    :meth:`loaded` is ``LOADED`` even when it holds no markers, so callers can
    tell "still loading" apart from "nothing configured".
    """

    def __init__(self, markers: Iterable[EntryMarker] | None = None) -> None:
        self.status = LoadState.NOT_LOADED
        self._markers: tuple[EntryMarker, ...] = ()
        if markers is not None:
            self._load(markers)

    @classmethod
    def loaded(cls, markers: Iterable[EntryMarker]) -> "MarkerRegistry":
        return cls(markers)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "MarkerRegistry":
        return cls(marker_from_record(record) for record in records)

    def _load(self, markers: Iterable[EntryMarker]) -> None:
        ordered = sorted(markers, key=lambda marker: marker.order)
        seen: set[str] = set()
        for marker in ordered:
            validate_key(marker.key)
            if marker.key in seen:
                raise ValueError(f"Duplicate marker key {marker.key!r}")
            seen.add(marker.key)
        self._markers = tuple(ordered)
        self.status = LoadState.LOADED

    @property
    def is_loaded(self) -> bool:
        return self.status is LoadState.LOADED

    @property
    def is_empty(self) -> bool:
        return self.is_loaded and not self._markers

    def keys(self) -> list[str]:
        return [marker.key for marker in self._markers]

    def get(self, key: str) -> EntryMarker | None:
        for marker in self._markers:
            if marker.key == key:
                return marker
        return None

    def __contains__(self, key: object) -> bool:
        return any(marker.key == key for marker in self._markers)

    def __iter__(self) -> Iterator[EntryMarker]:
        return iter(self._markers)

    def __len__(self) -> int:
        return len(self._markers)

    def __repr__(self) -> str:
        return f"MarkerRegistry(status={self.status.value}, keys={self.keys()})"
