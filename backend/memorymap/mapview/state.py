"""
Memory Map — Map View State
=============================

What:  The immutable state of the map view and the pure transitions over it.
How:   MapViewState is a frozen dataclass; reduce(state, action) returns a
       new state and never mutates its input.

State slices:
    location         where the map is centred (lat, lng, zoom)
    location_status  whether `location` is the user's real position
    draft            the unsubmitted name + message text
    messages         every message fetched from the API

The two startup tasks touch disjoint slices (MessagesLoaded → messages,
LocationResolved → location + location_status), so they may land in either
order.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from memorymap.schemas.message import MessageResponse, MessageText

RESOLVED_ZOOM = 13


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float
    zoom: int


# University of Rochester, zoomed out to the whole world
DEFAULT_LOCATION = Location(lat=43.1306, lng=-77.6260, zoom=2)


class LocationStatus(str, Enum):
    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Draft:
    name: str = ""
    message: str = ""


@dataclass(frozen=True)
class MapViewState:
    location: Location = DEFAULT_LOCATION
    location_status: LocationStatus = LocationStatus.UNRESOLVED
    draft: Draft = field(default_factory=Draft)
    messages: Tuple[MessageResponse, ...] = ()

    @property
    def has_user_location(self) -> bool:
        return self.location_status is LocationStatus.RESOLVED


# ── Actions ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MessagesLoaded:
    messages: Tuple[MessageResponse, ...]


@dataclass(frozen=True)
class LocationResolved:
    lat: float
    lng: float


@dataclass(frozen=True)
class DraftEdited:
    field: str
    value: str


@dataclass(frozen=True)
class DraftCleared:
    pass


Action = Union[MessagesLoaded, LocationResolved, DraftEdited, DraftCleared]

DRAFT_FIELDS = ("name", "message")


def reduce(state: MapViewState, action: Action) -> MapViewState:
    """
    Apply one action to the state.

    Raises:
        ValueError: DraftEdited names a field the draft does not have, or the
            action type is unknown.
    """
    if isinstance(action, MessagesLoaded):
        return replace(state, messages=tuple(action.messages))

    if isinstance(action, LocationResolved):
        return replace(
            state,
            location=Location(lat=action.lat, lng=action.lng, zoom=RESOLVED_ZOOM),
            location_status=LocationStatus.RESOLVED,
        )

    if isinstance(action, DraftEdited):
        if action.field not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field '{action.field}'. Expected one of: {DRAFT_FIELDS}")
        return replace(state, draft=replace(state.draft, **{action.field: action.value}))

    if isinstance(action, DraftCleared):
        return replace(state, draft=Draft())

    raise ValueError(f"Unknown action: {action!r}")


def draft_is_valid(draft: Draft) -> bool:
    """True when the draft passes the same name/message rules the API enforces."""
    try:
        MessageText(name=draft.name, message=draft.message)
    except PydanticValidationError:
        return False
    return True


def form_is_valid(state: MapViewState) -> bool:
    """The submit control is enabled only for a valid draft with a known user location."""
    return state.has_user_location and draft_is_valid(state.draft)
