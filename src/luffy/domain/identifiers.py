"""Composite identifiers threaded between pipeline stages.

A provider hands the caller plain string tokens and expects them back
verbatim in the next stage.  The tokens carry the parent media context
so a later stage can recover it without re-querying earlier ones::

    media reference   "<mediaID>|<kind>"
    season/episode/
    server            "<itemID>|<mediaID>|<kind>"

Trailing empty fields are omitted, so a reference without a known kind
is just ``"<mediaID>"``.  Decoding never fails: a token that does not
follow the layout degrades to a bare id with no context.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from luffy.domain.entities.media import MediaKind
from luffy.domain.errors import DecodeError

log = structlog.get_logger(__name__)

DELIMITER = "|"

# base id + at most two context fields
_MAX_CONTEXT = 2


def encode(base_id: str, *context: str) -> str:
    """Join *base_id* and *context* with ``|``, dropping trailing empty fields.

    >>> encode("5", "")
    '5'
    >>> encode("12", "99", "movie")
    '12|99|movie'
    """
    fields = [base_id, *context]
    while len(fields) > 1 and not fields[-1]:
        fields.pop()
    return DELIMITER.join(fields)


def decode(token: str) -> tuple[str, list[str]]:
    """Split *token* into its base id and up to two context fields.

    Segments past the third are ignored.

    >>> decode("12|99|movie")
    ('12', ['99', 'movie'])
    >>> decode("12")
    ('12', [])
    """
    parts = token.split(DELIMITER)
    return parts[0], parts[1 : 1 + _MAX_CONTEXT]


def _as_kind(value: str) -> MediaKind | None:
    """Kind named by *value*, or None without logging."""
    if not value:
        return None
    try:
        return MediaKind.parse(value)
    except DecodeError:
        return None


def _parse_kind(value: str) -> MediaKind | None:
    kind = _as_kind(value)
    if kind is None and value:
        log.debug("identifier_kind_unparseable", value=value)
    return kind


@dataclass(frozen=True)
class StageRef:
    """Decoded form of a pipeline token.

    ``item_id`` is the id of the entity the token names (a season, an
    episode, a server, or the media itself); ``media_id`` and ``kind``
    describe the media the entity belongs to.  Either may be missing when
    the context was lost along the way.
    """

    item_id: str
    media_id: str = ""
    kind: MediaKind | None = None

    @classmethod
    def for_media(cls, media_id: str, kind: MediaKind | None = None) -> StageRef:
        return cls(item_id=media_id, media_id=media_id, kind=kind)

    @classmethod
    def from_token(cls, token: str) -> StageRef:
        """Decode either a media reference or a child token.

        A first context field that reads as a media kind marks a media
        reference; anything after the kind is ignored (``<mediaID>|<kind>|x``).
        Otherwise the token is taken as ``<itemID>|<mediaID>|<kind>``.
        Media ids are numeric, so they never read as a kind.
        """
        base_id, context = decode(token)
        if context:
            kind = _as_kind(context[0])
            if kind is not None:
                return cls.for_media(base_id, kind)
        if len(context) == 1:
            return cls(item_id=base_id, media_id=context[0])
        if len(context) == 2:
            return cls(
                item_id=base_id,
                media_id=context[0],
                kind=_parse_kind(context[1]),
            )
        return cls(item_id=base_id)

    def media_token(self) -> str:
        """Token for the media itself (``<mediaID>|<kind>``)."""
        return encode(self.media_id or self.item_id, self._kind_label())

    def child(self, item_id: str) -> StageRef:
        """Reference for an entity listed under this one, keeping the media context."""
        return StageRef(
            item_id=item_id,
            media_id=self.media_id or self.item_id,
            kind=self.kind,
        )

    def token(self) -> str:
        """Token for a child entity (``<itemID>|<mediaID>|<kind>``)."""
        return encode(self.item_id, self.media_id, self._kind_label())

    def _kind_label(self) -> str:
        return self.kind.value if self.kind is not None else ""
