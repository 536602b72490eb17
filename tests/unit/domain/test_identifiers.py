"""Tests for the composite identifier codec and StageRef."""

from __future__ import annotations

import pytest

from luffy.domain.entities import MediaKind
from luffy.domain.identifiers import DELIMITER, StageRef, decode, encode

# ---------------------------------------------------------------------------
# encode / decode
# ---------------------------------------------------------------------------


class TestEncode:
    def test_joins_with_delimiter(self) -> None:
        assert encode("12", "99", "movie") == "12|99|movie"

    def test_bare_id(self) -> None:
        assert encode("5") == "5"

    def test_trailing_empty_dropped(self) -> None:
        assert encode("5", "") == "5"
        assert encode("5", "99", "") == "5|99"

    def test_inner_empty_kept(self) -> None:
        assert encode("5", "", "series") == "5||series"

    def test_delimiter_constant(self) -> None:
        assert DELIMITER == "|"


class TestDecode:
    def test_single_segment(self) -> None:
        assert decode("42") == ("42", [])

    def test_two_segments(self) -> None:
        assert decode("42|movie") == ("42", ["movie"])

    def test_three_segments(self) -> None:
        assert decode("12|99|series") == ("12", ["99", "series"])

    def test_extra_segments_ignored(self) -> None:
        assert decode("a|b|c|d|e") == ("a", ["b", "c"])

    def test_empty_token(self) -> None:
        assert decode("") == ("", [])

    @pytest.mark.parametrize(
        ("base", "context"),
        [
            ("1", ("2", "movie")),
            ("abc-123", ("media-9",)),
            ("x", ()),
        ],
    )
    def test_round_trip(self, base: str, context: tuple[str, ...]) -> None:
        decoded_base, decoded_context = decode(encode(base, *context))
        assert decoded_base == base
        assert decoded_context == list(context)


# ---------------------------------------------------------------------------
# StageRef
# ---------------------------------------------------------------------------


class TestStageRefFromToken:
    def test_media_reference(self) -> None:
        ref = StageRef.from_token("99|movie")
        assert ref.item_id == "99"
        assert ref.media_id == "99"
        assert ref.kind is MediaKind.MOVIE

    def test_media_reference_with_alias_kind(self) -> None:
        ref = StageRef.from_token("99|tv")
        assert ref.kind is MediaKind.SERIES
        assert ref.item_id == ref.media_id == "99"

    def test_child_token(self) -> None:
        ref = StageRef.from_token("12|99|series")
        assert ref == StageRef(item_id="12", media_id="99", kind=MediaKind.SERIES)

    def test_media_reference_with_extra_segment(self) -> None:
        ref = StageRef.from_token("39383|series|extra")
        assert ref == StageRef.for_media("39383", MediaKind.SERIES)
        assert ref.media_token() == "39383|series"

    def test_movie_reference_with_extra_segment(self) -> None:
        ref = StageRef.from_token("19752|movie|extra")
        assert ref.media_id == "19752"
        assert ref.kind is MediaKind.MOVIE

    def test_child_of_unknown_media_kind(self) -> None:
        ref = StageRef.from_token("12||series")
        assert ref == StageRef(item_id="12", media_id="", kind=MediaKind.SERIES)

    def test_child_without_kind(self) -> None:
        ref = StageRef.from_token("12|99")
        assert ref == StageRef(item_id="12", media_id="99", kind=None)

    def test_unknown_kind_degrades_to_none(self) -> None:
        ref = StageRef.from_token("12|99|anime")
        assert ref.item_id == "12"
        assert ref.media_id == "99"
        assert ref.kind is None

    def test_bare_id(self) -> None:
        ref = StageRef.from_token("42")
        assert ref == StageRef(item_id="42")
        assert ref.kind is None

    def test_garbage_never_raises(self) -> None:
        ref = StageRef.from_token("||||")
        assert ref.item_id == ""


class TestStageRefEncoding:
    def test_media_token(self) -> None:
        assert StageRef.for_media("99", MediaKind.SERIES).media_token() == "99|series"

    def test_media_token_without_kind(self) -> None:
        assert StageRef.for_media("99").media_token() == "99"

    def test_child_keeps_media_context(self) -> None:
        media = StageRef.for_media("99", MediaKind.MOVIE)
        assert media.child("7").token() == "7|99|movie"

    def test_grandchild_keeps_media_context(self) -> None:
        season = StageRef(item_id="12", media_id="99", kind=MediaKind.SERIES)
        assert season.child("5").token() == "5|99|series"

    def test_child_of_bare_id_uses_it_as_media(self) -> None:
        assert StageRef(item_id="42").child("7").token() == "7|42"

    def test_child_token_round_trip(self) -> None:
        ref = StageRef(item_id="12", media_id="99", kind=MediaKind.SERIES)
        assert StageRef.from_token(ref.token()) == ref

    def test_media_token_round_trip(self) -> None:
        ref = StageRef.for_media("99", MediaKind.MOVIE)
        assert StageRef.from_token(ref.media_token()) == ref
