"""Unit tests for filename derivation."""

import re
from datetime import datetime, timedelta, timezone

import pytest

from minimax_image.utils.filenames import (
    derive_filename,
    safe_prompt_segment,
    timestamp_segment,
)

_INSTANT = datetime(2026, 10, 18, 1, 55, 0, 123000, tzinfo=timezone.utc)
_NAME_RE = re.compile(
    r"^minimax_image_01_a_red_panda_1_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.jpeg$"
)


@pytest.mark.unit
class TestSafePromptSegment:
    def test_lowercases_and_strips_symbols(self):
        assert safe_prompt_segment("A Red Panda!!!") == "a_red_panda"

    def test_collapses_whitespace_runs(self):
        assert safe_prompt_segment("a   b\t\nc") == "a_b_c"

    def test_truncates_to_50_chars(self):
        segment = safe_prompt_segment("word " * 30)
        assert len(segment) == 50

    def test_all_symbols_gives_empty_segment(self):
        assert safe_prompt_segment("!!! ???") == "_"
        assert safe_prompt_segment("***") == ""
        assert safe_prompt_segment("") == ""

    def test_non_ascii_letters_are_dropped(self):
        assert safe_prompt_segment("café Ölbild") == "caf_lbild"


@pytest.mark.unit
class TestTimestampSegment:
    def test_colons_and_periods_replaced(self):
        assert timestamp_segment(_INSTANT) == "2026-10-18T01-55-00-123Z"

    def test_aware_datetime_converted_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        local = datetime(2026, 10, 18, 3, 55, 0, 123000, tzinfo=plus_two)
        assert timestamp_segment(local) == "2026-10-18T01-55-00-123Z"

    def test_default_is_now(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z", timestamp_segment())


@pytest.mark.unit
class TestDeriveFilename:
    def test_exact_name_for_fixed_instant(self):
        assert (
            derive_filename("A Red Panda!!!", 1, now=_INSTANT)
            == "minimax_image_01_a_red_panda_1_2026-10-18T01-55-00-123Z.jpeg"
        )

    def test_matches_pattern_at_current_instant(self):
        assert _NAME_RE.match(derive_filename("A Red Panda!!!", 1))

    def test_different_instants_give_different_names(self):
        later = _INSTANT + timedelta(milliseconds=1)
        assert derive_filename("A Red Panda!!!", 1, now=_INSTANT) != derive_filename(
            "A Red Panda!!!", 1, now=later
        )

    def test_index_is_part_of_the_name(self):
        assert "_3_" in derive_filename("cat", 3, now=_INSTANT)

    def test_empty_prompt_still_valid(self):
        assert (
            derive_filename("***", 2, now=_INSTANT)
            == "minimax_image_01__2_2026-10-18T01-55-00-123Z.jpeg"
        )

    def test_no_path_separators(self):
        name = derive_filename("../../etc/passwd", 1, now=_INSTANT)
        assert "/" not in name and "\\" not in name
