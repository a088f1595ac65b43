"""Tests for the pure marker matching helpers."""

from codestream.utils.markers import (
    CODE_END,
    CODE_START,
    StartMarker,
    find_start_marker,
    partial_suffix_match,
)


class TestPartialSuffixMatch:
    def test_no_match(self):
        assert partial_suffix_match("Unrelated text", CODE_START) == 0

    def test_single_bracket(self):
        assert partial_suffix_match("some text [", CODE_START) == 1

    def test_longer_prefix(self):
        assert partial_suffix_match("This is a code [CODE_ST", CODE_START) == 8

    def test_longest_prefix_wins(self):
        """A suffix matching both a short and a long prefix reports the long one."""
        assert partial_suffix_match("x [CODE_END", CODE_END) == 9

    def test_full_marker_is_not_partial(self):
        assert partial_suffix_match("done [CODE_END]", CODE_END) == 0

    def test_marker_one_short(self):
        assert partial_suffix_match("abc" + CODE_START[:-1], CODE_START) == len(
            CODE_START
        ) - 1

    def test_empty_buffer(self):
        assert partial_suffix_match("", CODE_END) == 0

    def test_case_sensitive(self):
        assert partial_suffix_match("text [code_", CODE_START) == 0


class TestFindStartMarker:
    def test_complete_marker(self):
        marker = find_start_marker("Some text [CODE_START:js] code here")
        assert marker == StartMarker(start_index=10, end_index=24, tag="js")
        assert marker.after == 25

    def test_missing_prefix(self):
        assert find_start_marker("no markers here") is None

    def test_missing_bracket(self):
        assert find_start_marker("text [CODE_START:pyth") is None

    def test_empty_tag(self):
        marker = find_start_marker("[CODE_START:]x")
        assert marker is not None
        assert marker.tag == ""
        assert marker.after == len("[CODE_START:]")

    def test_first_bracket_wins(self):
        """The first ] after the prefix always closes the tag."""
        marker = find_start_marker("[CODE_START:c[1]]")
        assert marker.tag == "c[1"

    def test_first_occurrence_is_used(self):
        marker = find_start_marker("a[CODE_START:py]b[CODE_START:js]c")
        assert marker.start_index == 1
        assert marker.tag == "py"

    def test_bracket_before_prefix_ignored(self):
        marker = find_start_marker("list[0] then [CODE_START:go]")
        assert marker.tag == "go"
