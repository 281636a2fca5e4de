"""Tests for longest-common-substring scoring and similar-title matching."""

import logging

import pytest

from imgshelf.core.titles import TitleParseError
from imgshelf.search import FuzzyTitleMatcher, SimilarityConfig, SimilarityKey, lcs, lcs_span


class TestLongestCommonSubstring:
    """Test the LCS scorer."""

    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("abcdef", "zbcdy", "bcd"),
            ("", "x", ""),
            ("x", "", ""),
            ("aa", "aa", "aa"),
            ("abc", "xyz", ""),
            ("FooBar", "Group2FooBaz", "FooBa"),
        ],
    )
    def test_lcs(self, a, b, expected):
        assert lcs(a, b) == expected

    def test_span_is_position_in_first_argument(self):
        assert lcs_span("abcdef", "zbcdy") == (1, 3)
        assert lcs_span("", "x") == (0, 0)

    def test_unique_longest_run(self):
        """'by' is the only common run of length two."""
        assert lcs_span("xaby", "xby") == (2, 2)
        assert lcs("xaby", "xby") == "by"

    def test_tie_keeps_leftmost_in_first_argument(self):
        """Equal runs found in the same pass: the leftmost one wins."""
        assert lcs_span("abcab", "ab") == (0, 2)

    def test_tie_keeps_earliest_in_second_argument(self):
        """Runs completed on earlier characters of ``b`` win over later ones."""
        assert lcs_span("xyab", "abxy") == (2, 2)
        assert lcs("xyab", "abxy") == "ab"

    def test_unicode(self):
        assert lcs("私のタイトル", "あなたのタイトル") == "のタイトル"


class TestSimilarityConfig:
    def test_defaults(self):
        config = SimilarityConfig()
        assert config.min_match_length == 4
        assert config.min_match_ratio == 0.4
        assert config.ignore_too_short_candidates
        assert config.enable_prefix_matching
        assert config.ignore_prefix_pattern == r"^[A-Za-z][0-9]{2}$"

    def test_from_dict_ignores_unknown_keys(self):
        config = SimilarityConfig.from_dict({"min_match_length": 6, "colour": "blue"})
        assert config.min_match_length == 6
        assert config.min_match_ratio == 0.4

    def test_from_empty(self):
        assert SimilarityConfig.from_dict(None) == SimilarityConfig()


class TestPrepare:
    """Test base title normalization."""

    def test_strips_and_drops_batch_codes(self):
        """C89 matches the one-letter-two-digit pattern and is dropped."""
        key = FuzzyTitleMatcher().prepare("(C89) [Circle Name] My Title")
        assert key == SimilarityKey(prefixes=["CircleName"], stem="MyTitle")

    def test_nfkc_normalization(self):
        """Full-width letters compare equal to their ASCII forms."""
        key = FuzzyTitleMatcher().prepare("［Ｃｉｒｃｌｅ］ Ｔｉｔｌｅ")
        assert key == SimilarityKey(prefixes=["Circle"], stem="Title")

    def test_prefixes_empty_after_stripping_are_dropped(self):
        key = FuzzyTitleMatcher().prepare("[!!] (...) Title")
        assert key.prefixes == []

    def test_custom_ignore_pattern(self):
        matcher = FuzzyTitleMatcher(SimilarityConfig(ignore_prefix_pattern=r"^English$"))
        key = matcher.prepare("(C89) [English] Title")
        assert key.prefixes == ["C89"]

    def test_parse_failure_is_returned(self):
        assert isinstance(FuzzyTitleMatcher().prepare("(C89 Title"), TitleParseError)


class TestFilterSimilar:
    """Test candidate selection."""

    @pytest.fixture
    def matcher(self):
        return FuzzyTitleMatcher()

    def test_shared_group_and_stem(self, matcher):
        candidates = ["(Group1) Foo Bar", "(Group2) Foo Baz", "Unrelated"]
        assert matcher.filter_similar(candidates, "(Group1) Foo Bar") == candidates[:2]

    def test_prefix_match_alone_is_enough(self, matcher):
        """Sharing a circle name matches even with a different stem."""
        result = matcher.filter_similar(["[Circle Name] Something Else"], "[Circle Name] My Title")
        assert result == ["[Circle Name] Something Else"]

    def test_prefix_matching_can_be_disabled(self):
        matcher = FuzzyTitleMatcher(SimilarityConfig(enable_prefix_matching=False))
        result = matcher.filter_similar(["[Circle Name] Something Else"], "[Circle Name] My Title")
        assert result == []

    def test_ignored_prefix_does_not_match(self, matcher):
        """A shared batch code alone is not a match."""
        assert matcher.filter_similar(["(C89) Completely Different"], "(C89) My Title") == []

    def test_ratio_threshold(self):
        """The common run must exceed the ratio of the shorter string."""
        matcher = FuzzyTitleMatcher(SimilarityConfig(min_match_ratio=0.5))
        base = "Abcdefghij"
        assert matcher.filter_similar(["Abcdefxxxxx"], base) == ["Abcdefxxxxx"]
        assert matcher.filter_similar(["Abcdexxxxxx"], base) == []

    def test_min_match_length(self, matcher):
        """Runs shorter than four characters never match long candidates."""
        assert matcher.filter_similar(["Abcxxxx"], "Abcyyyy") == []
        assert matcher.filter_similar(["Abcdxxx"], "Abcdyyy") == ["Abcdxxx"]

    def test_short_candidates_ignored_by_default(self, matcher):
        assert matcher.filter_similar(["Abc"], "Abc Title") == []

    def test_short_candidates_need_full_overlap(self):
        matcher = FuzzyTitleMatcher(SimilarityConfig(ignore_too_short_candidates=False))
        assert matcher.filter_similar(["Abc", "Abx"], "Abc Title") == ["Abc"]

    def test_punctuation_and_spacing_ignored(self, matcher):
        assert matcher.filter_similar(["My-Title!!"], "My Title") == ["My-Title!!"]

    def test_input_order_preserved(self, matcher):
        candidates = ["Foo Bar 3", "Other", "Foo Bar 1", "Foo Bar 2"]
        assert matcher.filter_similar(candidates, "Foo Bar") == ["Foo Bar 3", "Foo Bar 1", "Foo Bar 2"]

    def test_key_function(self, matcher):
        candidates = [(1, "Foo Bar"), (2, "Other")]
        assert matcher.filter_similar(candidates, "Foo Bar", text_of=lambda c: c[1]) == [(1, "Foo Bar")]

    def test_unparsable_base_title_yields_nothing(self, matcher, caplog):
        with caplog.at_level(logging.WARNING, logger="imgshelf.search.similarity"):
            assert matcher.filter_similar(["(Group1) Foo Bar"], "(Group1 Foo Bar") == []
        assert "Cannot parse title" in caplog.text
