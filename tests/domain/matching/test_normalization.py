"""Tests for domain matching algorithms.

These tests verify the pure normalization and scoring functions used to
compare local tags against catalog search results.
"""

import pytest

from top100.domain.matching import (
    duration_match,
    match_score,
    normalize_artist,
    normalize_title,
    score_match,
    similarity,
)


class TestNormalizeArtist:
    """Test cases for artist canonicalization."""

    def test_feature_credit_and_article_removed(self):
        assert normalize_artist("The Beatles feat. Someone (Live)") == "beatles"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Calvin Harris ft. Rihanna", "calvin harris"),
            ("Mark Ronson featuring Bruno Mars", "mark ronson"),
            ("Jay-Z & Kanye West", "jay-z"),
            ("Simon and Garfunkel", "simon"),
            ("Armin van Buuren vs. Tiesto", "armin van buuren"),
            ("Santana with Rob Thomas", "santana"),
        ],
    )
    def test_collaboration_markers_strip_the_rest(self, raw, expected):
        assert normalize_artist(raw) == expected

    def test_punctuation_removed_but_hyphens_kept(self):
        assert normalize_artist("Guns N' Roses") == "guns n roses"
        assert normalize_artist("Jay-Z") == "jay-z"

    def test_leading_articles(self):
        assert normalize_artist("A Tribe Called Quest") == "tribe called quest"
        assert normalize_artist("An Horse") == "horse"

    def test_bracketed_content_and_whitespace(self):
        assert normalize_artist("  Prince   [Remix Credit]  ") == "prince"

    def test_unicode_letters_survive(self):
        assert normalize_artist("Beyoncé") == "beyoncé"


class TestNormalizeTitle:
    """Test cases for title canonicalization."""

    def test_remaster_suffix_removed(self):
        assert normalize_title("Hey Jude (Remastered 2015)") == "hey jude"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Yesterday - Remastered 2009", "yesterday"),
            ("Bohemian Rhapsody (Live at Wembley)", "bohemian rhapsody"),
            ("Creep - Live", "creep"),
            ("Mr. Brightside (Radio Edit)", "mr brightside"),
            ("Hurt [Acoustic]", "hurt"),
            ("Fix You (Deluxe Edition)", "fix you"),
            ("Get Lucky feat. Pharrell Williams", "get lucky"),
            ("Lose Yourself (feat. Nobody)", "lose yourself"),
        ],
    )
    def test_edition_and_feature_markers(self, raw, expected):
        assert normalize_title(raw) == expected

    def test_hyphenated_words_are_kept(self):
        assert normalize_title("Anti-Hero") == "anti-hero"

    @pytest.mark.parametrize(
        "raw",
        [
            "Hey Jude (Remastered 2015)",
            "Song - Live (Acoustic) [Demo]",
            "((nested)) title",
            "Track - Remaster - Live",
            "",
            "   ",
            "Wonderwall",
        ],
    )
    def test_normalizing_twice_is_a_no_op(self, raw):
        once = normalize_title(raw)
        assert normalize_title(once) == once

    def test_artist_normalization_is_stable_on_its_output(self):
        once = normalize_artist("The Beatles feat. Someone (Live)")
        assert normalize_artist(once) == once


class TestSimilarity:
    """Test cases for the Levenshtein similarity ratio."""

    def test_identical_strings(self):
        assert similarity("hey jude", "hey jude") == 1.0

    def test_empty_side(self):
        assert similarity("", "x") == 0.0
        assert similarity("x", "") == 0.0

    def test_case_insensitive(self):
        assert similarity("Hey Jude", "hey jude") == 1.0

    def test_edit_distance_ratio(self):
        # kitten -> sitting needs three edits over seven characters
        assert similarity("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_counts_code_points_not_bytes(self):
        assert similarity("café", "cafe") == pytest.approx(0.75)

    @pytest.mark.parametrize(
        ("a", "b"),
        [("karma police", "karma polic"), ("abc", "xyz"), ("", "abc"), ("é", "e")],
    )
    def test_symmetric(self, a, b):
        assert similarity(a, b) == similarity(b, a)

    def test_completely_different_strings(self):
        assert similarity("abc", "xyz") == 0.0


class TestDurationMatch:
    """Test cases for duration agreement."""

    def test_within_strict_tolerance(self):
        assert duration_match(200, 205) == 1.0

    def test_within_loose_tolerance(self):
        assert duration_match(200, 210) == 0.5

    def test_outside_loose_tolerance(self):
        assert duration_match(200, 210.5) == 0.0

    def test_custom_tolerances(self):
        assert duration_match(200, 202, strict_tolerance=1, loose_tolerance=3) == 0.5


class TestMatchScore:
    """Test cases for the combined confidence score."""

    def test_identical_tracks_with_durations_score_one(self):
        assert match_score("Radiohead", "Radiohead", "Creep", "Creep", 238.0, 238.0) == 1.0

    def test_identical_tracks_without_durations_score_one(self):
        assert match_score("Radiohead", "Radiohead", "Creep", "Creep") == 1.0

    def test_missing_duration_drops_the_term(self):
        evidence = score_match("Radiohead", "Radiohead", "Creep", "Creep", 238.0, None)

        assert evidence.duration_score is None
        assert not evidence.used_duration
        assert evidence.score == 1.0

    def test_duration_mismatch_costs_its_weight(self):
        evidence = score_match("Radiohead", "Radiohead", "Creep", "Creep", 238.0, 300.0)

        assert evidence.duration_score == 0.0
        assert evidence.score == pytest.approx(0.9)

    def test_weights_with_duration(self):
        evidence = score_match("Radiohead", "Radiohed", "Creep", "Creeps", 238.0, 245.0)

        expected = (
            0.5 * evidence.title_similarity
            + 0.4 * evidence.artist_similarity
            + 0.1 * 0.5
        )
        assert evidence.score == pytest.approx(expected)

    def test_weights_without_duration(self):
        evidence = score_match("Radiohead", "Radiohed", "Creep", "Creeps")

        expected = 0.55 * evidence.title_similarity + 0.45 * evidence.artist_similarity
        assert evidence.score == pytest.approx(expected)

    def test_edition_markers_do_not_reduce_score(self):
        score = match_score(
            "The Beatles", "Beatles", "Hey Jude (Remastered 2015)", "Hey Jude"
        )
        assert score == 1.0

    def test_unrelated_tracks_score_low(self):
        assert match_score("Radiohead", "Coldplay", "Creep", "Yellow") < 0.5
