"""Tests for Hangul jamo split/compose and the 2-set key layout."""

import pytest
from typecast.korean import (
    COMPOUND_VOWELS, combine, completed_syllables, is_hangul, is_syllable,
    key_to_jamo, split,
)


class TestSplit:
    def test_simple_syllables(self):
        assert split("한글") == ["ㅎ", "ㅏ", "ㄴ", "ㄱ", "ㅡ", "ㄹ"]

    def test_no_final_consonant(self):
        assert split("나무") == ["ㄴ", "ㅏ", "ㅁ", "ㅜ"]

    def test_compound_vowel_expands_to_two(self):
        assert split("과") == ["ㄱ", "ㅗ", "ㅏ"]
        assert split("의") == ["ㅇ", "ㅡ", "ㅣ"]
        assert split("뒤") == ["ㄷ", "ㅜ", "ㅣ"]

    def test_every_compound_vowel(self):
        # 와 왜 외 워 웨 위 의
        for syllable, pair in zip("와왜외워웨위의", ["ㅘ", "ㅙ", "ㅚ", "ㅝ", "ㅞ", "ㅟ", "ㅢ"]):
            assert split(syllable) == ["ㅇ", *COMPOUND_VOWELS[pair]]

    def test_double_and_cluster_finals_stay_single(self):
        assert split("닭") == ["ㄷ", "ㅏ", "ㄺ"]
        assert split("밖") == ["ㅂ", "ㅏ", "ㄲ"]

    def test_non_hangul_dropped(self):
        assert split("a가 b!") == ["ㄱ", "ㅏ"]
        assert split("hello") == []

    def test_length_counts_diphthongs_as_two(self):
        # 과(3) + 일(3)
        assert len(split("과일")) == 6
        # 돼(3) + 지(2)
        assert len(split("돼지")) == 5


class TestCombine:
    def test_second_syllable_has_final(self):
        assert combine("ㄷㅐㄱㅏㅇ") == "대강"

    def test_second_syllable_diphthong(self):
        assert combine("ㅇㅜㅇㅗㅏ") == "우와"

    def test_first_syllable_diphthong(self):
        assert combine("ㄷㅗㅐㅈㅣ") == "돼지"

    def test_first_syllable_has_final(self):
        assert combine("ㄷㅗㅇㅎㅐ") == "동해"

    @pytest.mark.parametrize("word", ["한글", "마법사", "의자", "천둥번개", "닭고기", "뒤웨"])
    def test_round_trip(self, word):
        assert combine(split(word)) == word

    def test_partial_dangling_initial(self):
        assert combine(["ㄱ"]) == "ㄱ"

    def test_partial_vowel_fusion_in_progress(self):
        assert combine(["ㄱ", "ㅗ"]) == "고"
        assert combine(["ㄱ", "ㅗ", "ㅏ"]) == "과"

    def test_partial_trailing_consonant_reads_as_final(self):
        assert combine(["ㄷ", "ㅐ", "ㄱ"]) == "댁"
        assert combine(["ㄷ", "ㅐ", "ㄱ", "ㅏ"]) == "대가"

    def test_double_initial_is_never_a_final(self):
        # ㄸ cannot close a syllable
        assert combine(["ㅏ"]) == "ㅏ"
        assert combine(["ㄱ", "ㅏ", "ㄸ"]) == "가ㄸ"

    def test_empty(self):
        assert combine([]) == ""


class TestCompletedSyllables:
    def test_counts_only_full_syllables(self):
        assert completed_syllables("한글", 0) == 0
        assert completed_syllables("한글", 2) == 0
        assert completed_syllables("한글", 3) == 1
        assert completed_syllables("한글", 5) == 1
        assert completed_syllables("한글", 6) == 2

    def test_diphthong_syllable(self):
        assert completed_syllables("과일", 2) == 0
        assert completed_syllables("과일", 3) == 1


class TestKeyToJamo:
    def test_consonant(self):
        assert key_to_jamo("R") == "ㄱ"
        assert key_to_jamo("r") == "ㄱ"

    def test_shift_double_consonant(self):
        assert key_to_jamo("R", shift=True) == "ㄲ"
        assert key_to_jamo("Q", shift=True) == "ㅃ"
        assert key_to_jamo("T", shift=True) == "ㅆ"

    def test_shift_without_double_form(self):
        assert key_to_jamo("A", shift=True) == "ㅁ"
        assert key_to_jamo("K", shift=True) == "ㅏ"

    def test_vowels(self):
        assert key_to_jamo("K") == "ㅏ"
        assert key_to_jamo("M") == "ㅡ"
        assert key_to_jamo("O") == "ㅐ"
        assert key_to_jamo("O", shift=True) == "ㅒ"
        assert key_to_jamo("P", shift=True) == "ㅖ"

    def test_unmapped(self):
        assert key_to_jamo("1") is None
        assert key_to_jamo("") is None
        assert key_to_jamo("Enter") is None


class TestCharClasses:
    def test_is_syllable(self):
        assert is_syllable("가") is True
        assert is_syllable("ㄱ") is False
        assert is_syllable("a") is False

    def test_is_hangul(self):
        assert is_hangul("가") is True
        assert is_hangul("ㄱ") is True
        assert is_hangul("a") is False
        assert is_hangul("") is False
