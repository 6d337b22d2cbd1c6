"""Korean language utilities — jamo split/compose, 2-set keyboard mapping."""

from __future__ import annotations

# Unicode Hangul syllable block: U+AC00..U+D7A3
_HANGUL_BASE = 0xAC00
_HANGUL_END = 0xD7A3
_JUNGSEONG_COUNT = 21
_JONGSEONG_COUNT = 28  # number of final consonants (0 = no batchim)
_SYLLABLE_SPAN = _JUNGSEONG_COUNT * _JONGSEONG_COUNT  # 588

# ── Jamo alphabets ───────────────────────────────────────────────

CHOSEONG = [
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
]

JUNGSEONG = [
    "ㅏ", "ㅐ", "ㅑ", "ㅒ", "ㅓ", "ㅔ", "ㅕ", "ㅖ", "ㅗ", "ㅘ",
    "ㅙ", "ㅚ", "ㅛ", "ㅜ", "ㅝ", "ㅞ", "ㅟ", "ㅠ", "ㅡ", "ㅢ", "ㅣ",
]

# Index 0 is "no final consonant"
JONGSEONG = [
    "", "ㄱ", "ㄲ", "ㄳ", "ㄴ", "ㄵ", "ㄶ", "ㄷ", "ㄹ", "ㄺ",
    "ㄻ", "ㄼ", "ㄽ", "ㄾ", "ㄿ", "ㅀ", "ㅁ", "ㅂ", "ㅄ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
]

_CHO_INDEX = {j: i for i, j in enumerate(CHOSEONG)}
_JUNG_INDEX = {j: i for i, j in enumerate(JUNGSEONG)}
_JONG_INDEX = {j: i for i, j in enumerate(JONGSEONG) if j}

# Compound vowels typed as two simple vowels
COMPOUND_VOWELS: dict[str, tuple[str, str]] = {
    "ㅘ": ("ㅗ", "ㅏ"),
    "ㅙ": ("ㅗ", "ㅐ"),
    "ㅚ": ("ㅗ", "ㅣ"),
    "ㅝ": ("ㅜ", "ㅓ"),
    "ㅞ": ("ㅜ", "ㅔ"),
    "ㅟ": ("ㅜ", "ㅣ"),
    "ㅢ": ("ㅡ", "ㅣ"),
}
_VOWEL_FUSION = {pair: compound for compound, pair in COMPOUND_VOWELS.items()}

# ── 2-set (두벌식) keyboard layout ───────────────────────────────

# key → (plain, shifted); shifted is None when shift has no double form
KEY_LAYOUT: dict[str, tuple[str, str | None]] = {
    # consonants
    "Q": ("ㅂ", "ㅃ"), "W": ("ㅈ", "ㅉ"), "E": ("ㄷ", "ㄸ"),
    "R": ("ㄱ", "ㄲ"), "T": ("ㅅ", "ㅆ"),
    "A": ("ㅁ", None), "S": ("ㄴ", None), "D": ("ㅇ", None),
    "F": ("ㄹ", None), "G": ("ㅎ", None),
    "Z": ("ㅋ", None), "X": ("ㅌ", None), "C": ("ㅊ", None), "V": ("ㅍ", None),
    # vowels
    "Y": ("ㅛ", None), "U": ("ㅕ", None), "I": ("ㅑ", None),
    "O": ("ㅐ", "ㅒ"), "P": ("ㅔ", "ㅖ"),
    "H": ("ㅗ", None), "J": ("ㅓ", None), "K": ("ㅏ", None), "L": ("ㅣ", None),
    "B": ("ㅠ", None), "N": ("ㅜ", None), "M": ("ㅡ", None),
}

# Every jamo some key (plain or shifted) produces; cluster finals like ㄺ are absent
KEY_JAMO = frozenset(j for pair in KEY_LAYOUT.values() for j in pair if j)


def is_syllable(char: str) -> bool:
    """True for a precomposed Hangul syllable (가..힣)."""
    return len(char) == 1 and _HANGUL_BASE <= ord(char) <= _HANGUL_END


def is_hangul(char: str) -> bool:
    """True for any Hangul codepoint: syllables, jamo, compatibility jamo."""
    if len(char) != 1:
        return False
    cp = ord(char)
    return (
        (_HANGUL_BASE <= cp <= _HANGUL_END)
        or (0x1100 <= cp <= 0x11FF)   # Hangul Jamo
        or (0x3130 <= cp <= 0x318F)   # Hangul Compatibility Jamo
        or (0xA960 <= cp <= 0xA97F)   # Hangul Jamo Extended-A
        or (0xD7B0 <= cp <= 0xD7FF)   # Hangul Jamo Extended-B
    )


def is_vowel(jamo: str) -> bool:
    return jamo in _JUNG_INDEX


def is_consonant(jamo: str) -> bool:
    return jamo in _CHO_INDEX or jamo in _JONG_INDEX


def split(word: str) -> list[str]:
    """Decompose Hangul syllables into the jamo sequence a typist enters.

    Compound vowels expand to their two simple vowels; non-Hangul
    characters are dropped.
    """
    jamo: list[str] = []
    for char in word:
        if not is_syllable(char):
            continue
        n = ord(char) - _HANGUL_BASE
        cho = n // _SYLLABLE_SPAN
        jung = (n % _SYLLABLE_SPAN) // _JONGSEONG_COUNT
        jong = n % _JONGSEONG_COUNT

        jamo.append(CHOSEONG[cho])
        vowel = JUNGSEONG[jung]
        if vowel in COMPOUND_VOWELS:
            jamo.extend(COMPOUND_VOWELS[vowel])
        else:
            jamo.append(vowel)
        if jong:
            jamo.append(JONGSEONG[jong])
    return jamo


def compose_syllable(cho: str, jung: str, jong: str = "") -> str:
    """Build one syllable block from its slots."""
    return chr(
        _CHO_INDEX[cho] * _SYLLABLE_SPAN
        + _JUNG_INDEX[jung] * _JONGSEONG_COUNT
        + (_JONG_INDEX[jong] if jong else 0)
        + _HANGUL_BASE
    )


def combine(jamo: list[str] | str) -> str:
    """Rebuild display text from a (possibly partial) jamo sequence.

    Inverse of :func:`split`. A vowel pair from ``COMPOUND_VOWELS`` is
    fused back into one medial. A consonant after the medial is read as
    the final only when no vowel follows it, so ``ㄷㅐㄱㅏㅇ`` gives
    ``대강`` and ``ㄷㅗㅇㅎㅐ`` gives ``동해``. Jamo that cannot start a
    syllable are emitted as-is.
    """
    seq = list(jamo)
    out: list[str] = []
    i = 0
    n = len(seq)
    while i < n:
        cho = seq[i]
        if cho not in _CHO_INDEX or i + 1 >= n or not is_vowel(seq[i + 1]):
            out.append(cho)
            i += 1
            continue

        jung = seq[i + 1]
        i += 2
        if i < n and (jung, seq[i]) in _VOWEL_FUSION:
            jung = _VOWEL_FUSION[(jung, seq[i])]
            i += 1

        jong = ""
        if i < n and seq[i] in _JONG_INDEX:
            followed_by_vowel = i + 1 < n and is_vowel(seq[i + 1])
            if not followed_by_vowel:
                jong = seq[i]
                i += 1

        out.append(compose_syllable(cho, jung, jong))
    return "".join(out)


def completed_syllables(word: str, typed: int) -> int:
    """Number of leading characters of ``word`` fully covered by ``typed`` jamo."""
    done = 0
    used = 0
    for char in word:
        cost = len(split(char))
        if used + cost > typed:
            break
        used += cost
        done += 1
    return done


def key_to_jamo(key: str, shift: bool = False) -> str | None:
    """Map a physical key label (``"R"``, ``"r"``) plus shift to a jamo."""
    entry = KEY_LAYOUT.get(key.upper()) if len(key) == 1 else None
    if entry is None:
        return None
    plain, shifted = entry
    if shift and shifted is not None:
        return shifted
    return plain
