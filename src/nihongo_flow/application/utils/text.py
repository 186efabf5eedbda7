import re

# ---------- Kana conversion ----------

_KATAKANA = re.compile(r"[ァ-ヶ]")

ROMAJI_MAP: dict[str, str] = {
    "a": "あ", "i": "い", "u": "う", "e": "え", "o": "お",
    "ka": "か", "ki": "き", "ku": "く", "ke": "け", "ko": "こ",
    "sa": "さ", "shi": "し", "su": "す", "se": "せ", "so": "そ",
    "ta": "た", "chi": "ち", "tsu": "つ", "te": "て", "to": "と",
    "na": "な", "ni": "に", "nu": "ぬ", "ne": "ね", "no": "の",
    "ha": "は", "hi": "ひ", "fu": "ふ", "he": "へ", "ho": "ほ",
    "ma": "ま", "mi": "み", "mu": "む", "me": "め", "mo": "も",
    "ya": "や", "yu": "ゆ", "yo": "よ",
    "ra": "ら", "ri": "り", "ru": "る", "re": "れ", "ro": "ろ",
    "wa": "わ", "wo": "を", "n": "ん",
    "ga": "が", "gi": "ぎ", "gu": "ぐ", "ge": "げ", "go": "ご",
    "za": "ざ", "ji": "じ", "zu": "ず", "ze": "ぜ", "zo": "ぞ",
    "da": "だ", "di": "ぢ", "du": "づ", "de": "で", "do": "ど",
    "ba": "ば", "bi": "び", "bu": "ぶ", "be": "べ", "bo": "ぼ",
    "pa": "ぱ", "pi": "ぴ", "pu": "ぷ", "pe": "ぺ", "po": "ぽ",
    "kya": "きゃ", "kyu": "きゅ", "kyo": "きょ",
    "sha": "しゃ", "shu": "しゅ", "sho": "しょ",
    "cha": "ちゃ", "chu": "ちゅ", "cho": "ちょ",
    "nya": "にゃ", "nyu": "にゅ", "nyo": "にょ",
    "hya": "ひゃ", "hyu": "ひゅ", "hyo": "ひょ",
    "mya": "みゃ", "myu": "みゅ", "myo": "みょ",
    "rya": "りゃ", "ryu": "りゅ", "ryo": "りょ",
    "gya": "ぎゃ", "gyu": "ぎゅ", "gyo": "ぎょ",
    "ja": "じゃ", "ju": "じゅ", "jo": "じょ",
    "bya": "びゃ", "byu": "びゅ", "byo": "びょ",
    "pya": "ぴゃ", "pyu": "ぴゅ", "pyo": "ぴょ",
}

# Doubled consonant (sokuon), e.g. "kk" in "gakkou"
_DOUBLE_CONSONANT = re.compile(r"([ksthmyrwgzdbp])\1")
_SOKUON_MARK = "\0"


def to_hiragana(text: str) -> str:
    """Convert katakana characters to their hiragana counterparts."""
    return _KATAKANA.sub(lambda m: chr(ord(m.group(0)) - 0x60), text)


def romaji_to_hiragana(romaji: str) -> str:
    """
    Convert romaji to hiragana using a basic syllable table.

    Longest match wins (3, 2, then 1 characters). Unknown characters are kept.
    """
    tmp = _DOUBLE_CONSONANT.sub(_SOKUON_MARK + r"\1", romaji.lower())

    result = []
    i = 0
    while i < len(tmp):
        if tmp[i] == _SOKUON_MARK:
            result.append("っ")
            i += 1
            continue
        for length in (3, 2, 1):
            chunk = tmp[i : i + length]
            if chunk in ROMAJI_MAP:
                result.append(ROMAJI_MAP[chunk])
                i += length
                break
        else:
            result.append(tmp[i])
            i += 1
    return "".join(result)


# ---------- Search ----------


def normalize_text(text: str | None) -> str:
    """Lowercase, strip and fold katakana into hiragana."""
    if not text:
        return ""
    return to_hiragana(text.lower().strip())


def fuzzy_search(query: str | None, *targets: str | None) -> bool:
    """
    Check whether ``query`` occurs in any of ``targets``.

    Matches either the raw lowercase query or its kana-normalized form, so a
    hiragana query finds katakana text and vice versa. An empty query matches
    everything.
    """
    if not query or not query.strip():
        return True
    raw = query.strip().lower()
    normalized = normalize_text(query)
    romaji = romaji_to_hiragana(raw) if raw.isascii() else None

    for target in targets:
        if not target:
            continue
        if raw in target.lower():
            return True
        folded = normalize_text(target)
        if normalized in folded:
            return True
        if romaji and romaji in folded:
            return True
    return False
