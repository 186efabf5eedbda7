"""Starter collections written when a data directory has no CSV files yet."""

from nihongo_flow.domain.models import (
    Category,
    ConjugationForms,
    GrammarItem,
    KanjiItem,
    StudyItem,
    VocabItem,
)

SAMPLE_VOCAB = [
    VocabItem(id="1", word="猫", reading="ねこ", meaning="Cat", part_of_speech="Noun", jlpt="N5", chapter="1"),
    VocabItem(
        id="2",
        word="食べる",
        reading="たべる",
        meaning="To eat",
        part_of_speech="Ichidan Verb",
        jlpt="N5",
        chapter="2",
        conjugations=ConjugationForms(
            te="食べて",
            nai="食べない",
            masu="食べます",
            ta="食べた",
            potential="食べられる",
            volitional="食べよう",
            passive="食べられる",
            causative="食べさせる",
        ),
    ),
    VocabItem(id="3", word="速い", reading="はやい", meaning="Fast", part_of_speech="I-Adjective", jlpt="N5", chapter="3"),
    VocabItem(id="4", word="綺麗", reading="きれい", meaning="Beautiful / Clean", part_of_speech="Na-Adjective", jlpt="N5", chapter="4"),
    VocabItem(id="5", word="昨日", reading="きのう", meaning="Yesterday", part_of_speech="Noun", jlpt="N5", chapter="1"),
    VocabItem(
        id="6",
        word="読む",
        reading="よむ",
        meaning="To read",
        part_of_speech="Godan Verb",
        jlpt="N5",
        chapter="5",
        conjugations=ConjugationForms(
            te="読んで",
            nai="読まない",
            masu="読みます",
            ta="読んだ",
            potential="読める",
            volitional="読もう",
            passive="読まれる",
            causative="読ませる",
        ),
    ),
    VocabItem(id="7", word="全然", reading="ぜんぜん", meaning="Not at all", part_of_speech="Adverb", jlpt="N4", chapter="10"),
    VocabItem(id="8", word="学校", reading="がっこう", meaning="School", part_of_speech="Noun", jlpt="N5", chapter="1"),
    VocabItem(id="9", word="忙しい", reading="いそがしい", meaning="Busy", part_of_speech="I-Adjective", jlpt="N5", chapter="7"),
    VocabItem(id="10", word="先生", reading="せんせい", meaning="Teacher", part_of_speech="Noun", jlpt="N5", chapter="1"),
]

SAMPLE_KANJI = [
    KanjiItem(id="1", character="日", onyomi="ニチ, ジツ", kunyomi="ひ, -び", meaning="Day, Sun", jlpt="N5", strokes="4", chapter="1"),
    KanjiItem(id="2", character="本", onyomi="ホン", kunyomi="もと", meaning="Book, Origin", jlpt="N5", strokes="5", chapter="1"),
    KanjiItem(id="3", character="月", onyomi="ゲツ, ガツ", kunyomi="つき", meaning="Moon, Month", jlpt="N5", strokes="4", chapter="2"),
    KanjiItem(id="4", character="火", onyomi="カ", kunyomi="ひ", meaning="Fire", jlpt="N5", strokes="4", chapter="2"),
    KanjiItem(id="5", character="水", onyomi="スイ", kunyomi="みず", meaning="Water", jlpt="N5", strokes="4", chapter="2"),
    KanjiItem(id="6", character="木", onyomi="モク, ボク", kunyomi="き", meaning="Tree, Wood", jlpt="N5", strokes="4", chapter="3"),
    KanjiItem(id="7", character="山", onyomi="サン", kunyomi="やま", meaning="Mountain", jlpt="N5", strokes="3", chapter="4"),
    KanjiItem(id="8", character="人", onyomi="ジン, ニン", kunyomi="ひと", meaning="Person", jlpt="N5", strokes="2", chapter="5"),
]

SAMPLE_GRAMMAR = [
    GrammarItem(
        id="1",
        rule="〜は〜です",
        explanation="Topic marker (wa) and copula (desu). Indicates X is Y.",
        examples=("私は学生です。", "これはペンです。"),
        jlpt="N5",
        chapter="1",
    ),
    GrammarItem(
        id="2",
        rule="〜てください",
        explanation="Used to make a polite request.",
        examples=("座ってください。", "食べてください。"),
        jlpt="N5",
        chapter="3",
    ),
    GrammarItem(
        id="3",
        rule="〜ている",
        explanation="Present continuous or state of being.",
        examples=("本を読んでいる。", "結婚している。"),
        jlpt="N5",
        chapter="4",
    ),
    GrammarItem(
        id="4",
        rule="〜すぎる",
        explanation="Too much / excessive.",
        examples=("食べすぎた。", "このカバンは高すぎる。"),
        jlpt="N4",
        chapter="7",
    ),
    GrammarItem(
        id="5",
        rule="〜ながら",
        explanation="Doing two actions simultaneously.",
        examples=("音楽を聴きながら勉強する。", "歩きながら話す。"),
        jlpt="N4",
        chapter="10",
    ),
]

SAMPLES: dict[Category, list[StudyItem]] = {
    Category.VOCAB: SAMPLE_VOCAB,
    Category.KANJI: SAMPLE_KANJI,
    Category.GRAMMAR: SAMPLE_GRAMMAR,
}
