"""Tests for Morse encoding."""

from northstar.morse import (
    MORSE_CODE,
    MorseTiming,
    Pulse,
    PulseKind,
    encode,
    text_to_morse,
    total_duration_ms,
)

ON = PulseKind.ON
OFF = PulseKind.OFF


def test_sos_timeline():
    timeline = encode("SOS")
    expected = [
        (ON, 200), (OFF, 200), (ON, 200), (OFF, 200), (ON, 200),
        (OFF, 600),
        (ON, 600), (OFF, 200), (ON, 600), (OFF, 200), (ON, 600),
        (OFF, 600),
        (ON, 200), (OFF, 200), (ON, 200), (OFF, 200), (ON, 200),
    ]
    assert [(p.kind, p.duration_ms) for p in timeline] == expected
    assert total_duration_ms(timeline) == 5400


def test_word_gap_is_seven_dots():
    timeline = encode("E E")
    assert timeline == (
        Pulse(ON, 200),
        Pulse(OFF, 1400),
        Pulse(ON, 200),
    )


def test_lowercase_is_encoded():
    assert encode("sos") == encode("SOS")


def test_no_leading_or_trailing_gap():
    timeline = encode("  HELLO WORLD  ")
    assert timeline[0].kind is ON
    assert timeline[-1].kind is ON


def test_pulses_alternate():
    timeline = encode("PARIS 73")
    for a, b in zip(timeline, timeline[1:]):
        assert a.kind is not b.kind


def test_unknown_characters_are_skipped():
    assert encode("S#O~S") == encode("SOS")
    assert encode("S ### S") == encode("S S")


def test_nothing_to_encode():
    assert encode("") == ()
    assert encode("   ") == ()
    assert encode("¿¿") == ()
    assert total_duration_ms(encode("")) == 0


def test_custom_timing():
    timing = MorseTiming(dot_ms=50)
    assert (timing.dash_ms, timing.letter_gap_ms, timing.word_gap_ms) == (150, 150, 350)
    assert total_duration_ms(encode("SOS", timing)) == 5400 // 4


def test_text_to_morse():
    assert text_to_morse("SOS") == "... --- ..."
    assert text_to_morse("hi there") == ".... .. / - .... . .-. ."
    assert text_to_morse("?") == MORSE_CODE["?"]


def test_punctuation_and_digits():
    timeline = encode("1.")
    ons = [p.duration_ms for p in timeline if p.kind is ON]
    # ".----" then ".-.-.-"
    assert ons == [200, 600, 600, 600, 600, 200, 600, 200, 600, 200, 600]
