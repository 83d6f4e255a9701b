"""
Morse encoding of text into on/off pulse timelines.

Timing follows the ITU ratios relative to one dot:
dash = 3, gap inside a letter = 1, gap between letters = 3,
gap between words = 7.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


MORSE_CODE = {
    'A': '.-',    'B': '-...',  'C': '-.-.',  'D': '-..',
    'E': '.',     'F': '..-.',  'G': '--.',   'H': '....',
    'I': '..',    'J': '.---',  'K': '-.-',   'L': '.-..',
    'M': '--',    'N': '-.',    'O': '---',   'P': '.--.',
    'Q': '--.-',  'R': '.-.',   'S': '...',   'T': '-',
    'U': '..-',   'V': '...-',  'W': '.--',   'X': '-..-',
    'Y': '-.--',  'Z': '--..',
    '0': '-----', '1': '.----', '2': '..---', '3': '...--',
    '4': '....-', '5': '.....', '6': '-....', '7': '--...',
    '8': '---..', '9': '----.',
    '.': '.-.-.-', ',': '--..--', '?': '..--..', "'": '.----.',
    '!': '-.-.--', '/': '-..-.',  '(': '-.--.',  ')': '-.--.-',
    '&': '.-...',  ':': '---...', ';': '-.-.-.', '=': '-...-',
    '+': '.-.-.',  '-': '-....-', '_': '..--.-', '"': '.-..-.',
    '$': '...-..-', '@': '.--.-.',
}


class PulseKind(Enum):
    ON = "on"
    OFF = "off"


@dataclass(frozen=True)
class Pulse:
    """One timeline entry."""
    kind: PulseKind
    duration_ms: int


@dataclass(frozen=True)
class MorseTiming:
    """Pulse durations in milliseconds, derived from the dot length."""
    dot_ms: int = 200

    @property
    def dash_ms(self) -> int:
        return self.dot_ms * 3

    @property
    def symbol_gap_ms(self) -> int:
        return self.dot_ms

    @property
    def letter_gap_ms(self) -> int:
        return self.dot_ms * 3

    @property
    def word_gap_ms(self) -> int:
        return self.dot_ms * 7


def text_to_morse(text: str) -> str:
    """
    Render text as dots and dashes.

    Letters are separated by a space and words by `` / ``. Characters
    without a Morse code are dropped.
    """
    words = []
    for word in text.upper().split():
        codes = [MORSE_CODE[ch] for ch in word if ch in MORSE_CODE]
        if codes:
            words.append(' '.join(codes))
    return ' / '.join(words)


def _letter_pulses(code: str, timing: MorseTiming) -> List[Pulse]:
    pulses: List[Pulse] = []
    for i, symbol in enumerate(code):
        if i > 0:
            pulses.append(Pulse(PulseKind.OFF, timing.symbol_gap_ms))
        duration = timing.dot_ms if symbol == '.' else timing.dash_ms
        pulses.append(Pulse(PulseKind.ON, duration))
    return pulses


def encode(text: str, timing: MorseTiming = MorseTiming()) -> Tuple[Pulse, ...]:
    """
    Encode text as a timeline of on/off pulses.

    Unknown characters produce nothing; a word that contains only unknown
    characters disappears together with its gap. The timeline never starts
    or ends with a gap.

    Args:
        text: Text to encode
        timing: Pulse durations

    Returns:
        Tuple of pulses, empty when nothing in ``text`` can be encoded
    """
    morse = text_to_morse(text)
    if not morse:
        return ()

    timeline: List[Pulse] = []
    for word_index, word in enumerate(morse.split(' / ')):
        if word_index > 0:
            timeline.append(Pulse(PulseKind.OFF, timing.word_gap_ms))
        for letter_index, code in enumerate(word.split(' ')):
            if letter_index > 0:
                timeline.append(Pulse(PulseKind.OFF, timing.letter_gap_ms))
            timeline.extend(_letter_pulses(code, timing))
    return tuple(timeline)


def total_duration_ms(timeline: Tuple[Pulse, ...]) -> int:
    """Sum of all pulse durations."""
    return sum(p.duration_ms for p in timeline)
