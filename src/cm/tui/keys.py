"""Keyboard input decoding for terminal applications.

Raw terminal input arrives as a string that may hold several key presses
(typed ahead, or a burst of escape sequences), and a read may end in the
middle of an escape sequence. :func:`split_complete_input` cuts the input
into one sequence per key press and holds back an unfinished trailing
escape sequence. :func:`parse_key_stroke` turns a sequence into a
:class:`KeyStroke`, and :func:`parse_key_id` turns a textual key id such
as ``"alt+i"`` or ``"f2"`` into the :class:`KeyStroke` it names.
"""

from __future__ import annotations

from dataclasses import dataclass

import grapheme

# ---------------------------------------------------------------------------
# Type alias
# ---------------------------------------------------------------------------

KeyId = str


class KeyIdError(ValueError):
    """Raised when a key id cannot be parsed."""


# ---------------------------------------------------------------------------
# KeyStroke
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyStroke:
    """A single key press.

    ``key`` is a printable character (``"i"`` and ``"I"`` are different
    keys), a named key such as ``"enter"`` or ``"f2"``, or a control chord
    such as ``"ctrl+a"``. ``alt`` is set when the key was pressed with the
    alt/meta modifier (sent by terminals as an ESC prefix).
    """

    key: str
    alt: bool = False

    @property
    def is_printable(self) -> bool:
        """True for a plain character that a text field should insert."""
        return not self.alt and _is_printable_text(self.key)

    def __str__(self) -> str:
        name = "space" if self.key == " " else self.key
        return f"alt+{name}" if self.alt else name


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

NAMED_KEYS: frozenset[str] = frozenset(
    {
        "escape", "enter", "tab", "backspace", "delete", "insert",
        "home", "end", "pageUp", "pageDown", "up", "down", "left", "right",
    }
    | {f"f{n}" for n in range(1, 13)}
)

_KEY_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
    "space": " ",
    "pageup": "pageUp",
    "pagedown": "pageDown",
}

ESC = "\x1b"

# Legacy escape sequences -> key names
LEGACY_KEY_SEQUENCES: dict[str, str] = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1bOH": "home",
    "\x1bOF": "end",
    "\x1b[1~": "home",
    "\x1b[2~": "insert",
    "\x1b[3~": "delete",
    "\x1b[4~": "end",
    "\x1b[5~": "pageUp",
    "\x1b[6~": "pageDown",
    "\x1b[7~": "home",
    "\x1b[8~": "end",
    "\x1bOP": "f1",
    "\x1bOQ": "f2",
    "\x1bOR": "f3",
    "\x1bOS": "f4",
    "\x1b[11~": "f1",
    "\x1b[12~": "f2",
    "\x1b[13~": "f3",
    "\x1b[14~": "f4",
    "\x1b[15~": "f5",
    "\x1b[17~": "f6",
    "\x1b[18~": "f7",
    "\x1b[19~": "f8",
    "\x1b[20~": "f9",
    "\x1b[21~": "f10",
    "\x1b[23~": "f11",
    "\x1b[24~": "f12",
}

# xterm modifier parameter 3 = alt: ESC [ 1 ; 3 <letter>
LEGACY_ALT_SEQUENCES: dict[str, str] = {
    f"\x1b[1;3{letter}": name
    for letter, name in (
        ("A", "up"), ("B", "down"), ("C", "right"), ("D", "left"),
        ("H", "home"), ("F", "end"),
    )
}


def _is_printable_text(text: str) -> bool:
    return (
        len(text) > 0
        and text.isprintable()
        and grapheme.length(text) == 1
    )


# ---------------------------------------------------------------------------
# Splitting raw input
# ---------------------------------------------------------------------------


def split_complete_input(data: str) -> tuple[list[str], str]:
    """Split raw terminal input into complete key-press sequences.

    * ``ESC [`` starts a CSI sequence running to its final byte.
    * ``ESC O`` starts a three-character SS3 sequence.
    * ``ESC`` followed by any other character is an alt chord.
    * Runs of printable text are split into grapheme clusters.

    Returns ``(sequences, remainder)``. The remainder is a trailing escape
    sequence that may still be continued by the next read: a lone ``ESC``,
    a CSI without its final byte, or ``ESC O``.
    """
    sequences: list[str] = []
    i = 0
    n = len(data)

    while i < n:
        ch = data[i]

        if ch == ESC:
            if i + 1 >= n:
                return sequences, data[i:]
            nxt = data[i + 1]
            if nxt == "[":
                j = i + 2
                while j < n and not 0x40 <= ord(data[j]) <= 0x7E:
                    j += 1
                if j >= n:
                    return sequences, data[i:]
                sequences.append(data[i : j + 1])
                i = j + 1
                continue
            if nxt == "O":
                if i + 2 >= n:
                    return sequences, data[i:]
                sequences.append(data[i : i + 3])
                i += 3
                continue
            sequences.append(data[i : i + 2])
            i += 2
            continue

        if not ch.isprintable():
            sequences.append(ch)
            i += 1
            continue

        j = i
        while j < n and data[j] != ESC and data[j].isprintable():
            j += 1
        sequences.extend(grapheme.graphemes(data[i:j]))
        i = j

    return sequences, ""


def split_input(data: str) -> list[str]:
    """Split raw terminal input into one sequence per key press.

    Unlike :func:`split_complete_input` nothing is held back: a trailing
    partial escape sequence is returned as the last element, so a lone
    ``ESC`` is the escape key.
    """
    sequences, remainder = split_complete_input(data)
    if remainder:
        sequences.append(remainder)
    return sequences


# ---------------------------------------------------------------------------
# Decoding a single sequence
# ---------------------------------------------------------------------------


def parse_key_stroke(data: str) -> KeyStroke | None:
    """Decode one key-press sequence, or return ``None`` if unrecognised."""
    if not data:
        return None

    name = LEGACY_KEY_SEQUENCES.get(data)
    if name is not None:
        return KeyStroke(name)

    name = LEGACY_ALT_SEQUENCES.get(data)
    if name is not None:
        return KeyStroke(name, alt=True)

    if data == ESC:
        return KeyStroke("escape")
    if data in ("\r", "\n"):
        return KeyStroke("enter")
    if data == "\t":
        return KeyStroke("tab")
    if data in ("\x7f", "\x08"):
        return KeyStroke("backspace")

    # Ctrl + letter (0x01 - 0x1a)
    if len(data) == 1 and 1 <= ord(data) <= 26:
        return KeyStroke("ctrl+" + chr(ord(data) + ord("a") - 1))

    # Alt + key (ESC prefix)
    if len(data) >= 2 and data[0] == ESC and not data.startswith("\x1b["):
        inner = parse_key_stroke(data[1:])
        if inner is not None and not inner.alt:
            return KeyStroke(inner.key, alt=True)
        return None

    if _is_printable_text(data):
        return KeyStroke(data)

    return None


def parse_input(data: str) -> list[KeyStroke]:
    """Split and decode *data*, dropping unrecognised sequences."""
    strokes: list[KeyStroke] = []
    for sequence in split_input(data):
        stroke = parse_key_stroke(sequence)
        if stroke is not None:
            strokes.append(stroke)
    return strokes


# ---------------------------------------------------------------------------
# Key ids
# ---------------------------------------------------------------------------


def parse_key_id(key_id: KeyId) -> KeyStroke:
    """Parse a key id such as ``"i"``, ``"alt+I"``, ``"ctrl+w"`` or ``"f2"``.

    ``shift+<letter>`` is accepted as a spelling of the uppercase letter.
    Raises :class:`KeyIdError` for anything else.
    """
    if not key_id:
        raise KeyIdError("empty key id")

    alt = False
    rest = key_id
    if rest.startswith("alt+") and len(rest) > 4:
        alt = True
        rest = rest[4:]

    key = _KEY_ALIASES.get(rest.lower(), rest)

    if key in NAMED_KEYS or key == " ":
        return KeyStroke(key, alt)

    if key.startswith("ctrl+"):
        letter = key[5:]
        if len(letter) == 1 and letter.isalpha():
            return KeyStroke("ctrl+" + letter.lower(), alt)
        raise KeyIdError(f"invalid ctrl chord in key id {key_id!r}")

    if key.startswith("shift+"):
        letter = key[6:]
        if len(letter) == 1 and letter.isalpha():
            return KeyStroke(letter.upper(), alt)
        raise KeyIdError(f"invalid shift chord in key id {key_id!r}")

    if _is_printable_text(key):
        return KeyStroke(key, alt)

    raise KeyIdError(f"unknown key id {key_id!r}")
