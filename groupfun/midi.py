"""Simple note-string to MIDI conversion and back.

A melody is written as a run of notes such as ``CCGGAAGR FFEEDDCR``:
a letter ``A``-``G`` names the note, ``b``/``#`` flattens or sharpens it,
digits give the octave (default 5), ``<n`` scales the length by ``2**n``
quarter notes and ``R`` starts a rest.
"""

from __future__ import annotations

import io
import math
import os
import subprocess

import mido

__all__ = [
    "DEFAULT_TIMBRE",
    "NOTE_MAP",
    "TICKS_PER_QUARTER",
    "MidiParseError",
    "build_track",
    "make_midi",
    "midi_to_text",
    "note_name",
    "note_number",
    "parse_note",
    "render_music",
]

NOTE_MAP: dict[str, int] = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}

TICKS_PER_QUARTER = 960
DEFAULT_TIMBRE = 40
DEFAULT_OCTAVE = 5
NOTE_VELOCITY = 120
TEMPO_BPM = 72

_BYTE = 0xFF
_WORD = 0xFFFFFFFF


class MidiParseError(ValueError):
    """Raised when a note string or a MIDI file cannot be understood."""


def note_number(base: int, octave: int) -> int:
    """Return the MIDI note for a pitch class and an octave (capped at 10)."""
    base &= _BYTE
    octave &= _BYTE
    octave = min(octave, 10)
    if octave == 0:
        return base
    result = (base + 12 * octave) & _BYTE
    if result > 127:
        result = (result - 12) & _BYTE
    return result


def note_name(note: int) -> str:
    """Return the letter name (with ``b`` for flats) of a MIDI note."""
    for name, value in NOTE_MAP.items():
        if value % 12 == note % 12:
            return name
    return ""


def parse_note(text: str) -> int:
    """Read a single note such as ``C#6`` and return its MIDI number.

    Characters that are not part of a note are ignored.
    """
    base = 0
    level = 0
    for ch in text.replace(" ", ""):
        if "A" <= ch <= "G":
            base = NOTE_MAP[ch] % 12
        elif ch == "b":
            base = (base - 1) & _BYTE
        elif ch == "#":
            base = (base + 1) & _BYTE
        elif "0" <= ch <= "9":
            level = (level * 10 + int(ch)) & _BYTE
    if level == 0:
        level = DEFAULT_OCTAVE
    return note_number(base, level)


def _length_ticks(length: int) -> int:
    if length >= 0:
        factor = 1 << length if length < 32 else 0
        return (TICKS_PER_QUARTER * factor) & _WORD
    shift = -length
    if shift >= 32:
        raise MidiParseError(f"音长<{length}超出范围")
    return TICKS_PER_QUARTER // (1 << shift)


def _parse_length(digits: str) -> int:
    try:
        return int(digits)
    except ValueError:
        return 0


def _check_timbre(timbre: int) -> None:
    if not 0 <= timbre <= 127:
        raise ValueError("音色应该在0~127之间")


def build_track(text: str, timbre: int = DEFAULT_TIMBRE) -> mido.MidiTrack:
    """Turn a note string into a MIDI track."""
    _check_timbre(timbre)
    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=timbre, time=0))

    k = text.replace(" ", "")
    size = len(k)
    delay = 0
    i = 0
    while i < size:
        base = 0
        level = 0
        rest = False
        length_chars: list[str] = []
        while True:
            ch = k[i]
            if ch == "R":
                rest = True
                i += 1
            elif "A" <= ch <= "G":
                base = NOTE_MAP[ch] % 12
                i += 1
            elif ch == "b":
                base = (base - 1) & _BYTE
                i += 1
            elif ch == "#":
                base = (base + 1) & _BYTE
                i += 1
            elif "0" <= ch <= "9":
                level = (level * 10 + int(ch)) & _BYTE
                i += 1
            elif ch == "<":
                i += 1
                while i < size and (k[i] == "-" or "0" <= k[i] <= "9"):
                    length_chars.append(k[i])
                    i += 1
            else:
                raise MidiParseError(f"无法解析第{i}个位置的{ch}字符")
            if i >= size or "A" <= k[i] <= "G" or k[i] == "R":
                break

        ticks = _length_ticks(_parse_length("".join(length_chars)))
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = DEFAULT_OCTAVE
        note = note_number(base, level)
        track.append(mido.Message("note_on", channel=0, note=note, velocity=NOTE_VELOCITY, time=delay))
        track.append(mido.Message("note_off", channel=0, note=note, velocity=0, time=ticks))
        delay = 0

    track.append(mido.MetaMessage("end_of_track", time=0))
    return track


def make_midi(path: str | os.PathLike, text: str, timbre: int = DEFAULT_TIMBRE) -> None:
    """Write the note string as a MIDI file, unless the file already exists."""
    if os.path.exists(path):
        return
    midi = mido.MidiFile(type=0, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(build_track(text, timbre))
    midi.save(os.fspath(path))


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _power(length: float) -> int | None:
    if length <= 0:
        return None
    return int(_round_half_away(math.log2(length)))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Turn one track of a MIDI file back into a note string."""
    try:
        midi = mido.MidiFile(file=io.BytesIO(data))
    except (OSError, EOFError, ValueError, KeyError, IndexError) as exc:
        raise MidiParseError(f"无法读取midi文件: {exc}") from exc
    if not 0 <= track_no < len(midi.tracks):
        return ""

    parts: list[str] = []
    start = 0.0
    end = 0.0
    start_note = 0
    end_note = 0
    absolute = 0
    for msg in midi.tracks[track_no]:
        absolute += msg.time
        if msg.is_meta:
            continue
        sounding = msg.type == "note_on" and msg.velocity > 0
        if sounding:
            start = float(absolute)
            start_note = msg.note
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            end = float(absolute)
            end_note = msg.note
            if start_note == end_note:
                parts.append(note_name(msg.note))
                level = msg.note // 12
                if level != DEFAULT_OCTAVE:
                    parts.append(str(level))
                power = _power((end - start) / TICKS_PER_QUARTER)
                if power is not None and power >= -4 and power != 0:
                    parts.append(f"<{power}")
                start_note = 0
                end_note = 0
        if sounding and start > end:
            power = _power((start - end) / TICKS_PER_QUARTER)
            if power == 0:
                parts.append("R")
            elif power is not None and power >= -4:
                parts.append(f"R<{power}")
    return "".join(parts)


def render_music(text: str, midi_path: str | os.PathLike, timbre: int = DEFAULT_TIMBRE) -> str:
    """Write the note string to ``midi_path`` and render it to a WAV file with timidity.

    Returns the path of the WAV file.
    """
    midi_file = os.fspath(midi_path)
    make_midi(midi_file, text, timbre)
    wav_file = midi_file.replace(".mid", ".wav")
    subprocess.run(["timidity", midi_file, "-Ow", "-o", wav_file], check=True)
    return wav_file