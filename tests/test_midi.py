from unittest import mock

import pytest

from groupfun.midi import (
    NOTE_MAP,
    MidiParseError,
    build_track,
    make_midi,
    midi_to_text,
    note_name,
    note_number,
    parse_note,
    render_music,
)


def _notes(track):
    return [m for m in track if not m.is_meta and m.type in ("note_on", "note_off")]


def test_note_number_matches_note_map():
    for value in NOTE_MAP.values():
        assert note_number(value % 12, 5) == value


def test_note_number_octave_zero_returns_base():
    assert note_number(7, 0) == 7


def test_note_number_stays_in_range_and_keeps_pitch_class():
    for base in range(12):
        for octave in range(1, 21):
            result = note_number(base, octave)
            assert 0 <= result <= 127
            assert result % 12 == base


def test_note_number_caps_octave():
    assert note_number(3, 25) == note_number(3, 10)


def test_note_name_for_every_map_entry():
    for name, value in NOTE_MAP.items():
        assert note_name(value) == name
        assert note_name(value + 12) == name


def test_parse_note_defaults_to_fifth_octave():
    assert parse_note("A") == 69
    assert parse_note("C") == 60


def test_parse_note_sharp_and_flat_agree():
    assert parse_note("C#6") == parse_note("Db6")
    assert parse_note("C#6") == note_number(1, 6)


def test_parse_note_ignores_spaces():
    assert parse_note("B b 4") == parse_note("Bb4")


def test_build_track_header():
    track = build_track("C", 33)
    types = [m.type for m in track[:4]]
    assert types == ["time_signature", "set_tempo", "instrument_name", "program_change"]
    assert track[2].name == "Violin"
    assert track[3].program == 33
    assert track[-1].type == "end_of_track"


def test_build_track_single_note():
    on, off = _notes(build_track("C"))
    assert (on.type, on.note, on.velocity, on.time) == ("note_on", 60, 120, 0)
    assert (off.type, off.note, off.time) == ("note_off", 60, 960)


def test_build_track_length_scaling():
    quarter = _notes(build_track("C"))[1].time
    assert _notes(build_track("C<1"))[1].time == 2 * quarter
    assert _notes(build_track("C<-1"))[1].time * 2 == quarter


def test_build_track_rest_delays_next_note():
    quarter = _notes(build_track("C"))[1].time
    assert _notes(build_track("RC"))[0].time == quarter
    assert _notes(build_track("R<-2C"))[0].time * 4 == quarter


def test_build_track_rejects_unknown_character():
    with pytest.raises(MidiParseError, match="X"):
        build_track("CX")


def test_build_track_rejects_bad_timbre():
    with pytest.raises(ValueError):
        build_track("C", 200)


def test_make_midi_round_trip(tmp_path):
    path = tmp_path / "song.mid"
    make_midi(path, "CCGGAAGR FFEEDDC")
    assert midi_to_text(path.read_bytes(), 0) == "CCGGAAGRFFEEDDC"


def test_round_trip_octave_and_length(tmp_path):
    path = tmp_path / "tune.mid"
    make_midi(path, "C6<1D<-2Db4Eb")
    assert midi_to_text(path.read_bytes(), 0) == "C6<1D<-2Db4Eb"


def test_make_midi_keeps_existing_file(tmp_path):
    path = tmp_path / "exists.mid"
    path.write_bytes(b"keep")
    make_midi(path, "C")
    assert path.read_bytes() == b"keep"


def test_midi_to_text_missing_track(tmp_path):
    path = tmp_path / "one.mid"
    make_midi(path, "C")
    assert midi_to_text(path.read_bytes(), 3) == ""


def test_midi_to_text_rejects_garbage():
    with pytest.raises(MidiParseError):
        midi_to_text(b"not a midi file", 0)


def test_render_music_calls_timidity(tmp_path):
    midi_path = tmp_path / "x_midicreate.mid"
    with mock.patch("groupfun.midi.subprocess.run") as run:
        wav = render_music("CDE", midi_path)
    assert wav == str(midi_path).replace(".mid", ".wav")
    assert midi_path.exists()
    args = run.call_args[0][0]
    assert args == ["timidity", str(midi_path), "-Ow", "-o", wav]