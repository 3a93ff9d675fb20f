# groupfun

This package holds the logic behind a set of group-chat bot features. It is
made of plain Python functions and classes, so any bot framework can call it.
State is kept in SQLite files through the standard `sqlite3` module.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Modules

### `groupfun.midi`

Melodies are written as note text such as `CCGGAAGR FFEEDDCR`. A letter
`A`-`G` names a note. `b` or `#` lowers or raises it. Digits give the octave,
which is 5 when none is given. `<n` makes the note last `2**n` quarter notes,
and `R` starts a rest.

- `build_track(text, timbre=40)` returns a `mido.MidiTrack`.
- `make_midi(path, text, timbre=40)` writes a type-0 MIDI file. It does
  nothing when the file already exists.
- `parse_note(text)` returns the MIDI number of one note. `note_number` and
  `note_name` convert between pitch classes, octaves and note numbers.
- `midi_to_text(data, track_no)` turns one track of a MIDI file back into
  note text.
- `render_music(text, midi_path, timbre=40)` writes the MIDI file and runs the
  external `timidity` program to render a `.wav` file next to it. It returns
  the WAV path.
- A note string or a MIDI file that cannot be read raises `MidiParseError`.
  A timbre outside 0–127 raises `ValueError`.

### `groupfun.holiday`

`Holiday` is a named holiday with a date and a duration.
`Holiday.from_record` reads a `days_year_month_day` record and
`Holiday.to_record` writes one. `Holiday.status(now)` gives the countdown
text, `weekend(now)` gives the weekend countdown, and `moyu_message(holidays, now)`
puts the full daily reminder together.

### `groupfun.runcode`

`LANGUAGES` and `TEMPLATES` list the supported languages of an online code
runner. `lookup_language` and `template_for` look a language up.
`run_code(code, language, session=None)` posts the code with `requests` and
returns the output. `parse_result` reads the service's JSON answer, and
`cut_too_long` and `clear_newline_suffix` trim long output. Failures raise
`RunCodeError`.

### `groupfun.nsfw`

`Picture` holds classifier probabilities. `judge(picture)` returns the verdict
given when a user asks for one. `auto_judge(picture)` returns a verdict only
when one of the flagged classes scores above 0.3, and `None` otherwise.

### `groupfun.marriage` and `groupfun.wedding`

`MarriageRegistry(path)` is a daily marriage register per group.

- `register`, `remarry`, `divorce_wife` and `divorce_husband` change entries.
- `lookup` returns a `Couple` and a `Status`.
- `roster` lists the couples of a group.
- `check_update` and `reset` handle the daily refresh.

`slice_name(name, measure)` shortens names that would be drawn too wide.

`groupfun.wedding` holds the rules built on the register. `ensure_today`
refreshes a group's register when the day has changed. `check_single`,
`check_mistress` and `check_fiancee` return `None` when the action is allowed
and the refusal text when it is not. `pick_candidates` picks the single members
among the 30 who spoke most recently. `SkillCooldown` allows one skill use per
member every 12 hours.

### `groupfun.sleep`

`SleepRegistry(path)` records good nights and good mornings. `sleep` and
`get_up` return the member's rank and the time elapsed since their last entry.
`good_night_text` and `good_morning_text` format the replies. `is_evening` and
`is_morning` tell whether an hour counts, and `split_duration` splits a
`timedelta` into hours, minutes and seconds.

### `groupfun.wordcount`

`count_words(messages, stopwords, segment)` counts the Chinese words in chat
messages that are not stop words. `segment` is a callable you supply to split
text into words. `top_words` returns the most frequent ones, and
`rank_by_word_count` sorts a frequency map. `is_chinese_word` tells whether a
string is made only of CJK ideographs.

### `groupfun.score`

`ScoreDB(path)` keeps scores and sign-in counts. `sign_in(uid, now)` awards one
cookie a day, capped at `SCORE_MAX`, and returns a `SignInResult`. A second
sign-in on the same day raises `AlreadySignedInError`. `get_level`,
`next_level_score` and `hour_word` give the level thresholds and the greeting.

### `groupfun.nbnhhsh`

`guess(text, session=None)` asks an online service what a pinyin-initial
abbreviation stands for. `extract_guesses` reads its JSON answer, and
`format_reply` builds the chat reply.

### `groupfun.vtb`

`VtbDB(path)` stores vtubers (`FirstCategory`), quote categories
(`SecondCategory`) and voice quotes (`ThirdCategory`).

- `first_category_menu`, `second_category_menu` and `third_category_menu`
  build the numbered menus.
- `third_category` and `random_vtb` return a quote.
- `store_vtb_list` and `store_vtb` load JSON answers that you have already
  fetched.

`escape_record_url` escapes the file name in a record URL, and
`unescape_unicode` decodes literal `\uXXXX` escapes.

### `groupfun.tarot`

`Deck.from_json(cards_json, formations_json)` builds a deck from card and
spread JSON. Its methods are:

- `draw(count, kind)`: draw up to 20 distinct cards of an `ArcanaKind`.
- `interpret(name)`: look a card up by name.
- `card_list()`: list the card names.
- `spread(formation_name, kind)`: lay out a spread, returned as a `Spread`
  whose `render(user)` gives the reading.

`parse_draw_command` reads commands such as `抽3张小阿卡纳`. An impossible draw
or an unknown spread raises `TarotError`.

## Example

```python
from groupfun.midi import make_midi, parse_note
from groupfun.tarot import parse_draw_command

make_midi("song.mid", "CCGGAAGR FFEEDDCR", timbre=40)
print(parse_note("C#6"))
print(parse_draw_command("抽3张塔罗牌"))
```

## What the package does not do

- It does not connect to a chat platform, and it has no bot, command-line
  program or server. Your own bot passes in messages, user ids and times, and
  sends out the text that comes back.
- It draws no images or charts. Sign-in cards, score rankings, hot-word charts
  and the marriage roster come back as data, not pictures.
- It does not classify images, segment Chinese text or download the tarot,
  vtuber and stop-word data. The caller supplies scores, a `segment` callable
  and the JSON documents.
- Audio rendering needs `timidity` installed and on the `PATH`.

## Running the tests

```
pytest
```