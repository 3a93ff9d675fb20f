"""Game and utility logic for group chat bots: MIDI melodies, holidays, code running, marriages, sleep, scores, hot words, abbreviations, vtuber quotes and tarot."""

__version__ = "0.1.0"