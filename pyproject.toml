[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "groupfun"
version = "0.1.0"
description = "Game and utility logic for group chat bots: MIDI melodies, tarot, marriages, sign-in scores, sleep tracking and more"
requires-python = ">=3.10"
keywords = ["chat", "bot", "group", "midi", "tarot", "games", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Communications :: Chat",
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]
dependencies = [
    "mido",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["groupfun"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
