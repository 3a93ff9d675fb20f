"""Run code snippets through an online compiler service."""

from __future__ import annotations

import json
from typing import Any

import requests

__all__ = [
    "API_URL",
    "LANGUAGES",
    "TEMPLATES",
    "RunCodeError",
    "clear_newline_suffix",
    "cut_too_long",
    "lookup_language",
    "parse_result",
    "run_code",
    "template_for",
]

API_URL = "https://tool.runoob.com/compile2.php"
API_TOKEN = "token"
TIMEOUT = 15

_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded; charset=UTF-8",
    "Referer": "https://c.runoob.com/",
    "User-Agent": "Mozilla/5.0 (Windows NT 6.1; Win64; x64; rv:87.0) Gecko/20100101 Firefox/87.0",
}

_CSHARP = (
    "using System;\nnamespace HelloWorldApplication\n{\n   class HelloWorld\n   {\n"
    "      static void Main(string[] args)\n      {\n"
    "         Console.WriteLine(\"Hello World!\");\n      }\n   }\n}"
)
_CPP = "#include <iostream>\nusing namespace std;\n\nint main()\n{\n   cout << \"Hello World\";\n   return 0;\n}"
_JS = "console.log(\"Hello World!\");"
_RUBY = "puts \"Hello World!\";"
_RUST = "fn main() {\n    println!(\"Hello World!\");\n}"
_SHELL = "echo 'Hello World!'"
_PY3 = "print(\"Hello, World!\")"
_KOTLIN = "fun main(args : Array<String>){\n    println(\"Hello World!\")\n}"
_SWIFT = "var myString = \"Hello, World!\"\nprint(myString)"
_TS = "const hello : string = \"Hello World!\"\nconsole.log(hello)"

TEMPLATES: dict[str, str] = {
    "py2": "print 'Hello World!'",
    "ruby": _RUBY,
    "rb": _RUBY,
    "php": "<?php\n\techo 'Hello World!';\n?>",
    "javascript": _JS,
    "js": _JS,
    "node.js": _JS,
    "scala": "object Main {\n  def main(args:Array[String])\n  {\n    println(\"Hello World!\")\n  }\n\t\t\n}",
    "go": "package main\n\nimport \"fmt\"\n\nfunc main() {\n   fmt.Println(\"Hello, World!\")\n}",
    "c": "#include <stdio.h>\n\nint main()\n{\n   printf(\"Hello, World! \n\");\n   return 0;\n}",
    "c++": _CPP,
    "cpp": _CPP,
    "java": (
        "public class HelloWorld {\n    public static void main(String []args) {\n"
        "       System.out.println(\"Hello World!\");\n    }\n}"
    ),
    "rust": _RUST,
    "rs": _RUST,
    "c#": _CSHARP,
    "cs": _CSHARP,
    "csharp": _CSHARP,
    "shell": _SHELL,
    "bash": _SHELL,
    "erlang": "% escript will ignore the first line\n\nmain(_) ->\n    io:format(\"Hello World!~n\").",
    "perl": "print \"Hello, World!\n\";",
    "python": _PY3,
    "py": _PY3,
    "swift": _SWIFT,
    "lua": _SWIFT,
    "pascal": "runcode Hello;\nbegin\n  writeln ('Hello, world!')\nend.",
    "kotlin": _KOTLIN,
    "kt": _KOTLIN,
    "r": "myString <- \"Hello, World!\"\nprint ( myString)",
    "vb": (
        "Module Module1\n\n    Sub Main()\n        Console.WriteLine(\"Hello World!\")\n"
        "    End Sub\n\nEnd Module"
    ),
    "typescript": _TS,
    "ts": _TS,
}

LANGUAGES: dict[str, tuple[str, str]] = {
    "py2": ("0", "py"),
    "ruby": ("1", "rb"),
    "rb": ("1", "rb"),
    "php": ("3", "php"),
    "javascript": ("4", "js"),
    "js": ("4", "js"),
    "node.js": ("4", "js"),
    "scala": ("5", "scala"),
    "go": ("6", "go"),
    "c": ("7", "c"),
    "c++": ("7", "cpp"),
    "cpp": ("7", "cpp"),
    "java": ("8", "java"),
    "rust": ("9", "rs"),
    "rs": ("9", "rs"),
    "c#": ("10", "cs"),
    "cs": ("10", "cs"),
    "csharp": ("10", "cs"),
    "shell": ("10", "sh"),
    "bash": ("10", "sh"),
    "erlang": ("12", "erl"),
    "perl": ("14", "pl"),
    "python": ("15", "py3"),
    "py": ("15", "py3"),
    "swift": ("16", "swift"),
    "lua": ("17", "lua"),
    "pascal": ("18", "pas"),
    "kotlin": ("19", "kt"),
    "kt": ("19", "kt"),
    "r": ("80", "r"),
    "vb": ("84", "vb"),
    "typescript": ("1010", "ts"),
    "ts": ("1010", "ts"),
}

_MAX_LINES = 30
_MAX_CHARS = 1000
_ELLIPSIS = "\n............\n............"


class RunCodeError(Exception):
    """Raised when a language is unsupported or the remote run fails."""


def lookup_language(name: str) -> tuple[str, str]:
    """Return the service's ``(language id, file extension)`` for a language name."""
    try:
        return LANGUAGES[name.lower()]
    except KeyError:
        raise RunCodeError("语言不是受支持的编程语种呢~") from None


def template_for(name: str) -> str:
    """Return the hello-world template of a language."""
    key = name.lower()
    if key not in TEMPLATES:
        raise RunCodeError("语言不是受支持的编程语种呢~")
    return TEMPLATES[key]


def clear_newline_suffix(text: str) -> str:
    """Strip every trailing ``\\n``."""
    return text.rstrip("\n")


def cut_too_long(text: str) -> str:
    """Cut text that has more than 30 line breaks or more than 1000 characters."""
    chars = list(text)
    count = 0
    last = len(chars) - 1
    for i, ch in enumerate(chars):
        if ch == "\r" and i < last and chars[i + 1] == "\n":
            pass  # counted when the \n comes
        elif ch in ("\n", "\r"):
            count += 1
        if count > _MAX_LINES or i > _MAX_CHARS:
            return "".join(chars[: i - 1]) + _ELLIPSIS
    return text


def _field(content: dict[str, Any], key: str) -> str:
    value = content.get(key)
    return value if isinstance(value, str) else ""


def parse_result(payload: bytes | str | dict[str, Any]) -> str:
    """Extract the program output from the service's JSON answer.

    Raises :class:`RunCodeError` carrying the reported errors when the run failed.
    """
    if isinstance(payload, dict):
        content = payload
    else:
        try:
            decoded = json.loads(payload)
        except (ValueError, TypeError):
            decoded = {}
        content = decoded if isinstance(decoded, dict) else {}
    errors = _field(content, "errors")
    if errors != "\n\n":
        raise RunCodeError(cut_too_long(clear_newline_suffix(errors)))
    return cut_too_long(clear_newline_suffix(_field(content, "output")))


def run_code(
    code: str,
    language: str,
    session: requests.Session | None = None,
) -> str:
    """Run ``code`` written in ``language`` remotely and return its output."""
    language_id, extension = lookup_language(language)
    form = {
        "code": code,
        "token": API_TOKEN,
        "stdin": "",
        "language": language_id,
        "fileext": extension,
    }
    client = session if session is not None else requests.Session()
    try:
        response = client.post(API_URL, data=form, headers=_HEADERS, timeout=TIMEOUT)
    except requests.RequestException as exc:
        raise RunCodeError(str(exc)) from exc
    if response.status_code != 200:
        raise RunCodeError("code not 200")
    return parse_result(response.content)