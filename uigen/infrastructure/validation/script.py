"""
Lightweight scanning of xFrame5 handler scripts.

This is not a JavaScript parser. It masks comments (and optionally string
literals) so that regular expressions and brace matching only see code, then
finds top-level function declarations and call sites.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from uigen.domain.artifacts import ScriptFunction

IDENT = r"[A-Za-z_$][\w$]*"

FUNCTION_RE = re.compile(
    rf"this\s*\.\s*(?P<method>{IDENT})\s*=\s*function\s*(?:{IDENT})?\s*\((?P<mparams>[^)]*)\)\s*\{{"
    rf"|(?<![\w$.])function\s+(?P<decl>{IDENT})\s*\((?P<dparams>[^)]*)\)\s*\{{"
    rf"|(?:var|let|const)\s+(?P<var>{IDENT})\s*=\s*function\s*(?:{IDENT})?\s*\((?P<vparams>[^)]*)\)\s*\{{"
    rf"|(?:var|let|const)\s+(?P<arrow>{IDENT})\s*=\s*\((?P<aparams>[^)]*)\)\s*=>\s*\{{"
)

CALL_RE = re.compile(rf"(?<![\w$])({IDENT})\s*\(")
RECEIVER_RE = re.compile(rf"({IDENT})\s*$")
DATASET_LOOKUP_RE = re.compile(r"getDataset\s*\(\s*[\"']([^\"']+)[\"']\s*\)")

KEYWORDS = frozenset(
    {
        "if", "for", "while", "switch", "catch", "function", "return", "typeof",
        "new", "do", "else", "try", "throw", "delete", "void", "in", "of",
        "instanceof", "with", "yield", "await",
    }
)


class ScriptSyntaxError(ValueError):
    """Raised when the script cannot be split into functions."""


@dataclass(frozen=True)
class ScriptCall:
    """A call site: ``receiver.name(`` or a bare ``name(``."""

    name: str
    receiver: Optional[str] = None
    line: int = 0
    offset: int = 0

    @property
    def qualified(self) -> str:
        return f"{self.receiver}.{self.name}" if self.receiver else self.name


def mask(source: str, strings: bool = False) -> str:
    """Blank out comments (and string contents when ``strings`` is set).

    The result has the same length and line breaks as ``source`` so offsets
    and line numbers still match.
    """
    out = list(source)
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        nxt = source[i + 1] if i + 1 < n else ""
        if ch == "/" and nxt == "/":
            while i < n and source[i] != "\n":
                out[i] = " "
                i += 1
        elif ch == "/" and nxt == "*":
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            for j in range(i, end):
                if source[j] != "\n":
                    out[j] = " "
            i = end
        elif ch in "\"'`":
            quote = ch
            i += 1
            while i < n and source[i] != quote:
                if source[i] == "\\" and i + 1 < n:
                    if strings:
                        out[i] = " "
                        if source[i + 1] != "\n":
                            out[i + 1] = " "
                    i += 2
                    continue
                if quote != "`" and source[i] == "\n":
                    break
                if strings and source[i] != "\n":
                    out[i] = " "
                i += 1
            i += 1
        else:
            i += 1
    return "".join(out)


def _match_brace(masked: str, open_index: int) -> int:
    depth = 0
    for i in range(open_index, len(masked)):
        if masked[i] == "{":
            depth += 1
        elif masked[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


OPENERS = "([{"
CLOSERS = ")]}"
CONTROL_HEAD_RE = re.compile(r"^(?:else\s+)?(?:if|for|while|with)\b")
CONTINUATION_CHARS = ".?:+-*/%&|=,<>"


def _ends_call(masked: str, index: int) -> bool:
    """Whether the code before ``index`` ends with a closed call."""
    return masked[:index].rstrip().endswith(")")


def statement_span(code: str, position: int) -> Tuple[int, int]:
    """Bounds of the statement of ``code`` that contains ``position``.

    The statement belongs to the innermost ``{}`` block around ``position``.
    It starts after the previous ``;``, closed block or call line in that
    block and ends with its own ``;`` (included), at the block's closing
    brace, or at a line break after a call when the next line does not
    continue the expression.
    """
    masked = mask(code, strings=True)

    stack: List[int] = []
    for i in range(position):
        if masked[i] in OPENERS:
            stack.append(i)
        elif masked[i] in CLOSERS and stack:
            stack.pop()
    block = max((i for i in stack if masked[i] == "{"), default=-1)

    start = block + 1
    depth = 0
    for i in range(block + 1, position):
        ch = masked[i]
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
            if depth == 0 and ch == "}":
                start = i + 1
        elif depth == 0 and ch == ";":
            start = i + 1
        elif depth == 0 and ch == "\n" and _ends_call(masked, i):
            if not CONTROL_HEAD_RE.match(masked[start:i].lstrip()):
                start = i + 1

    end = len(masked)
    depth = 0
    for i in range(start, len(masked)):
        ch = masked[i]
        if ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
            if depth < 0:
                end = i
                break
        elif i < position or depth != 0:
            continue
        elif ch == ";":
            end = i + 1
            break
        elif ch == "\n" and _ends_call(masked, i):
            following = masked[i:].lstrip()
            if following and following[0] not in CONTINUATION_CHARS:
                end = i
                break

    while start < end and masked[start].isspace():
        start += 1
    return start, end


def balanced(code: str) -> bool:
    """Whether every bracket in the code (strings and comments ignored) is matched."""
    stack: List[str] = []
    for ch in mask(code, strings=True):
        if ch in OPENERS:
            stack.append(ch)
        elif ch in CLOSERS:
            if not stack or OPENERS.index(stack.pop()) != CLOSERS.index(ch):
                return False
    return not stack


def split_params(params: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in params.split(",") if p.strip())


def extract_functions(source: str) -> Tuple[List[ScriptFunction], str]:
    """Find the top-level functions of a script.

    Returns:
        The functions in source order, and whatever code was left outside them

    Raises:
        ScriptSyntaxError: If a function body is not closed
    """
    masked = mask(source, strings=True)
    functions: List[ScriptFunction] = []
    leftover: List[str] = []
    pos = 0
    while True:
        match = FUNCTION_RE.search(masked, pos)
        if match is None:
            break
        leftover.append(masked[pos : match.start()])

        if match.group("method"):
            name, group, style = match.group("method"), "mparams", "method"
        elif match.group("decl"):
            name, group, style = match.group("decl"), "dparams", "declaration"
        elif match.group("var"):
            name, group, style = match.group("var"), "vparams", "variable"
        else:
            name, group, style = match.group("arrow"), "aparams", "variable"

        open_index = match.end() - 1
        close_index = _match_brace(masked, open_index)
        if close_index == -1:
            line = source.count("\n", 0, match.start()) + 1
            raise ScriptSyntaxError(f"Unclosed body of function '{name}' (line {line})")

        start, end = match.span(group)
        functions.append(
            ScriptFunction(
                name=name,
                params=split_params(source[start:end]),
                body=source[open_index + 1 : close_index],
                style=style,
            )
        )
        pos = close_index + 1
        if pos < len(masked) and masked[pos] == ";":
            pos += 1

    leftover.append(masked[pos:])
    rest = "".join(leftover).replace(";", "").strip()
    return functions, rest


def find_calls(code: str) -> List[ScriptCall]:
    """List the call sites in a piece of script, keywords excluded."""
    masked = mask(code, strings=True)
    calls = []
    for match in CALL_RE.finditer(masked):
        name = match.group(1)
        before = masked[: match.start()].rstrip()
        line = masked.count("\n", 0, match.start()) + 1
        if before.endswith("."):
            receiver_match = RECEIVER_RE.search(before[:-1].rstrip())
            receiver = receiver_match.group(1) if receiver_match else "?"
            calls.append(
                ScriptCall(name=name, receiver=receiver, line=line, offset=match.start())
            )
            continue
        if name in KEYWORDS or re.search(r"(?<![\w$])function$", before):
            continue
        calls.append(ScriptCall(name=name, line=line, offset=match.start()))
    return calls


def dataset_lookups(code: str) -> List[str]:
    """Dataset ids passed to ``getDataset("...")``."""
    return DATASET_LOOKUP_RE.findall(mask(code))


def mentioned(code: str, names: Iterable[str]) -> Set[str]:
    """Which of ``names`` occur as whole identifiers in the code (comments ignored)."""
    text = mask(code)
    return {
        name
        for name in names
        if re.search(rf"(?<![\w$]){re.escape(name)}(?![\w$])", text)
    }
