"""Text helpers for help file formatting.

Inference here is done with plain string patterns, not by parsing the
documented source language. Expect occasional false positives (like type
`nil` found inside a word) and misses.
"""

import functools
import math
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple

from rich.cells import cell_len

from .constants import CONCEALED_CHARS, HELP_WIDTH


@functools.lru_cache(maxsize=None)
def _compile(pattern: str) -> Pattern:
    return re.compile(pattern)


def balanced_end(text: str, start: int, brackets: str = "()") -> Optional[int]:
    """Index right after the bracket closing the one at `start`.

    Returns `None` if `text[start]` is not an opening bracket or it is
    never closed.
    """
    open_char, close_char = brackets
    if start >= len(text) or text[start] != open_char:
        return None

    depth = 0
    for i in range(start, len(text)):
        char = text[i]
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return i + 1
    return None


@dataclass(frozen=True)
class BracketPattern:
    """Regular expression optionally followed by a balanced bracket group.

    Matches `prefix`, then (if `brackets` is set) a balanced group opened
    right after the prefix, then `suffix`. Captures are prefix groups,
    the bracket group if `capture_brackets`, and suffix groups. Pattern
    without any capture yields the whole match as its only capture.
    """
    prefix: str
    brackets: Optional[str] = None
    suffix: Optional[str] = None
    anchored: bool = False
    capture_brackets: bool = False

    def find(self, text: str, init: int = 0) -> Optional[Tuple[int, Tuple[str, ...]]]:
        """Find first match at or after `init`.

        Returns:
            Tuple of match start and captures, or `None`
        """
        prefix = self.prefix
        if self.brackets:
            prefix += f"(?={re.escape(self.brackets[0])})"
        prefix_re = _compile(prefix)

        pos = init
        while pos <= len(text):
            match = prefix_re.match(text, pos) if self.anchored else prefix_re.search(text, pos)
            if match is None:
                return None

            captures = self._match_at(text, match)
            if captures is not None:
                return match.start(), captures

            if self.anchored:
                return None
            pos = match.start() + 1

        return None

    def match(self, text: str, init: int = 0) -> Tuple[str, ...]:
        found = self.find(text, init)
        return found[1] if found else ()

    def _match_at(self, text: str, match) -> Optional[Tuple[str, ...]]:
        # Unbalanced group lets prefix grow up to the next opening bracket:
        # `(\S*?)` on "f(a(b)" gives "f(a" followed by "(b)"
        if not self.brackets:
            return self._complete(text, match)

        start = match.start()
        prefix_re = _compile(self.prefix)
        pos = match.end()
        while pos != -1:
            prefix_match = prefix_re.fullmatch(text, start, pos)
            if prefix_match is not None:
                captures = self._complete(text, prefix_match)
                if captures is not None:
                    return captures
            pos = text.find(self.brackets[0], pos + 1)
        return None

    def _complete(self, text: str, match) -> Optional[Tuple[str, ...]]:
        captures = list(match.groups())
        end = match.end()

        if self.brackets:
            bracket_end = balanced_end(text, end, self.brackets)
            if bracket_end is None:
                return None
            if self.capture_brackets:
                captures.append(text[end:bracket_end])
            end = bracket_end

        if self.suffix:
            suffix_match = _compile(self.suffix).match(text, end)
            if suffix_match is None:
                return None
            captures.extend(suffix_match.groups())
            end = suffix_match.end()

        if not captures:
            captures = [text[match.start():end]]
        return tuple(captures)


PATTERN_SETS = {
    "afterline_fundef": [
        # Regular definition
        BracketPattern(r"function\s+(\S*?)", "()", anchored=True, capture_brackets=True),
        # Local definition
        BracketPattern(r"local\s+function\s+(\S*?)", "()", anchored=True, capture_brackets=True),
        # Regular assignment
        BracketPattern(r"(\S+)\s*=\s*function", "()", anchored=True, capture_brackets=True),
        # Local assignment
        BracketPattern(r"local\s+(\S+)\s*=\s*function", "()", anchored=True, capture_brackets=True),
    ],
    "afterline_assign": [
        # General assignment
        BracketPattern(r"(\S*?)\s*=", anchored=True),
        # Local assignment
        BracketPattern(r"local\s+(\S*?)\s*=", anchored=True),
    ],
    "types": [
        BracketPattern("table", "<>"),
        BracketPattern("fun", "()", suffix=r": \S+"),
        BracketPattern("fun", "()"),
        BracketPattern("nil"),
        BracketPattern("any"),
        BracketPattern("boolean"),
        BracketPattern("string"),
        BracketPattern("number"),
        BracketPattern("integer"),
        BracketPattern("function"),
        BracketPattern("table"),
        BracketPattern("thread"),
        BracketPattern("userdata"),
        BracketPattern("lightuserdata"),
        BracketPattern(r"\.\.\."),
    ],
}


def match_first_pattern(text: str, pattern_set: Sequence[BracketPattern], init: int = 0) -> Tuple[str, ...]:
    """Captures of the pattern whose match starts earliest in `text`.

    Ties go to the pattern listed first. Returns empty tuple if nothing
    matches.
    """
    min_start, min_captures = math.inf, ()
    for pattern in pattern_set:
        found = pattern.find(text, init)
        if found is not None and found[0] < min_start:
            min_start, min_captures = found
    return tuple(min_captures)


def visual_text_width(text: str) -> int:
    """Display width of text ignoring characters concealed in help files."""
    n_concealed = sum(text.count(char) for char in CONCEALED_CHARS)
    return cell_len(text) - n_concealed


def align_text(text: str, width: int = HELP_WIDTH, direction: str = "left") -> str:
    """Align stripped text to the right or center of `width` columns."""
    text = text.strip()
    if direction == "left" or text == "":
        return text

    n_left = max(0, width - visual_text_width(text))
    if direction == "center":
        n_left = n_left // 2

    return " " * n_left + text


def format_signature(line: str) -> str:
    """Format signature line like `name(a, b)` into "`name`({a}, {b})"."""
    name, args = None, None
    captures = BracketPattern(r"(\S*?)", "()", capture_brackets=True).match(line)
    if captures:
        name, args = captures
    else:
        word = re.search(r"\S+", line)
        name = word.group(0) if word else None

    if name is None:
        return ""

    if args and args != "()":
        arg_list = [f"{{{a.strip()}}}" for a in args[1:-1].split(",")]
        args = f"({', '.join(arg_list)})"

    return f"`{name}`{args or ''}"


def enclose_first_word(line: str, enclosure: str = "{{{}}}") -> str:
    """Put first whitespace-delimited word of `line` into `enclosure`."""
    return re.sub(r"(\S+)", lambda m: enclosure.format(m.group(1)), line, count=1)


def enclose_first_type(line: str, enclosure: str = "`({})`", init: int = 0) -> str:
    """Put first recognized type (searched from `init`) into `enclosure`.

    Non-whitespace around the type is enclosed too, so union and optional
    markers (`string|nil`, `number?`) stay inside.
    """
    cur_type = match_first_pattern(line, PATTERN_SETS["types"], init)
    if len(cur_type) == 0:
        return line

    type_pattern = r"(\S*" + re.escape(cur_type[0]) + r"\S*)"
    l_start = line[:init]
    l_end = re.sub(type_pattern, lambda m: enclosure.format(m.group(1)), line[init:], count=1)
    return l_start + l_end


def ensure_indent(text: str, n_indent_target: int) -> str:
    """Re-indent text so that its least indented line has `n_indent_target` spaces."""
    lines = text.split("\n")

    indents = [len(l) - len(l.lstrip()) for l in lines if l.strip() != ""]
    n_indent = min(indents) if indents else None

    indent = " " * n_indent_target
    result: List[str] = []
    for l in lines:
        if l == "":
            result.append(l)
        elif n_indent is None:
            result.append(indent)
        else:
            result.append(indent + l[n_indent:])
    return "\n".join(result)
