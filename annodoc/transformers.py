"""
Default hooks applied to the help file structure.

Every hook is called as `hook(node, context)` with the node to modify in
place and the `RunContext` of the current run. Hooks should not return a
new node, and should do nothing on nodes without lines.

Section hooks should not insert or remove siblings of their section: the
pipeline iterates over the block's sections while hooks run. Clear lines
instead of removing a section.
"""

import re
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .constants import (
    AFTERLINES_END_MARKER,
    ERROR_PREFIX,
    EVAL_SHAPE_ERROR,
    FIELDS_HEADING,
    HELP_WIDTH,
    MODELINE,
    PARAMETERS_HEADING,
    REPLACE_END_MARKER,
    REPLACE_START_MARKER,
    SECTION_HEADINGS,
    SEPARATOR_BLOCK,
    SEPARATOR_FILE,
    TOC_INDENT,
    TOC_MIN_FILLER,
    TOC_WIDTH,
)
from .context import RunContext
from .evaluation import evaluate_snippet
from .exceptions import EvaluationError
from .formatting import (
    PATTERN_SETS,
    align_text,
    enclose_first_type,
    enclose_first_word,
    ensure_indent,
    format_signature,
    match_first_pattern,
    visual_text_width,
)
from .structure import Node, NodeKind, apply_recursively, as_struct, is_section
from .utils import logger, notify

Hook = Callable[[Node, RunContext], None]


# Section helpers ============================================================
def add_section_heading(s: Node, heading: str):
    if len(s) == 0 or s.kind != NodeKind.SECTION:
        return
    s.insert(0, f"{heading}~")


def enclose_var_name(s: Node):
    if len(s) == 0 or s.kind != NodeKind.SECTION:
        return
    s[0] = enclose_first_word(s[0])


def enclose_type(s: Node, enclosure: str = "`({})`", init: int = 0):
    """Enclose first type found in the first line after position `init`."""
    if len(s) == 0 or s.kind != NodeKind.SECTION:
        return
    s[0] = enclose_first_type(s[0], enclosure, init)


def first_whitespace(line: str) -> int:
    match = re.search(r"\s", line)
    return match.start() if match else 0


# Header inference ===========================================================
def infer_header(b: Node):
    """Add tag and signature sections inferred from block's afterlines.

    Only a definition at the very start of the afterlines is recognized:
    a function definition gives tag `name()` and signature `name(args)`,
    an assignment gives its left hand side as both.
    """
    has_signature, _ = b.has_descendant(lambda x: is_section(x, "@signature"))
    has_tag, _ = b.has_descendant(lambda x: is_section(x, "@tag"))

    if has_signature and has_tag:
        return

    l_all = " ".join(b.info.get("afterlines", []))
    tag, signature = None, None

    fun_capture = match_first_pattern(l_all, PATTERN_SETS["afterline_fundef"])
    if len(fun_capture) > 0:
        tag = f"{fun_capture[0]}()"
        signature = f"{fun_capture[0]}{fun_capture[1]}"

    if tag is None:
        assign_capture = match_first_pattern(l_all, PATTERN_SETS["afterline_assign"])
        if len(assign_capture) > 0:
            tag = assign_capture[0]
            signature = assign_capture[0]

    if tag is None:
        return

    if not has_signature:
        b.insert(0, as_struct([signature], NodeKind.SECTION, {"id": "@signature"}))
    if not has_tag:
        b.insert(0, as_struct([tag], NodeKind.SECTION, {"id": "@tag"}))


# Aliases ====================================================================
def alias_register(s: Node, context: RunContext):
    """Register first word of section as alias for the rest of its text."""
    if len(s) == 0:
        return

    match = re.match(r"\s*(\S+)\s*", s[0])
    if match is None:
        return

    alias_name = match.group(1)
    s[0] = s[0][match.end():]
    context.aliases[alias_name] = "\n".join(s.lines)
    logger.debug(f"Registered alias '{alias_name}'")


def alias_replace(s: Node, context: RunContext):
    """Replace all registered alias names in one pass.

    Longer names are tried first and inserted descriptions are not
    scanned again, so the result doesn't depend on registration order.
    """
    if not context.aliases:
        return

    names = sorted(context.aliases, key=lambda name: (-len(name), name))
    alias_re = re.compile("|".join(re.escape(name) for name in names))

    for i, line in enumerate(s.children):
        if not isinstance(line, str):
            continue
        s[i] = alias_re.sub(lambda m: context.aliases[m.group(0)], line)


# Table of contents ==========================================================
def toc_register(s: Node, context: RunContext):
    context.toc.append(s)


def toc_insert(s: Node, context: RunContext):
    """Render registered table of contents entries into section `s`."""
    toc_lines: List[str] = []

    for toc_entry in context.toc:
        tag_section: Optional[Node] = None
        if toc_entry.parent is not None:
            _, tag_section = toc_entry.parent.has_descendant(lambda x: is_section(x, "@tag"))

        entry_lines = toc_entry.lines
        tag_lines = tag_section.lines if tag_section is not None else []

        for i in range(max(len(entry_lines), len(tag_lines))):
            left = entry_lines[i] if i < len(entry_lines) else ""
            right = tag_lines[i] if i < len(tag_lines) else ""
            right = right.replace("*", "|").strip()

            if i == 0:
                filler = "."
            else:
                filler = "" if right == "" else " "
            n_filler = max(TOC_WIDTH - visual_text_width(left) - visual_text_width(right), TOC_MIN_FILLER)
            toc_lines.append(f"{TOC_INDENT}{left}{filler * n_filler}{right}")

    for line in toc_lines:
        s.append(line)


# Code blocks ================================================================
def afterlines_to_code(struct, notifier: Callable[[str], None] = notify) -> Optional[str]:
    """Render block's afterlines as help code block.

    Afterlines are cut at a line with `--annodoc_afterlines_end`, every
    `--annodoc_replace_start <text>` ... `--annodoc_replace_end` region
    is replaced with `<text>`, and the result is indented by 2 spaces
    between `>` and `<` lines.

    Args:
        struct: Block or section (its parent block is used)

    Returns:
        Single string with code block, or `None` for invalid input
    """
    if not (isinstance(struct, Node) and struct.kind in (NodeKind.SECTION, NodeKind.BLOCK)):
        notifier("Input to `afterlines_to_code()` should be either section or block.")
        return None

    if struct.kind == NodeKind.SECTION:
        struct = struct.parent
        if struct is None:
            notifier("Section passed to `afterlines_to_code()` is not part of a block.")
            return None

    src = "\n".join(struct.info.get("afterlines", []))

    match = re.match(r"(.*?)\n\s*" + re.escape(AFTERLINES_END_MARKER), src, flags=re.S)
    if match is not None:
        src = match.group(1)

    replace_pattern = re.escape(REPLACE_START_MARKER) + r" ?(.*?)\n.*?" + re.escape(REPLACE_END_MARKER)
    src = re.sub(replace_pattern, lambda m: m.group(1), src, flags=re.S)
    src = ensure_indent(src, 2)

    return f">\n{src}\n<"


# Section hooks ==============================================================
def alias_hook(s: Node, context: RunContext):
    alias_register(s, context)
    # Removing section would disrupt iteration over block's sections
    s.clear_lines()


def class_hook(s: Node, context: RunContext):
    enclose_var_name(s)
    add_section_heading(s, SECTION_HEADINGS["@class"])


def diagnostic_hook(s: Node, context: RunContext):
    s.clear_lines()


def eval_hook(s: Node, context: RunContext):
    """Replace section with output of its Python snippet.

    The snippet sees `current` (run context, with `current.eval_section`
    set to this section), `section`, and `afterlines_to_code`. Its value
    may be `None` (section is cleared), a string (split into lines), or a
    list of strings.
    """
    src = "\n".join(s.lines)

    context.eval_section = s
    try:
        output = evaluate_snippet(src, {
            "current": context,
            "section": s,
            "afterlines_to_code": afterlines_to_code,
        })
    except EvaluationError as e:
        message = " ".join(str(e).split("\n"))
        logger.warning(f"Evaluation of section at line {s.info.get('line_begin')} failed: {message}")
        output = [f"{ERROR_PREFIX} {message}"]
    finally:
        context.eval_section = None

    s.clear_lines()

    if output is None or output == "":
        return

    if isinstance(output, str):
        output = output.split("\n")

    if not (isinstance(output, (list, tuple)) and all(isinstance(x, str) for x in output)):
        s.append(EVAL_SHAPE_ERROR)
        return

    for x in output:
        s.append(x)


def field_hook(s: Node, context: RunContext):
    enclose_var_name(s)
    if len(s) > 0:
        enclose_type(s, "`({})`", first_whitespace(s[0]))


def overload_hook(s: Node, context: RunContext):
    enclose_type(s, "`{}`", 0)
    add_section_heading(s, SECTION_HEADINGS["@overload"])


def param_hook(s: Node, context: RunContext):
    enclose_var_name(s)
    if len(s) > 0:
        enclose_type(s, "`({})`", first_whitespace(s[0]))


def private_hook(s: Node, context: RunContext):
    if s.parent is not None:
        s.parent.clear_lines()


def return_hook(s: Node, context: RunContext):
    enclose_type(s, "`({})`", 0)
    add_section_heading(s, SECTION_HEADINGS["@return"])


def seealso_hook(s: Node, context: RunContext):
    add_section_heading(s, SECTION_HEADINGS["@seealso"])


def signature_hook(s: Node, context: RunContext):
    for i, line in enumerate(s.children):
        if isinstance(line, str):
            s[i] = align_text(format_signature(line), HELP_WIDTH, "center")


def tag_hook(s: Node, context: RunContext):
    for i, line in enumerate(s.children):
        if isinstance(line, str):
            line = re.sub(r"(\S+)", r"*\1*", line)
            s[i] = align_text(line, HELP_WIDTH, "right")


def text_hook(s: Node, context: RunContext):
    pass


def toc_hook(s: Node, context: RunContext):
    # Rendered by `doc_hook` after all entries are registered
    s.clear_lines()


def toc_entry_hook(s: Node, context: RunContext):
    toc_register(s, context)


def type_hook(s: Node, context: RunContext):
    enclose_type(s, "`({})`", 0)
    add_section_heading(s, SECTION_HEADINGS["@type"])


def usage_hook(s: Node, context: RunContext):
    add_section_heading(s, SECTION_HEADINGS["@usage"])


DEFAULT_SECTION_HOOKS: Dict[str, Hook] = {
    "@alias": alias_hook,
    "@class": class_hook,
    "@diagnostic": diagnostic_hook,
    "@eval": eval_hook,
    "@field": field_hook,
    "@overload": overload_hook,
    "@param": param_hook,
    "@private": private_hook,
    "@return": return_hook,
    "@seealso": seealso_hook,
    "@signature": signature_hook,
    "@tag": tag_hook,
    "@text": text_hook,
    "@toc": toc_hook,
    "@toc_entry": toc_entry_hook,
    "@type": type_hook,
    "@usage": usage_hook,
}


# Structure hooks ============================================================
def block_pre(b: Node, context: RunContext):
    """Infer header sections (tag and/or signature) from afterlines."""
    if b.has_lines() and len(b.info.get("afterlines", [])) > 0:
        infer_header(b)


def section_pre(s: Node, context: RunContext):
    """Replace registered aliases."""
    alias_replace(s, context)


def section_post(s: Node, context: RunContext):
    pass


def block_post(b: Node, context: RunContext):
    """Add headings to first param and field sections, move tags first, frame block."""
    if not b.has_lines():
        return

    found_param, found_field = False, False
    n_tag_sections = 0

    for x in list(b.children):
        if not is_section(x):
            continue

        if not found_param and x.id == "@param":
            add_section_heading(x, PARAMETERS_HEADING)
            found_param = True

        if not found_field and x.id == "@field":
            add_section_heading(x, FIELDS_HEADING)
            found_field = True

        if x.id == "@tag":
            b.remove(x.parent_index)
            b.insert(n_tag_sections, x)
            n_tag_sections += 1

    b.insert(0, as_struct([SEPARATOR_BLOCK], NodeKind.SECTION))
    b.append(as_struct([""], NodeKind.SECTION))


def file_hook(f: Node, context: RunContext):
    """Frame file with separator and empty line."""
    if not f.has_lines():
        return

    f.insert(0, as_struct([as_struct([SEPARATOR_FILE], NodeKind.SECTION)], NodeKind.BLOCK))
    f.append(as_struct([as_struct([""], NodeKind.SECTION)], NodeKind.BLOCK))


def doc_hook(d: Node, context: RunContext):
    """Render table of contents at every `@toc` section and add modeline."""
    toc_sections: List[Node] = []

    def find_toc(x):
        if is_section(x, "@toc"):
            toc_sections.append(x)

    apply_recursively(find_toc, d)

    for toc_section in toc_sections:
        toc_insert(toc_section, context)

    # Entries are shown only in table of contents
    for toc_entry in context.toc:
        toc_entry.clear_lines()

    modeline_section = as_struct([MODELINE], NodeKind.SECTION)
    d.append(as_struct([as_struct([modeline_section], NodeKind.BLOCK)], NodeKind.FILE))


def write_post(d: Node, context: RunContext):
    """Report successful generation."""
    msg = "Help file '{}' is successfully generated ({}).".format(
        d.info.get("output"),
        datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    )
    context.notify(msg)


DEFAULT_HOOKS = {
    "block_pre": block_pre,
    "section_pre": section_pre,
    "sections": DEFAULT_SECTION_HOOKS,
    "section_post": section_post,
    "block_post": block_post,
    "file": file_hook,
    "doc": doc_hook,
    "write_post": write_post,
}
