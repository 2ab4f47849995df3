"""Classification of source lines into blocks and sections."""

import re
from dataclasses import dataclass, field
from typing import List, Pattern, Union

from .constants import DEFAULT_ANNOTATION_PATTERN, DEFAULT_SECTION_ID
from .structure import Node, NodeKind
from .utils import logger


@dataclass
class RawBlock:
    """Lines of one block before they are split into sections."""
    line_begin: int
    line_end: int = 0
    annotation: List[str] = field(default_factory=list)
    section_ids: List[str] = field(default_factory=list)
    afterlines: List[str] = field(default_factory=list)


def compile_annotation_pattern(pattern: Union[str, Pattern]) -> Pattern:
    """Compile annotation pattern, checking it has a section id capture."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if pattern.groups < 1:
        raise ValueError(
            f"Annotation pattern {pattern.pattern!r} should have a capture group for section id"
        )
    return pattern


def lines_to_blocks(
    lines: List[str],
    annotation_pattern: Union[str, Pattern] = DEFAULT_ANNOTATION_PATTERN,
    default_section_id: str = DEFAULT_SECTION_ID,
) -> List[Node]:
    """Convert lines of one file into an array of block structures.

    Consecutive annotation lines form a block; non-annotation lines after
    them (up to the next annotation line or end of file) become the
    block's afterlines. Inside a block a new section starts at every
    annotation line with a non-empty captured section id.

    Args:
        lines: Raw lines of a file
        annotation_pattern: Pattern matched at line start, its first
            capture group is a section id (possibly empty)
        default_section_id: Id of block lines before the first captured id

    Returns:
        List of block nodes (without parent)
    """
    pattern = compile_annotation_pattern(annotation_pattern)

    blocks: List[Node] = []
    raw = RawBlock(line_begin=1)
    matched_cur = False

    for i, line in enumerate(lines, start=1):
        match = pattern.match(line)
        matched_prev, matched_cur = matched_cur, match is not None

        if matched_cur:
            # Transition from afterlines to annotation starts new block
            if not matched_prev:
                raw.line_end = i - 1
                # Empty when file starts with annotation
                if raw.line_end >= raw.line_begin:
                    blocks.append(raw_block_to_block(raw, default_section_id))
                raw = RawBlock(line_begin=i)

            raw.annotation.append(line[:match.start()] + line[match.end():])
            raw.section_ids.append(match.group(1) or "")
        else:
            raw.afterlines.append(line)

    raw.line_end = len(lines)

    # File without annotation lines has nothing to document
    if len(raw.annotation) > 0:
        blocks.append(raw_block_to_block(raw, default_section_id))
    elif raw.afterlines:
        logger.debug(f"No annotation in {len(raw.afterlines)} lines")

    return blocks


def raw_block_to_block(raw: RawBlock, default_section_id: str = DEFAULT_SECTION_ID) -> Node:
    """Split annotation lines of a raw block into sections.

    Lines at the start of a file before the first annotation give a block
    without sections which only holds them as afterlines.
    """
    block = Node(NodeKind.BLOCK, {
        "afterlines": raw.afterlines,
        "line_begin": raw.line_begin,
        "line_end": raw.line_end,
    })

    block_begin = raw.line_begin
    section = Node(NodeKind.SECTION, {"id": default_section_id, "line_begin": block_begin})

    for i, (text, section_id) in enumerate(zip(raw.annotation, raw.section_ids)):
        if section_id != "":
            if len(section) > 0:
                section.info["line_end"] = block_begin + i - 1
                block.append(section)
            section = Node(NodeKind.SECTION, {"id": section_id, "line_begin": block_begin + i})
        section.append(text)

    if len(section) > 0:
        section.info["line_end"] = block_begin + len(raw.annotation) - 1
        block.append(section)

    return block
