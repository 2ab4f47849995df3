"""
Hook pipeline applied to the help file structure.
"""

from typing import Any, Dict, List

from .context import RunContext
from .structure import Node, NodeKind
from .utils import logger


class HookPipeline:
    """Applies configured hooks to a doc structure in a fixed order.

    For every file, for every block: `block_pre(block)`; for every
    section of the block `section_pre(section)`, the hook registered for
    the section id (if any) and `section_post(section)`; then
    `block_post(block)`. After all blocks of a file `file(file)`, after
    all files `doc(doc)`. `write_post(doc)` is applied separately once
    the output is written.

    Sections are iterated over the live list of block children: hooks
    must not insert or remove sibling sections while it runs.
    """

    def __init__(self, hooks: Any):
        self.hooks = hooks
        self.hook_metadata: Dict[str, Dict[str, Any]] = {}
        self._define_stages()

    def _define_stages(self):
        """Define structure stages in application order."""
        stages = {
            'block_pre': {
                'description': 'Applied to block before anything else',
                'args': ['block', 'context'],
            },
            'section_pre': {
                'description': 'Applied to section before anything else',
                'args': ['section', 'context'],
            },
            'sections': {
                'description': 'Applied if section has specified captured id',
                'args': ['section', 'context'],
            },
            'section_post': {
                'description': 'Applied to section after all previous steps',
                'args': ['section', 'context'],
            },
            'block_post': {
                'description': 'Applied to block after all previous steps',
                'args': ['block', 'context'],
            },
            'file': {
                'description': 'Applied to file after all previous steps',
                'args': ['file', 'context'],
            },
            'doc': {
                'description': 'Applied to doc after all previous steps',
                'args': ['doc', 'context'],
            },
            'write_post': {
                'description': 'Applied to doc after output file is written',
                'args': ['doc', 'context'],
            },
        }

        for stage, metadata in stages.items():
            self.hook_metadata[stage] = metadata

    @property
    def stages(self) -> List[str]:
        return list(self.hook_metadata)

    def _get(self, stage: str):
        if isinstance(self.hooks, dict):
            return self.hooks[stage]
        return getattr(self.hooks, stage)

    def section_hook(self, section_id: str):
        """Hook registered for section id, `None` if there is none."""
        return self._get('sections').get(section_id)

    def apply(self, doc: Node, context: RunContext) -> Node:
        """Apply structure hooks to `doc` in place."""
        block_pre = self._get('block_pre')
        section_pre = self._get('section_pre')
        section_post = self._get('section_post')
        block_post = self._get('block_post')
        file_hook = self._get('file')
        doc_hook = self._get('doc')

        for file in doc.children:
            logger.debug(f"Applying hooks to file {file.info.get('path')}")
            for block in file.children:
                block_pre(block, context)

                for section in block.children:
                    if not (isinstance(section, Node) and section.kind == NodeKind.SECTION):
                        continue
                    section_pre(section, context)
                    hook = self.section_hook(section.info.get('id'))
                    if hook is not None:
                        hook(section, context)
                    section_post(section, context)

                block_post(block, context)

            file_hook(file, context)

        doc_hook(doc, context)
        return doc

    def write_post(self, doc: Node, context: RunContext):
        """Apply hook for already written output."""
        self._get('write_post')(doc, context)
