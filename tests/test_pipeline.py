"""
Tests for the hook pipeline.
"""

import pytest

from annodoc.config import HooksConfig
from annodoc.context import RunContext
from annodoc.parser import lines_to_blocks
from annodoc.pipeline import HookPipeline
from annodoc.structure import Node, NodeKind, as_struct
from annodoc.transformers import DEFAULT_HOOKS


def make_doc(*files):
    doc = Node(NodeKind.DOC)
    for i, lines in enumerate(files):
        doc.append(as_struct(lines_to_blocks(lines), NodeKind.FILE, {'path': f'file{i}'}))
    return doc


def recording_hooks(calls):
    """Hooks which only record what they are applied to."""
    def record(stage):
        def hook(node, context):
            label = node.info.get('id') or node.info.get('path') or ''
            calls.append((stage, node.kind.value, label))
        return hook

    return {
        'block_pre': record('block_pre'),
        'section_pre': record('section_pre'),
        'sections': {'@param': record('@param')},
        'section_post': record('section_post'),
        'block_post': record('block_post'),
        'file': record('file'),
        'doc': record('doc'),
        'write_post': record('write_post'),
    }


class TestHookPipeline:
    """Test hook application order."""

    def test_stages(self):
        """Test stages are defined in application order."""
        pipeline = HookPipeline(DEFAULT_HOOKS)
        assert pipeline.stages == [
            'block_pre', 'section_pre', 'sections', 'section_post',
            'block_post', 'file', 'doc', 'write_post',
        ]

    def test_order(self):
        """Test hooks are applied depth first in fixed order."""
        calls = []
        pipeline = HookPipeline(recording_hooks(calls))
        doc = make_doc(["--- Text", "---@param a"], ["--- Other"])

        pipeline.apply(doc, RunContext())

        assert calls == [
            ('block_pre', 'block', ''),
            ('section_pre', 'section', '@text'),
            ('section_post', 'section', '@text'),
            ('section_pre', 'section', '@param'),
            ('@param', 'section', '@param'),
            ('section_post', 'section', '@param'),
            ('block_post', 'block', ''),
            ('file', 'file', 'file0'),
            ('block_pre', 'block', ''),
            ('section_pre', 'section', '@text'),
            ('section_post', 'section', '@text'),
            ('block_post', 'block', ''),
            ('file', 'file', 'file1'),
            ('doc', 'doc', ''),
        ]

    def test_write_post_is_separate(self):
        """Test write_post is not applied by `apply()`."""
        calls = []
        pipeline = HookPipeline(recording_hooks(calls))
        doc = make_doc(["--- Text"])

        pipeline.apply(doc, RunContext())
        assert not any(stage == 'write_post' for stage, _, _ in calls)

        pipeline.write_post(doc, RunContext())
        assert calls[-1] == ('write_post', 'doc', '')

    def test_unknown_section_id(self):
        """Test sections without registered hook are left alone."""
        pipeline = HookPipeline(DEFAULT_HOOKS)
        assert pipeline.section_hook('@unknown') is None

        doc = make_doc(["---@unknown Some text"])
        pipeline.apply(doc, RunContext())

        # First block of the file is its separator
        block = doc.children[0].children[1]
        assert any(s.lines == ['Some text'] for s in block.children)

    def test_hooks_model(self):
        """Test hooks can be given as validated model."""
        calls = []
        hooks = HooksConfig(**recording_hooks(calls))
        pipeline = HookPipeline(hooks)

        pipeline.apply(make_doc(["--- Text"]), RunContext())

        assert calls[-1] == ('doc', 'doc', '')

    def test_eval_failure_is_isolated(self):
        """Test failing `@eval` leaves sibling sections intact."""
        pipeline = HookPipeline(DEFAULT_HOOKS)
        doc = make_doc(["--- Intro text", "---@eval 1 / 0", "---@text Sibling"])

        pipeline.apply(doc, RunContext())

        block = doc.children[0].children[1]
        lines = [s.lines for s in block.children]
        assert lines[1] == ['Intro text']
        assert lines[2][0].startswith('ANNODOC ERROR. Executing Python code')
        assert lines[3] == ['Sibling']
