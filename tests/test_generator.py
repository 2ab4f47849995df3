"""
Tests for help file generation.
"""

import pytest

from annodoc.config import Config
from annodoc.constants import MODELINE
from annodoc.exceptions import (
    ConfigurationError,
    DestinationWriteError,
    GenerationInProgressError,
    SourceReadError,
)
from annodoc.file_io import default_output, read_lines
from annodoc.generator import DocGenerator
from annodoc.parser import lines_to_blocks


MODULE_SOURCE = """--- Module description
---@tag mymod
local M = {}

--- Add two numbers
---@param a number First
---@param b number Second
---@return number Sum
function M.add(a, b)
  return a + b
end

return M"""

MODULE_HELP = [
    "=" * 78,
    "-" * 78,
    " " * 73 + "*mymod*",
    " " * 38 + "`M`",
    "Module description",
    "",
    "-" * 78,
    " " * 71 + "*M.add()*",
    " " * 31 + "`M.add`({a}, {b})",
    "Add two numbers",
    "Parameters~",
    "{a} `(number)` First",
    "{b} `(number)` Second",
    "Return~",
    "`(number)` Sum",
    "",
    "",
    MODELINE,
]

TOC_SOURCE = """---@toc

---@tag first-tag
---@toc_entry First entry

---@tag second-tag
---@toc_entry Second entry"""


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def messages():
    return []


@pytest.fixture
def generator(messages):
    return DocGenerator(config=Config(), notifier=messages.append)


def write_source(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return str(path)


class TestGenerate:
    """Test generation with explicit input and output."""

    def test_module_help(self, generator, workdir):
        """Test full help file of a small module."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)
        output = workdir / "doc" / "mymod.txt"

        doc = generator.generate([source], str(output))

        assert output.read_text() == "\n".join(MODULE_HELP)
        assert doc.info['input'] == [source]
        assert doc.info['output'] == str(output)
        assert generator.recent_output is doc

    def test_output_has_no_annotations(self, generator, workdir):
        """Test generated help file has no annotation lines."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)
        output = workdir / "out.txt"

        generator.generate([source], str(output))

        assert lines_to_blocks(read_lines(output)) == []

    def test_table_of_contents(self, generator, workdir):
        """Test table of contents is rendered where `@toc` is."""
        source = write_source(workdir / "toc.lua", TOC_SOURCE)
        output = workdir / "toc.txt"

        generator.generate([source], str(output))

        assert read_lines(output) == [
            "=" * 78,
            "  First entry" + "." * 54 + "|first-tag|",
            "  Second entry" + "." * 52 + "|second-tag|",
            "-" * 78,
            " " * 69 + "*first-tag*",
            "",
            "-" * 78,
            " " * 68 + "*second-tag*",
            "",
            "",
            MODELINE,
        ]

    def test_files_keep_order(self, generator, workdir):
        """Test files appear in help file in input order."""
        first = write_source(workdir / "b.lua", "--- From b")
        second = write_source(workdir / "a.lua", "--- From a")

        doc = generator.generate([first, second], str(workdir / "out.txt"))

        lines = read_lines(workdir / "out.txt")
        assert lines.index("From b") < lines.index("From a")
        assert [f.info['path'] for f in doc.children[:2]] == [first, second]

    def test_file_without_annotations(self, generator, workdir):
        """Test file without annotations adds nothing."""
        source = write_source(workdir / "plain.lua", "local x = 1")

        generator.generate([source], str(workdir / "out.txt"))

        assert read_lines(workdir / "out.txt") == [MODELINE]

    def test_leading_code_adds_nothing(self, generator, workdir):
        """Test lines before first annotation don't reach help file."""
        source = write_source(workdir / "lead.lua", "local x = 1\n\n--- Text")

        generator.generate([source], str(workdir / "out.txt"))

        assert read_lines(workdir / "out.txt") == ["=" * 78, "-" * 78, "Text", "", "", MODELINE]

    def test_private_block(self, generator, workdir):
        """Test private block leaves no trace."""
        source = write_source(workdir / "p.lua", "---@private\nM.helper = 1")

        generator.generate([source], str(workdir / "out.txt"))

        assert read_lines(workdir / "out.txt") == [MODELINE]

    def test_alias(self, generator, workdir):
        """Test alias is expanded in later sections."""
        text = "---@alias Opts Table of options\n\n---@param opts Opts"
        source = write_source(workdir / "alias.lua", text)

        generator.generate([source], str(workdir / "out.txt"))

        lines = read_lines(workdir / "out.txt")
        assert "{opts} Table of options" in lines
        assert not any("Opts" in line for line in lines)

    def test_write_post_notification(self, generator, messages, workdir):
        """Test successful write is reported."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)

        generator.generate([source], "out.txt")

        assert len(messages) == 1
        assert messages[0].startswith("Help file 'out.txt' is successfully generated")

    def test_custom_writer(self, workdir):
        """Test writer receives output path and lines."""
        written = []
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)
        generator = DocGenerator(config=Config(), writer=lambda path, lines: written.append((path, lines)))

        generator.generate([source], "help.txt")

        assert written == [("help.txt", MODULE_HELP)]


class TestConfigOverrides:
    """Test per-call configuration."""

    def test_section_hook_override(self, generator, workdir):
        """Test overriding one hook keeps the rest."""
        def param_hook(s, context):
            s[0] = "PARAM " + s[0]

        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)
        config = {'hooks': {'sections': {'@param': param_hook}}}

        generator.generate([source], "out.txt", config)

        lines = read_lines(workdir / "out.txt")
        assert "PARAM a number First" in lines
        assert "Return~" in lines
        assert " " * 71 + "*M.add()*" in lines

    def test_annotation_pattern_override(self, generator, workdir):
        """Test custom annotation pattern."""
        source = write_source(workdir / "mod.py", "## Python text\nx = 1")

        generator.generate([source], "out.txt", {'annotation_pattern': r"^##(\S*) ?"})

        assert "Python text" in read_lines(workdir / "out.txt")

    def test_override_does_not_persist(self, generator, workdir):
        """Test overrides apply to one call only."""
        source = write_source(workdir / "mod.py", "## Python text")

        generator.generate([source], "out.txt", {'annotation_pattern': r"^##(\S*) ?"})
        generator.generate([source], "out.txt")

        assert read_lines(workdir / "out.txt") == [MODELINE]

    def test_invalid_hook(self, generator, workdir):
        """Test non-callable hook is rejected."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)

        with pytest.raises(ConfigurationError):
            generator.generate([source], "out.txt", {'hooks': {'block_pre': 1}})

        assert not (workdir / "out.txt").exists()

    def test_invalid_override_type(self, generator, workdir):
        """Test override which is not a dictionary is rejected."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)

        with pytest.raises(ConfigurationError):
            generator.generate([source], "out.txt", "not a config")


class TestErrors:
    """Test fatal generation errors."""

    def test_missing_source(self, generator, workdir):
        """Test unreadable input aborts generation."""
        with pytest.raises(SourceReadError) as exc_info:
            generator.generate([str(workdir / "missing.lua")], "out.txt")

        assert "missing.lua" in str(exc_info.value)
        assert not (workdir / "out.txt").exists()
        assert not generator.is_active

    def test_unwritable_output(self, generator, workdir):
        """Test unwritable output aborts generation."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)
        (workdir / "blocker").write_text("")

        with pytest.raises(DestinationWriteError):
            generator.generate([source], str(workdir / "blocker" / "out.txt"))

    def test_nested_generation(self, generator, workdir):
        """Test generation from inside a hook is rejected."""
        source = write_source(workdir / "mymod.lua", MODULE_SOURCE)

        def doc_hook(d, context):
            generator.generate([source], "nested.txt")

        with pytest.raises(GenerationInProgressError):
            generator.generate([source], "out.txt", {'hooks': {'doc': doc_hook}})

        assert not generator.is_active
        assert generator.current is None

        # Generator is usable again
        generator.generate([source], "out.txt")
        assert (workdir / "out.txt").exists()


class TestDefaultGeneration:
    """Test generation without arguments."""

    def test_default_input_and_output(self, generator, workdir):
        """Test discovered sources and output named after directory."""
        write_source(workdir / "lua" / "plugin" / "extra.lua", "--- Extra text")
        write_source(workdir / "lua" / "plugin" / "init.lua", "--- Init text")

        doc = generator.generate()

        output = workdir / default_output()
        lines = read_lines(output)
        assert lines.index("Init text") < lines.index("Extra text")
        assert doc.info['output'] == default_output()

    def test_script_run(self, generator, workdir):
        """Test script `run()` performs generation."""
        write_source(workdir / "src.lua", "--- Script text")
        write_source(
            workdir / "scripts" / "annodoc_script.py",
            "def run(generator):\n"
            "    generator.generate(['src.lua'], 'script.txt')\n",
        )

        doc = generator.generate()

        assert doc.info['output'] == 'script.txt'
        assert "Script text" in read_lines(workdir / "script.txt")
        assert not (workdir / default_output()).exists()

    def test_script_get_config(self, generator, workdir):
        """Test script `get_config()` is used with default input and output."""
        write_source(workdir / "init.lua", "## Hash text")
        write_source(
            workdir / "scripts" / "annodoc_script.py",
            "def get_config():\n"
            "    return {'annotation_pattern': r'^##(\\S*) ?'}\n",
        )

        doc = generator.generate()

        assert doc.info['output'] == default_output()
        assert "Hash text" in read_lines(workdir / default_output())

    def test_script_without_generation(self, generator, workdir):
        """Test script which generates nothing gives no doc."""
        write_source(workdir / "scripts" / "annodoc_script.py", "def run(generator):\n    pass\n")

        assert generator.generate() is None

    def test_failing_script_falls_back(self, generator, workdir):
        """Test failing script leads to default generation."""
        write_source(workdir / "init.lua", "--- Init text")
        write_source(
            workdir / "scripts" / "annodoc_script.py",
            "def run(generator):\n    raise RuntimeError('boom')\n",
        )

        doc = generator.generate()

        assert doc is not None
        assert "Init text" in read_lines(workdir / default_output())

    def test_script_calling_generate_without_arguments(self, generator, workdir):
        """Test script can't trigger itself again."""
        write_source(workdir / "init.lua", "--- Init text")
        write_source(
            workdir / "scripts" / "annodoc_script.py",
            "def run(generator):\n    generator.generate()\n",
        )

        doc = generator.generate()

        assert doc is not None
        assert doc.info['output'] == default_output()
