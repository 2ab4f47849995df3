"""Help file generator for annodoc."""

from typing import Any, Callable, Dict, List, Optional

from .collector import collect_strings
from .config import AnnodocConfig, Config
from .context import RunContext
from .exceptions import GenerationInProgressError
from .file_io import default_input, default_output, read_lines, write_lines
from .parser import lines_to_blocks
from .pipeline import HookPipeline
from .project_script import ProjectScriptRunner
from .structure import Node, NodeKind, as_struct
from .utils import full_path, logger, notify


class DocGenerator:
    """Generate help file from annotations of source files."""

    def __init__(
        self,
        config: Optional[Config] = None,
        reader: Callable[[str], List[str]] = read_lines,
        writer: Callable[[str, List[str]], None] = write_lines,
        script_runner: Optional[ProjectScriptRunner] = None,
        notifier: Callable[[str], None] = notify,
    ):
        """Initialize the generator.

        Args:
            config: Base configuration (defaults and config file if `None`)
            reader: Returns lines of a source file
            writer: Writes lines to an output file
            script_runner: Runner of the project customization script
            notifier: Surfaces messages to the operator
        """
        self.config = config or Config()
        self.reader = reader
        self.writer = writer
        self.script_runner = script_runner or ProjectScriptRunner()
        self.notifier = notifier

        # Context of the run in progress
        self.current: Optional[RunContext] = None
        self.recent_output: Optional[Node] = None
        self._run_active = False
        self._script_active = False

    @property
    def is_active(self) -> bool:
        return self._run_active

    def generate(
        self,
        input: Optional[List[str]] = None,
        output: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Optional[Node]:
        """Generate help file.

        When called without arguments, the project script is executed
        first (see `annodoc.project_script`). If it succeeds, the doc of
        the most recent generation done by the script is returned.
        Otherwise default input files and output path are used.

        Args:
            input: Paths of source files in processing order
            output: Path of the help file
            config: Overrides deep-merged into the base configuration

        Returns:
            Doc structure after all hooks are applied

        Raises:
            ConfigurationError: If configuration has the wrong shape
            SourceReadError: If an input file can't be read
            DestinationWriteError: If output can't be written
            GenerationInProgressError: If another run is in progress
        """
        if self._run_active:
            raise GenerationInProgressError(
                "Help file generation is already in progress; nested generation is not allowed"
            )

        if input is None and output is None and config is None:
            if self._execute_project_script():
                return self.recent_output

        effective_config = self.config.merge(config)

        input = list(input) if input is not None else default_input()
        output = output if output is not None else default_output()

        return self._run(input, output, effective_config)

    def _execute_project_script(self) -> bool:
        if self._script_active:
            return False

        config_cache = self.config
        self._script_active = True
        self.recent_output = None
        try:
            return self.script_runner.run(self)
        finally:
            self.config = config_cache
            self._script_active = False

    def _run(self, input: List[str], output: str, config: AnnodocConfig) -> Node:
        pipeline = HookPipeline(config.hooks)
        context = RunContext(config=config, notifier=self.notifier)

        self._run_active = True
        self.current = context
        try:
            doc = self.build_doc(input, output, config)

            pipeline.apply(doc, context)
            help_lines = collect_strings(doc)

            self.writer(output, help_lines)
            logger.debug(f"Help file {output} has {len(help_lines)} lines")

            pipeline.write_post(doc, context)
        finally:
            context.reset()
            self.current = None
            self._run_active = False

        self.recent_output = doc
        return doc

    def build_doc(self, input: List[str], output: str, config: AnnodocConfig) -> Node:
        """Parse input files into doc structure (hooks not applied)."""
        doc = Node(NodeKind.DOC, {"input": input, "output": output, "config": config})

        for path in input:
            lines = self.reader(path)
            blocks = lines_to_blocks(lines, config.annotation_pattern, config.default_section_id)
            logger.debug(f"Parsed {path}: {len(blocks)} blocks")
            doc.append(as_struct(blocks, NodeKind.FILE, {"path": full_path(path)}))

        return doc
