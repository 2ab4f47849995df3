"""
Project specific customization script.

A project can customize generation with a Python file at the configured
`script_path` (`scripts/annodoc_script.py` by default). It is used only
when `DocGenerator.generate()` is called without any arguments, and is
trusted code: it runs in-process with full access to the generator.

The script module may define:

- `run(generator)` - performs generation itself, usually by calling
  `generator.generate(input, output, config)` one or more times.
- `get_config()` - returns a config override dictionary used for a
  generation with default input and output.

`run` takes precedence if both are defined.
"""

import importlib.util
from pathlib import Path
from typing import Any, Optional

from .utils import logger

MODULE_NAME = "annodoc_project_script"


class ProjectScriptRunner:
    """Loads and executes the project customization script."""

    def __init__(self, script_path: Optional[str] = None):
        self.script_path = script_path
        self.logger = logger.getChild("project_script")

    def resolve_path(self, generator: Any) -> Path:
        if self.script_path is not None:
            return Path(self.script_path)
        return Path(generator.config.config.script_path)

    def _load_module(self, path: Path):
        spec = importlib.util.spec_from_file_location(MODULE_NAME, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Can't load project script from {path}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def run(self, generator: Any) -> bool:
        """Execute project script for `generator`.

        Returns:
            Whether script was found and executed without errors. Any
            failure means generation should proceed with default behavior.
        """
        path = self.resolve_path(generator)
        if not path.is_file():
            self.logger.debug(f"No project script at {path}")
            return False

        try:
            module = self._load_module(path)

            run = getattr(module, 'run', None)
            get_config = getattr(module, 'get_config', None)

            if callable(run):
                run(generator)
            elif callable(get_config):
                generator.generate(config=get_config() or {})
            else:
                self.logger.warning(
                    f"Project script {path} defines neither `run()` nor `get_config()`"
                )
                return False
        except Exception as e:
            self.logger.debug(f"Project script {path} failed: {e}")
            return False

        self.logger.debug(f"Executed project script {path}")
        return True
