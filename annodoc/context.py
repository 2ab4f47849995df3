"""
Run-scoped state shared by hooks of one generation run.
"""

from typing import Any, Callable, Dict, List, Optional

from .structure import Node
from .utils import notify


class RunContext:
    """State of the generation run in progress.

    One context is created per run and passed to every hook. It holds the
    alias table, registered table of contents entries, and the section of
    the `@eval` snippet being executed.
    """

    def __init__(self, config: Any = None, notifier: Optional[Callable[[str], None]] = None):
        self.config = config
        self.notifier = notifier or notify
        self.aliases: Dict[str, str] = {}
        self.toc: List[Node] = []
        self.eval_section: Optional[Node] = None

    def reset(self):
        """Forget everything registered during the run."""
        self.aliases = {}
        self.toc = []
        self.eval_section = None

    def notify(self, msg: str):
        self.notifier(msg)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aliases": dict(self.aliases),
            "toc": len(self.toc),
            "eval_section": self.eval_section,
        }
