"""
Constants and defaults for annodoc.
"""

# Annotation lines start with `---` (but not a `----` ruler). The single
# capture group is the section id, a single space after it is dropped.
DEFAULT_ANNOTATION_PATTERN = r"^---(?!-)(\S*) ?"

# Section id of annotation lines until the first captured identifier
DEFAULT_SECTION_ID = "@text"

# Project specific customization script, relative to the working directory
DEFAULT_SCRIPT_PATH = "scripts/annodoc_script.py"

# Help file layout
HELP_WIDTH = 78
SEPARATOR_BLOCK = "-" * HELP_WIDTH
SEPARATOR_FILE = "=" * HELP_WIDTH
MODELINE = " vim:tw=78:ts=8:noet:ft=help:norl:"

# Characters hidden by the help syntax, ignored when measuring width
CONCEALED_CHARS = "*|`"

# Table of contents layout
TOC_INDENT = "  "
TOC_WIDTH = 74
TOC_MIN_FILLER = 3

# Headings prepended to sections
SECTION_HEADINGS = {
    "@class": "Class",
    "@overload": "Overload",
    "@return": "Return",
    "@seealso": "See also",
    "@type": "Type",
    "@usage": "Usage",
}
PARAMETERS_HEADING = "Parameters"
FIELDS_HEADING = "Fields"

# Default input discovery
DEFAULT_INPUT_GLOBS = [".", "lua/**", "after/**", "colors/**"]
SOURCE_FILE_PATTERN = "*.lua"
INIT_FILE_NAME = "init.lua"
DEFAULT_OUTPUT_TEMPLATE = "doc/{name}.txt"

# Markers understood by `afterlines_to_code()`
AFTERLINES_END_MARKER = "--annodoc_afterlines_end"
REPLACE_START_MARKER = "--annodoc_replace_start"
REPLACE_END_MARKER = "--annodoc_replace_end"

# In-document diagnostics
ERROR_PREFIX = "ANNODOC ERROR."
EVAL_SHAPE_ERROR = (
    f"{ERROR_PREFIX} Returned value should be `None`, `str`, or `list`."
)

# Configuration files searched in the working directory and its parents
CONFIG_FILES = [
    ".annodoc.yaml",
    ".annodoc.yml",
    ".annodoc.toml",
    ".annodoc.json",
]

DEFAULT_CONFIG = {
    "annotation_pattern": DEFAULT_ANNOTATION_PATTERN,
    "default_section_id": DEFAULT_SECTION_ID,
    "script_path": DEFAULT_SCRIPT_PATH,
    "logging": {
        "level": "INFO",
    },
}
