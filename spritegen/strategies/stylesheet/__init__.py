"""
Built-in stylesheet renderers.

Every built-in except ``json`` is a YAML template shipped in
``templates/`` and rendered with the same loader used for user template
files.
"""

from pathlib import Path

from .json_sheet import JsonStylesheet
from .template import (
    FileTemplateStylesheet,
    TemplateStylesheet,
    format_px,
    parse_template,
)

TEMPLATE_DIR = Path(__file__).parent / "templates"

BUILTIN_STYLESHEETS = {
    name: FileTemplateStylesheet(TEMPLATE_DIR / f"{name}.yaml")
    for name in ("stylus", "less", "sass", "scss", "css", "prefixed-css")
}
BUILTIN_STYLESHEETS["json"] = JsonStylesheet()

__all__ = [
    "BUILTIN_STYLESHEETS",
    "TEMPLATE_DIR",
    "FileTemplateStylesheet",
    "JsonStylesheet",
    "TemplateStylesheet",
    "format_px",
    "parse_template",
]
