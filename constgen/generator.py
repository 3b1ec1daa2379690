"""Renders lookup-class sources from generated units."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import GeneratedUnit

GENERATOR_NAME = "org.apache.camel:apt"
TEMPLATE_NAME = "constant_provider.java.j2"

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


def java_string(value: str) -> str:
    """Escape ``value`` for use inside a Java string literal."""
    parts = []
    for char in value:
        escaped = _SIMPLE_ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            parts.append(f"\\{ord(char):03o}")
        else:
            parts.append(char)
    return "".join(parts)


class SourceGenerator:
    """Turns a GeneratedUnit into Java source text via a jinja2 template."""

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        generator_name: str = GENERATOR_NAME,
    ) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self.generator_name = generator_name
        self._env = self._create_env(self.templates_dir)

    def render(self, unit: GeneratedUnit) -> str:
        if not unit.entries:
            raise ValueError(f"Refusing to render '{unit.target_identifier}' without entries")
        template = self._env.get_template(TEMPLATE_NAME)
        return template.render(unit=unit, generator=self.generator_name)

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        env.filters["java_string"] = java_string
        return env


__all__ = ["GENERATOR_NAME", "SourceGenerator", "java_string"]
