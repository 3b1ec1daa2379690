"""Pipeline orchestration for generate/list runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import ConstGenConfig, load_config
from .diagnostics import ErrorLog, Messager
from .filer import DirectoryFiler, Filer, MemoryFiler
from .logging import get_logger
from .models import Diagnostic, DiagnosticKind
from .processor import ConstantProviderProcessor
from .scanner import SourceScanner
from .sources.base import DeclarationSource
from .sources.java import JavaSourceReader


@dataclass
class GenerationOutcome:
    """Result of a generate run."""

    generated: List[str]
    diagnostics: List[Diagnostic]
    output_dir: Optional[Path] = None
    outputs: Dict[str, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is DiagnosticKind.ERROR]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


@dataclass
class ClassSummary:
    """One discovered constant provider, as reported by ``constgen list``."""

    qualified_name: str
    target_identifier: str
    constants: int


class Orchestrator:
    """Wires config, scanning, parsing and processing together."""

    def __init__(self, source: DeclarationSource | None = None) -> None:
        self._source_override = source
        self.logger = get_logger("orchestrator")

    def run_generate(
        self,
        path: str,
        *,
        output_dir: Path | None = None,
        dry_run: bool = False,
    ) -> GenerationOutcome:
        """Generate lookup classes for the project at ``path``."""
        config = self._load_config(path)
        target_dir = (output_dir or config.output_dir).resolve()
        config.output_dir = target_dir
        source = self._source(config)

        filer: Filer = MemoryFiler() if dry_run else DirectoryFiler(target_dir)
        messager = Messager()
        processor = ConstantProviderProcessor(
            filer,
            messager,
            ErrorLog(config.error_log),
            marker=config.marker,
        )
        self.logger.info("Starting generate run for %s", config.root)
        result = processor.process(source)
        self.logger.info(
            "Generated %d of %d lookup classes",
            len(result.generated),
            len(result.generated) + len(result.failed),
        )
        return GenerationOutcome(
            generated=result.generated,
            diagnostics=list(messager.diagnostics),
            output_dir=None if dry_run else target_dir,
            outputs=dict(filer.outputs) if isinstance(filer, MemoryFiler) else {},
            dry_run=dry_run,
        )

    def run_list(self, path: str) -> List[ClassSummary]:
        """Report discovered constant providers without generating anything."""
        config = self._load_config(path)
        processor = ConstantProviderProcessor(MemoryFiler(), marker=config.marker)
        source = self._source(config)
        discovered = processor.discover(source.elements_annotated_with(config.marker))
        summaries = []
        for annotated in processor.annotated_classes(discovered):
            unit = processor.extract(annotated)
            summaries.append(
                ClassSummary(
                    qualified_name=annotated.qualified_name,
                    target_identifier=annotated.target_identifier,
                    constants=len(unit.entries),
                )
            )
        return summaries

    def _load_config(self, path: str) -> ConstGenConfig:
        project = Path(path).expanduser().resolve()
        if not project.exists():
            raise FileNotFoundError(f"Project path not found: {path}")
        return load_config(project)

    def _source(self, config: ConstGenConfig) -> DeclarationSource:
        if self._source_override is not None:
            return self._source_override
        files = SourceScanner(config).scan()
        self.logger.debug("Scanner found %d Java files", len(files))
        return JavaSourceReader(files, known_types=[config.marker])


__all__ = ["ClassSummary", "GenerationOutcome", "Orchestrator"]
