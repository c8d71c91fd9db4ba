"""
Pipeline generator: document -> IR -> code for each configured target.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from .analyzer import DocumentAnalyzer, SchemaIR
from .atomic_writer import AtomicWriter
from .backends import CodeBackend, GoBackend, TypeScriptBackend, ZodBackend
from .config import GenerationConfig, GeneratorConfig
from .errors import GenerationError

logger = logging.getLogger(__name__)

GENERATORS: dict[str, type[CodeBackend]] = {
    "zod": ZodBackend,
    "typescript": TypeScriptBackend,
    "golang": GoBackend,
}

DEFAULT_OUTPUT_FILES = {
    "zod": "schemas.ts",
    "typescript": "types.ts",
    "golang": "types.go",
}


class PipelineGenerator:
    """
    Generates code from an OpenAPI document.

    Phases:
    1. Analyzer: resolve the document into a SchemaIR
    2. Mapping and emission: one backend per generation entry
    3. Writing: atomic replacement of each output file
    """

    def __init__(self, document: dict[str, Any], config: GeneratorConfig | None = None, command_line: str = ""):
        """
        Initialize the pipeline generator.

        Args:
            document: Parsed OpenAPI document
            config: Generator configuration
            command_line: Command line recorded in the generation comment
        """
        self.document = document
        self.config = config or GeneratorConfig()
        self.command_line = command_line
        self._ir: SchemaIR | None = None

    @property
    def ir(self) -> SchemaIR:
        """The document IR, built on first access.

        Raises:
            IRBuildError: If the document has errors
        """
        if self._ir is None:
            self._ir = DocumentAnalyzer().analyze(self.document)
        return self._ir

    def create_backend(self, generation: GenerationConfig) -> CodeBackend:
        """Instantiate the backend of a generation entry."""
        backend_class = GENERATORS.get(generation.generator)
        if backend_class is None:
            known = ", ".join(sorted(GENERATORS))
            raise GenerationError(f"Unknown generator '{generation.generator}' (known: {known})")

        return backend_class(
            options=generation.options,
            type_mapping=self.config.type_mapping_for(generation.generator),
            template_dir=generation.template,
            generation_comment=self._generation_comment(),
        )

    def generate(self, generation: GenerationConfig) -> str:
        """Generate the code of one generation entry."""
        backend = self.create_backend(generation)
        return backend.generate(self.ir)

    def output_path(self, generation: GenerationConfig) -> Path:
        output_file = generation.output_file or DEFAULT_OUTPUT_FILES.get(generation.generator, generation.generator)
        return Path(self.config.output) / output_file

    def run(self, writer: AtomicWriter | None = None) -> list[Path]:
        """
        Run every enabled generation and write its output.

        Returns:
            Written file paths, in generation order
        """
        writer = writer or AtomicWriter()
        written = []
        for generation in self.config.enabled_generations():
            code = self.generate(generation)
            path = self.output_path(generation)
            writer.write(path, code)
            logger.info("Generated %s with %s", path, generation.generator)
            written.append(path)
        return written

    def _generation_comment(self) -> str:
        from .. import __version__

        command_line = self.command_line or "openapi_to_code"
        return f"Generated by openapi_to_code v{__version__} : {command_line}"
