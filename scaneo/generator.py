"""
Scan code generator.

Renders a template over the extracted struct tokens, normalizes the text
and checks it parses as Go before anything reaches the output sink.
"""

from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

from .config import ScaneoConfig
from .logging_config import get_logger
from .naming import validate_go_package_name
from .parser import validate_go_source
from .templates import SCANS_TEMPLATE, TemplateEngine, create_template_engine
from .tokens import StructToken

logger = get_logger(__name__)


def _ends_in_raw_string(line: str, in_raw: bool) -> bool:
    """Whether a Go raw string literal is still open at the end of ``line``."""
    quote = None
    i = 0
    while i < len(line):
        ch = line[i]
        if in_raw:
            if ch == "`":
                in_raw = False
        elif quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch == "`":
            in_raw = True
        elif ch in "\"'":
            quote = ch
        elif line.startswith("//", i):
            break
        i += 1
    return in_raw


class ScanGenerator:
    """Generates Go scan functions from struct tokens."""

    def __init__(
        self,
        config: Optional[ScaneoConfig] = None,
        engine: Optional[TemplateEngine] = None,
    ):
        """Initialize generator with optional configuration."""
        self.config = config or ScaneoConfig()
        self._template_engine = engine

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            template_dir = self.config.template_dir
            self._template_engine = create_template_engine(
                Path(template_dir) if template_dir else None,
                self.config.import_paths,
            )
        return self._template_engine

    def build_context(
        self, package_name: str, unexport: bool, tokens: Sequence[StructToken]
    ) -> Dict[str, Any]:
        """Template variables for one generation run."""
        return {
            "package_name": package_name,
            "unexport": unexport,
            "visibility": "s" if unexport else "S",
            "tokens": list(tokens),
        }

    def validate_tokens(
        self, package_name: str, tokens: Sequence[StructToken]
    ) -> List[str]:
        """
        Collect non-fatal problems with the input.

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = list(validate_go_package_name(package_name))

        for token in tokens:
            if not token.fields:
                warnings.append(f"Struct {token.name} has no fields")

        counts = Counter(token.name for token in tokens)
        for name, count in counts.items():
            if count > 1:
                warnings.append(f"Struct {name} declared {count} times")

        return warnings

    def render(
        self,
        package_name: str,
        unexport: bool,
        tokens: Sequence[StructToken],
        template: Optional[str] = None,
    ) -> str:
        """
        Render and validate generated code without writing it anywhere.

        Raises:
            TemplateNotFoundError: If the template is not registered
            RenderError: If the template fails
            ParseError: If the rendered code is not valid Go
        """
        template = template or self.config.template

        for warning in self.validate_tokens(package_name, tokens):
            logger.warning(warning)

        context = self.build_context(package_name, unexport, tokens)
        code = self.format_code(
            self.template_engine.render_template(template, context)
        )

        if self.config.validate_output:
            validate_go_source(code, f"<{template}>")

        logger.debug(
            "Rendered %s for %d struct(s), %d line(s)",
            template,
            len(tokens),
            code.count("\n"),
        )
        return code

    def generate(
        self,
        sink: TextIO,
        package_name: str,
        unexport: bool,
        tokens: Sequence[StructToken],
        template: Optional[str] = None,
    ) -> str:
        """
        Render the template and write the result to ``sink``.

        Nothing is written unless rendering and validation succeed.

        Returns:
            The generated code

        Raises:
            TemplateNotFoundError: If the template is not registered
            RenderError: If the template fails
            ParseError: If the rendered code is not valid Go
            OSError: If writing to the sink fails
        """
        code = self.render(package_name, unexport, tokens, template)
        sink.write(code)
        return code

    def format_code(self, code: str) -> str:
        """
        Strip trailing whitespace and squeeze runs of blank lines to one.

        Lines that open, continue or close a raw string literal are kept
        verbatim.
        """
        result_lines = []
        blank = False
        in_raw = False

        for line in code.split("\n"):
            starts_raw = in_raw
            in_raw = _ends_in_raw_string(line, in_raw)
            if starts_raw or in_raw:
                result_lines.append(line)
                blank = False
                continue

            line = line.rstrip()
            if not line:
                if blank or not result_lines:
                    continue
                blank = True
            else:
                blank = False
            result_lines.append(line)

        while result_lines and not result_lines[-1]:
            result_lines.pop()

        return "\n".join(result_lines) + "\n"


def generate(
    sink: TextIO,
    package_name: str,
    unexport: bool,
    tokens: Sequence[StructToken],
    template: str = SCANS_TEMPLATE,
    engine: Optional[TemplateEngine] = None,
) -> str:
    """
    Generate scan code for ``tokens`` into ``sink``.

    Args:
        sink: Writable text stream
        package_name: Go package of the generated file
        unexport: Emit ``scanX`` instead of ``ScanX``
        tokens: Struct tokens, in output order
        template: Logical template name
        engine: Template registry; the bundled one when omitted

    Returns:
        The generated code
    """
    generator = ScanGenerator(engine=engine)
    return generator.generate(sink, package_name, unexport, tokens, template)
