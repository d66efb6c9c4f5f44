"""
Template engine wrapper for code generation.

Wraps a Jinja2 environment that acts as the template registry: the bundled
templates live in ``scaneo/templates`` and callers may add their own, either
from a directory or in memory. Every template sees the scaneo helpers.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    select_autoescape,
)

from .gotypes import DEFAULT_IMPORT_PATHS, import_paths_for, rand_literal
from .logging_config import get_logger
from .naming import to_snake_case, to_title
from .tokens import FieldToken, StructToken

logger = get_logger(__name__)

BUILTIN_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".go.j2"

SCANS_TEMPLATE = "scans"
SCANS_TEST_TEMPLATE = "scans_test"

# Packages the fixture template always references.
_FIXTURE_PACKAGES = ("sql", "rand")


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateNotFoundError(TemplateError):
    """Raised when no template is registered under the requested name."""

    pass


class RenderError(TemplateError):
    """Raised when a template fails while rendering."""

    pass


class TemplateEngine:
    """Jinja2 environment preloaded with the scaneo helpers."""

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        import_paths: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files; the bundled
                templates are used when omitted
            import_paths: Package qualifier to Go import path table used by
                ``rand_imports``
        """
        self.template_dir = Path(template_dir) if template_dir else BUILTIN_TEMPLATE_DIR
        self.import_paths = dict(import_paths or DEFAULT_IMPORT_PATHS)
        self._memory = DictLoader({})
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation helpers."""
        if not self.template_dir.is_dir():
            raise TemplateError(f"Template directory not found: {self.template_dir}")

        self._env = Environment(
            loader=ChoiceLoader(
                [self._memory, FileSystemLoader(str(self.template_dir))]
            ),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

        helpers = {
            "title": self._title_helper,
            "snake": self._snake_helper,
            "hasid": self._hasid_helper,
            "noid": self._noid_helper,
            "inc": self._inc_helper,
            "rand": self._rand_helper,
            "rand_imports": self._rand_imports_helper,
        }
        self._env.filters.update(helpers)
        self._env.globals.update(helpers)

    def resolve_name(self, name: str) -> str:
        """
        Map a logical template name to a registered template.

        ``scans`` resolves to ``scans`` if registered, else ``scans.go.j2``.

        Raises:
            TemplateNotFoundError: If neither form is registered
        """
        available = set(self.list_templates())
        for candidate in (name, name + TEMPLATE_SUFFIX):
            if candidate in available:
                return candidate
        raise TemplateNotFoundError(
            f"No template named {name!r}. Available: {', '.join(self.logical_names())}"
        )

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Logical name or file name of the template
            context: Variables to pass to template

        Returns:
            Rendered template content

        Raises:
            TemplateNotFoundError: If the template is not registered
            RenderError: If rendering fails
        """
        resolved = self.resolve_name(template_name)
        try:
            template = self._env.get_template(resolved)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(f"Template not found: {e.name}") from e
        except Exception as e:
            raise RenderError(f"Failed to load template {resolved}: {e}") from e

        try:
            return template.render(**context)
        except Exception as e:
            raise RenderError(f"Failed to render template {resolved}: {e}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template. It shadows a file template of the same name.

        Args:
            name: Template name
            content: Template content
        """
        self._memory.mapping[name] = content

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        try:
            self.resolve_name(template_name)
        except TemplateNotFoundError:
            return False
        return True

    def list_templates(self) -> List[str]:
        """All registered template names."""
        return sorted(self._env.list_templates())

    def logical_names(self) -> List[str]:
        """Registered template names with the ``.go.j2`` suffix dropped."""
        names = set()
        for name in self.list_templates():
            if name.endswith(TEMPLATE_SUFFIX):
                name = name[: -len(TEMPLATE_SUFFIX)]
            names.add(name)
        return sorted(names)

    # Template helpers

    def _title_helper(self, name: str) -> str:
        """Capitalize the first letter of an identifier."""
        return to_title(_require_str(name, "title"))

    def _snake_helper(self, name: str) -> str:
        """Convert identifier to snake_case."""
        return to_snake_case(_require_str(name, "snake"))

    def _hasid_helper(self, fields: Iterable[FieldToken]) -> bool:
        """True if a field is named exactly ``Id``."""
        return any(f.name == "Id" for f in fields)

    def _noid_helper(self, fields: Iterable[FieldToken]) -> List[FieldToken]:
        """Fields without the ``Id`` field."""
        return [f for f in fields if f.name != "Id"]

    def _inc_helper(self, n: int) -> int:
        return n + 1

    def _rand_helper(self, type_text: str) -> str:
        """Go expression producing a random value of ``type_text``."""
        return rand_literal(type_text).expr

    def _rand_imports_helper(self, tokens: Iterable[StructToken]) -> List[str]:
        """Import paths needed by the ``rand`` literals of all tokens."""
        packages = set(_FIXTURE_PACKAGES)
        for token in tokens:
            for f in token.fields:
                packages.update(rand_literal(f.type).packages)
        return import_paths_for(packages, self.import_paths)


def _require_str(value: Any, helper: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{helper} expects a string, got {type(value).__name__}")
    return value


# Default template engine instance
_default_engine = None


def get_default_template_engine() -> TemplateEngine:
    """Get the default template engine instance."""
    global _default_engine
    if _default_engine is None:
        _default_engine = TemplateEngine()
    return _default_engine


def create_template_engine(
    template_dir: Optional[Path] = None,
    import_paths: Optional[Dict[str, str]] = None,
) -> TemplateEngine:
    """Create an engine; with no arguments the shared default is returned."""
    if template_dir is None and import_paths is None:
        return get_default_template_engine()
    return TemplateEngine(template_dir, import_paths)
