"""
scaneo

Generates Go database/sql scan functions from struct declarations.
"""

__version__ = "0.1.0"

from .tokens import FieldToken, StructToken, type_text
from .parser import ParseError, extract, extract_files, extract_source, parse_source
from .templates import (
    RenderError,
    TemplateEngine,
    TemplateError,
    TemplateNotFoundError,
    SCANS_TEMPLATE,
    SCANS_TEST_TEMPLATE,
)
from .config import ScaneoConfig, ConfigError, load_config
from .generator import ScanGenerator, generate
from .utils import filenames

__all__ = [
    # Data model
    "FieldToken",
    "StructToken",
    "type_text",
    # Extraction
    "ParseError",
    "extract",
    "extract_files",
    "extract_source",
    "parse_source",
    "filenames",
    # Generation
    "ScanGenerator",
    "generate",
    "TemplateEngine",
    "TemplateError",
    "TemplateNotFoundError",
    "RenderError",
    "SCANS_TEMPLATE",
    "SCANS_TEST_TEMPLATE",
    # Configuration
    "ScaneoConfig",
    "ConfigError",
    "load_config",
]
