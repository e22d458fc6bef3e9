from mcp_forge.errors import GenerationError

from .python import PythonGenerator
from .typescript import TypeScriptGenerator
from .validator import validate_files

GENERATORS = {
    TypeScriptGenerator.language: TypeScriptGenerator,
    PythonGenerator.language: PythonGenerator,
}


def get_generator(language: str) -> TypeScriptGenerator | PythonGenerator:
    """Return a generator instance for ``language``."""
    try:
        return GENERATORS[language.lower()]()
    except KeyError:
        supported = ", ".join(sorted(GENERATORS))
        raise GenerationError(f"Unsupported language: {language} (expected one of: {supported})") from None


__all__ = [
    "GENERATORS",
    "PythonGenerator",
    "TypeScriptGenerator",
    "get_generator",
    "validate_files",
]
