"""Tool and server naming.

Tool names match ``^[a-z0-9_-]{1,64}$``:
  - operationId present -> sanitized operationId
      listPets                  -> listpets
      get-user.by.id            -> get-user_by_id
  - otherwise verb + path segments, path params rendered as by_<name>
      GET    /pets              -> get_pets
      GET    /pets/{petId}      -> get_pets_by_petid
      POST   /pets              -> create_pets
      HEAD   /health            -> check_health
"""

import keyword
import re

MAX_TOOL_NAME_LENGTH = 64
MAX_SERVER_NAME_LENGTH = 50
MAX_PREFIX_LENGTH = 20

_METHOD_VERBS: dict[str, str] = {
    "get": "get",
    "post": "create",
    "put": "update",
    "patch": "patch",
    "delete": "delete",
    "head": "check",
    "options": "options",
}

_HUMAN_VERBS: dict[str, str] = {
    "get": "Retrieve",
    "post": "Create",
    "put": "Update",
    "patch": "Partially update",
    "delete": "Delete",
    "head": "Check",
    "options": "Get options for",
}


def method_to_verb(method: str) -> str:
    return _METHOD_VERBS.get(method.lower(), method.lower())


def method_to_human_verb(method: str) -> str:
    return _HUMAN_VERBS.get(method.lower(), method.upper())


def sanitize_tool_name(name: str) -> str:
    """Sanitize an arbitrary string into a valid tool name (may be empty)."""
    name = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
    name = re.sub(r"_+", "_", name)
    return name.strip("_").lower()[:MAX_TOOL_NAME_LENGTH]


def build_tool_name(method: str, path: str, operation_id: str | None = None) -> str:
    """Build a tool name, preferring the operationId."""
    if operation_id:
        name = sanitize_tool_name(operation_id)
        if name:
            return name

    parts = []
    for segment in path.split("/"):
        if not segment:
            continue
        if segment.startswith("{") and segment.endswith("}"):
            parts.append(f"by_{segment[1:-1]}")
        else:
            parts.append(segment)

    return sanitize_tool_name("_".join([method_to_verb(method), *parts])) or method_to_verb(method)


def deduplicate_tool_names(names: list[str]) -> list[str]:
    """Make names unique by appending _2, _3, ... to later duplicates."""
    seen: set[str] = set(names)
    used: set[str] = set()
    result = []
    for name in names:
        if name not in used:
            used.add(name)
            result.append(name)
            continue
        n = 2
        while True:
            suffix = f"_{n}"
            candidate = name[: MAX_TOOL_NAME_LENGTH - len(suffix)] + suffix
            if candidate not in used and candidate not in seen:
                break
            n += 1
        used.add(candidate)
        result.append(candidate)
    return result


def sanitize_server_name(title: str, default: str = "api-server") -> str:
    """Slugify a title into a server name: lowercase words joined by '-'."""
    name = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return name[:MAX_SERVER_NAME_LENGTH] or default


def sanitize_prefix(name: str, max_length: int = MAX_PREFIX_LENGTH) -> str:
    """Lowercase name with non-alphanumeric runs collapsed to '_'."""
    prefix = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return prefix[:max_length] or "api"


def env_var_segment(name: str) -> str:
    """Uppercase a name for use inside an environment variable name."""
    return re.sub(r"[^A-Z0-9]", "_", name.upper())


def python_identifier(name: str) -> str:
    """Turn a tool or parameter name into a valid Python identifier."""
    ident = re.sub(r"[^a-zA-Z0-9_]", "_", name)
    if not ident or ident[0].isdigit():
        ident = f"p_{ident}"
    if keyword.iskeyword(ident) or keyword.issoftkeyword(ident):
        ident += "_"
    return ident
