"""Map OpenAPI security requirements onto environment-variable backed auth."""

from mcp_forge.parser.base import SecurityRequirement, SecurityScheme

from .models import ToolAuth
from .naming import env_var_segment


def auth_env_var(scheme: SecurityScheme) -> str:
    """Derive the environment variable holding credentials for a scheme."""
    if scheme.type == "http":
        if scheme.scheme == "bearer":
            return "API_BEARER_TOKEN"
        if scheme.scheme == "basic":
            return "API_BASIC_AUTH"
        return "API_HTTP_AUTH"
    if scheme.type == "apiKey":
        return f"API_KEY_{env_var_segment(scheme.param_name or scheme.name)}"
    if scheme.type == "oauth2":
        return "API_OAUTH_TOKEN"
    return f"API_AUTH_{env_var_segment(scheme.name)}"


def describe_auth_env_var(scheme: SecurityScheme) -> str:
    if scheme.type == "http":
        if scheme.scheme == "bearer":
            suffix = f" ({scheme.bearer_format})" if scheme.bearer_format else ""
            return f"Bearer token for API authentication{suffix}"
        return f"HTTP {scheme.scheme or 'auth'} credentials"
    if scheme.type == "apiKey":
        return f'API key (sent as {scheme.location or "header"} parameter "{scheme.param_name or scheme.name}")'
    if scheme.type == "oauth2":
        return "OAuth2 access token"
    return f"Authentication for {scheme.name}"


def map_auth(
    requirements: list[SecurityRequirement], schemes: list[SecurityScheme]
) -> list[ToolAuth]:
    """Return one ToolAuth per resolvable scheme, in requirement order."""
    by_name = {s.name: s for s in schemes}
    auth: list[ToolAuth] = []
    seen: set[str] = set()
    for req in requirements:
        scheme = by_name.get(req.scheme_name)
        if scheme is None or scheme.name in seen:
            continue
        seen.add(scheme.name)
        auth.append(ToolAuth(scheme=scheme.model_copy(deep=True), env_var=auth_env_var(scheme)))
    return auth
