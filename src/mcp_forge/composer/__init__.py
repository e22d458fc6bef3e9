from .composer import MAX_APIS, APISource, ComposeError, ComposeResult, compose_apis

__all__ = ["MAX_APIS", "APISource", "ComposeError", "ComposeResult", "compose_apis"]
