"""Query-parameter parsing that reports bad input as field errors."""

from .errors import ValidationFailedError

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no")


def int_param(request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationFailedError({name: "Must be an integer."})


def bool_param(request, name: str, required: bool = False) -> bool | None:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        if required:
            raise ValidationFailedError({name: "Must be true or false."})
        return None
    lowered = raw.lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValidationFailedError({name: "Must be true or false."})


def list_param(request, name: str) -> list[str]:
    """Accept ``?name=a&name=b`` as well as ``?name=a,b``."""
    values: list[str] = []
    for raw in request.query_params.getlist(name):
        values.extend(part.strip() for part in raw.split(",") if part.strip())
    return values


__all__ = ["int_param", "bool_param", "list_param"]
