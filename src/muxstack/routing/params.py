"""Path parameter converters.

Used by pattern segments like ``{id:int}``. Captured values stay strings
on the request; ``convert_param`` produces the typed value on demand.
"""

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"-?\d+", int),
    "float": (r"-?\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

# Converter that swallows the rest of the path; only valid as the last segment
CATCH_ALL = "path"


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path segment to the converter's Python type.

    Raises ``KeyError`` for an unknown converter, ``ValueError`` when the
    string doesn't parse.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
