"""Path parameter converters.

A converter decides what a ``{name:type}`` segment matches. Captured
values always reach resolvers as raw strings; the converter only
narrows which paths match.
"""

# converter name -> regex for one captured segment
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "slug": r"[A-Za-z0-9_-]+",
    "path": r".+",
}


def converter_pattern(param_type: str) -> str:
    """Return the regex for *param_type*.

    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    return CONVERTERS[param_type]
