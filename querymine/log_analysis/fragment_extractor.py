"""Find brace delimited fragments in free text log fields."""


def extract_fragments(text):
    """
    Yield every top-level balanced `{...}` substring of `text`, left to right.

    Braces are matched literally, quoting is not understood. A fragment still
    open when the text ends is dropped, and a stray `}` at depth 0 is ignored.

    Example:
        >>> list(extract_fragments('slow: {"a": {"b": 1}} then {"c": 2} {'))
        ['{"a": {"b": 1}}', '{"c": 2}']
    """
    text = text.strip()
    depth = 0
    start = None
    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                yield text[start : i + 1]
                start = None
