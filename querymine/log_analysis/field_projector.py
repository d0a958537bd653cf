from querymine.utils import to_ejson

MAX_DEPTH = 3
MAX_VALUE_LENGTH = 50
TRUNCATED_LENGTH = 47
MORE_CONTENT = "..."
MAX_ARRAY_ITEMS = 3


def _is_user_field(key):
    # Operators ($eq, $in, $and, ...) and the internal `_id` are not user fields.
    return not key.startswith("$") and key != "_id"


def extract_field_names(doc):
    """Sorted, unique top-level user field names of `doc`. Non-objects have none."""
    if not isinstance(doc, dict):
        return []
    return sorted({key for key in doc if _is_user_field(key)})


def _float_to_str(value):
    """
    Shortest round-trip form with the exponent written as `1e16` / `1.5e-7`.

    Plain decimal notation is used for exponents -5 to 15, e.g. `0.00001`.
    """
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    exponent = int(exponent)
    if exponent == -5:
        sign = "-" if mantissa.startswith("-") else ""
        return f"{sign}0.0000{mantissa.lstrip('-').replace('.', '')}"
    return f"{mantissa}e{exponent}"


def _scalar_to_str(value):
    # bool must be tested before int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _float_to_str(value) if isinstance(value, float) else str(int(value))
    if isinstance(value, str):
        if len(value) <= MAX_VALUE_LENGTH:
            return value
        return value[:TRUNCATED_LENGTH] + MORE_CONTENT
    return None


def _array_to_str(values):
    if len(values) > MAX_ARRAY_ITEMS:
        return f"[{len(values)} items]"
    items = []
    for v in values:
        if isinstance(v, str):
            items.append(v)
        elif isinstance(v, float):
            items.append(_float_to_str(v))
        else:
            items.append(to_ejson(v, indent=None, separators=(",", ":")))
    return f"[{','.join(items)}]"


def extract_field_values(doc, prefix="", depth=0, max_depth=MAX_DEPTH):
    """
    Flatten `doc` into a mapping of dotted field path to a sampled string value.

    Args:
        doc: The decoded document, usually a query filter.
        prefix (str): Dotted path of `doc` itself, empty for the root.
        depth (int): Nesting level of `doc`.
        max_depth (int): Levels at or beyond this depth contribute nothing.

    Returns:
        dict: e.g. `{"status": "open", "customer.tier": "gold", "tags": "[a,b]"}`.
    """
    values = {}
    if depth >= max_depth or not isinstance(doc, dict):
        return values
    for key, value in doc.items():
        if not _is_user_field(key):
            continue
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            values.update(extract_field_values(value, path, depth + 1, max_depth))
        elif isinstance(value, list):
            values[path] = _array_to_str(value)
        else:
            sample = _scalar_to_str(value)
            # null and other BSON types (dates, ObjectIds, ...) are not sampled
            if sample is not None:
                values[path] = sample
    return values
