from constants import PROPERTY_SEPARATOR


def parse_bool(value):
    if value is None:
        return False
    value = str(value).strip().lower()
    return value in {"1", "true", "yes", "y", "on", "t", "x"}


def parse_float(value):
    if value in (None, "", " "):
        return None
    try:
        return float(str(value).replace(",", "."))
    except (ValueError, TypeError):
        return None


def parse_int(value):
    if value in (None, "", " "):
        return None
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return None


def split_values(values):
    """Flatten repeated and comma separated query args into one list."""
    result = []
    for value in values or []:
        for part in str(value).split(","):
            part = part.strip()
            if part:
                result.append(part)
    return result


def property_token(name, value):
    if value is None:
        value = ""
    return f"{name}{PROPERTY_SEPARATOR}{value}"
