from pydantic import AnyUrl, TypeAdapter, ValidationError

_url_adapter = TypeAdapter(AnyUrl)

def is_valid_url(value: str) -> bool:
    """True when `value` parses as an absolute URL with a scheme and host."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        url = _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return bool(url.host)
