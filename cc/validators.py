from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

MAX_URL_LENGTH = 2048

_http_url = TypeAdapter(HttpUrl)


def _reason(error: dict, url: str) -> str:
    if error["type"] == "url_scheme":
        return f"unsupported url scheme: {url.partition(':')[0]}"
    detail = error.get("ctx", {}).get("error", error["msg"])
    if detail == "relative URL without a base":
        return "url missing scheme"
    if detail == "empty host":
        return "url missing host"
    return f"invalid url: {detail}"


def parse_url(raw: bytes) -> str:
    """Проверяет тело запроса POST /put и возвращает URL для сохранения.

    Синтаксис проверяет pydantic HttpUrl, но сохраняется исходная строка:
    нормализованное значение pydantic отбрасывается. Допускаются только
    печатные ASCII-символы, чтобы URL без изменений попал в Location.
    """
    try:
        url = raw.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise ValidationError(f"invalid utf-8 in url: {exc}") from None

    if not url:
        raise ValidationError("url is empty")
    if len(url) > MAX_URL_LENGTH:
        raise ValidationError(f"url is too long (max {MAX_URL_LENGTH} characters)")
    if not url.isascii():
        raise ValidationError("invalid url: contains non-ascii characters")
    if any(not ch.isprintable() or ch.isspace() for ch in url):
        raise ValidationError("invalid url: contains whitespace or control characters")

    try:
        _http_url.validate_python(url)
    except PydanticValidationError as exc:
        raise ValidationError(_reason(exc.errors()[0], url)) from None
    return url
