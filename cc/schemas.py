from pydantic import BaseModel


class Reply(BaseModel):
    """Ответ POST /put: код при успехе или текст ошибки."""

    ok: bool
    msg: str
