import logging
import secrets
import sqlite3
import string
from typing import Callable, List, NamedTuple, Optional

from .db import PathLike, get_connection, init_db
from .errors import ExhaustedError, StorageError, ValidationError

logger = logging.getLogger(__name__)

ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 8
MAX_ATTEMPTS = 10


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


class Mapping(NamedTuple):
    code: str
    url: str


class MappingStore:
    """Хранилище соответствий код -> URL в файле sqlite.

    Каждая операция открывает своё соединение, поэтому один экземпляр
    можно безопасно использовать из нескольких потоков. Уникальность кода
    обеспечивает первичный ключ таблицы: вставка занятого кода падает с
    IntegrityError, и мы пробуем следующий кандидат.
    """

    def __init__(
        self,
        path: PathLike,
        code_length: int = CODE_LENGTH,
        max_attempts: int = MAX_ATTEMPTS,
        code_generator: Optional[Callable[[int], str]] = None,
        timeout: float = 5.0,
    ) -> None:
        self.path = path
        self.code_length = code_length
        self.max_attempts = max_attempts
        self._generate = code_generator or generate_code
        self.timeout = timeout

    def init(self) -> None:
        try:
            init_db(self.path)
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"cannot initialize database: {exc}") from exc

    def put(self, url: str) -> str:
        """Сохраняет URL под новым уникальным кодом и возвращает код."""
        if not url:
            raise ValidationError("url is empty")
        try:
            with get_connection(self.path, self.timeout) as conn:
                for _ in range(self.max_attempts):
                    code = self._generate(self.code_length)
                    try:
                        conn.execute(
                            "INSERT INTO mappings (code, url) VALUES (?, ?)",
                            (code, url),
                        )
                    except sqlite3.IntegrityError:
                        logger.warning("Коллизия кода %s, пробуем другой", code)
                        continue
                    logger.info("Создана короткая ссылка: %s -> %s", code, url)
                    return code
        except sqlite3.Error as exc:
            raise StorageError(f"cannot store mapping: {exc}") from exc
        raise ExhaustedError(
            f"no free code found after {self.max_attempts} attempts"
        )

    def get(self, code: str) -> Optional[str]:
        """Возвращает оригинальный URL по коду или None."""
        try:
            with get_connection(self.path, self.timeout) as conn:
                row = conn.execute(
                    "SELECT url FROM mappings WHERE code = ?",
                    (code,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"cannot read mapping: {exc}") from exc
        if row:
            logger.info("Найден оригинальный URL для кода %s", code)
            return row[0]
        logger.info("Оригинальный URL для кода %s не найден", code)
        return None

    def list(self) -> List[Mapping]:
        """Все соответствия в порядке добавления."""
        try:
            with get_connection(self.path, self.timeout) as conn:
                rows = conn.execute(
                    "SELECT code, url FROM mappings ORDER BY rowid"
                ).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"cannot list mappings: {exc}") from exc
        return [Mapping(code, url) for code, url in rows]
