import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def init_db(path: PathLike) -> None:
    """Инициализация схемы БД (если ещё не создана)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as conn:
        # WAL: читатели не блокируются писателем
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS mappings (
                code TEXT PRIMARY KEY NOT NULL,
                url TEXT NOT NULL
            );
            """
        )
        conn.commit()
    logger.info("База данных инициализирована по пути %s", path)


@contextmanager
def get_connection(path: PathLike, timeout: float = 5.0) -> Iterator[sqlite3.Connection]:
    """Контекстный менеджер для работы с соединением sqlite."""
    conn = sqlite3.connect(path, timeout=timeout)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        logger.exception("Ошибка при работе с БД, выполнен rollback")
        raise
    finally:
        conn.close()
