import functools
import logging
from typing import Any, Callable

def best_effort(default: Any = None, message: str = "Операция не удалась"):
    """
    Для необязательных async операций (удаленная синхронизация):
    любое Exception логируется как warning, вызывающий получает default.
    Отмена задачи (CancelledError) пробрасывается дальше.
    """
    def decorator(func: Callable):
        log = logging.getLogger(func.__module__)

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                log.warning(f"{message}: {e}")
                return default() if callable(default) else default
        return wrapper
    return decorator
