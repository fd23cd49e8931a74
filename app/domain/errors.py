# app/domain/errors.py
from __future__ import annotations


class FilterError(Exception):
    """Базовая ошибка прогона виртуального фильтра. Любая из них отменяет прогон целиком."""


class SessionNotFoundError(FilterError):
    def __init__(self, session_id: str):
        super().__init__(f"Admission session {session_id} not found")
        self.session_id = session_id


class ComputationError(FilterError):
    """Нарушен внутренний инвариант распределения; решения не записываются."""


class FilterTimeoutError(FilterError):
    def __init__(self, session_id: str, elapsed: float, limit: float):
        super().__init__(
            f"Filter run for session {session_id} took {elapsed:.3f}s (limit {limit:.3f}s)"
        )
        self.session_id = session_id
        self.elapsed = elapsed
        self.limit = limit


class PersistenceError(FilterError):
    """Сбой записи/коммита. Повторный запуск безопасен."""
