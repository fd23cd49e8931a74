# app/infrastructure/db/session.py
from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker

from app.config.config import settings
from app.infrastructure.db.models import Base


def _lock_sqlite_on_begin(engine: Engine) -> None:
    """
    pysqlite сам шлёт BEGIN только перед первым DML, так что SELECT-ы снапшота
    идут вне транзакции. Отключаем это и открываем транзакцию сами через
    BEGIN IMMEDIATE: блокировка на запись берётся на первом же чтении,
    параллельный писатель ждёт до коммита/отката.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_conn, _record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str | None = None, *, create_schema: bool = True) -> Engine:
    """
    Движок с уровнем изоляции из настроек: снапшот и запись решений одной сессии
    не должны пересекаться с параллельным прогоном или внешней записью.
    На SQLite транзакция открывается BEGIN IMMEDIATE (SELECT ... FOR UPDATE там не работает).
    """
    if url is None and settings.db_url is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    url = url or settings.database_url

    engine = create_engine(
        url,
        echo=settings.db_echo,
        isolation_level=settings.db_isolation_level,
        future=True,
    )
    if make_url(url).get_backend_name() == "sqlite":
        _lock_sqlite_on_begin(engine)

    if create_schema:
        Base.metadata.create_all(engine)  # just in case
    return engine


def create_session_factory(url: str | None = None) -> sessionmaker:
    return sessionmaker(bind=create_db_engine(url), future=True)
