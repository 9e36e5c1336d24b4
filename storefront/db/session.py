from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from typing import Optional


class Base(DeclarativeBase): pass


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    cur = dbapi_conn.cursor()
    cur.execute('PRAGMA foreign_keys=ON')
    cur.close()


def make_engine(url: str, echo: bool = False, statement_timeout_ms: Optional[int] = None) -> Engine:
    if url.startswith('sqlite'):
        kwargs = {'connect_args': {'check_same_thread': False}}
        # an in-memory database lives only as long as its one connection
        if url in ('sqlite://', 'sqlite:///:memory:'):
            kwargs['poolclass'] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
        return engine
    connect_args = {}
    if statement_timeout_ms and url.startswith('postgresql'):
        connect_args['options'] = f'-c statement_timeout={int(statement_timeout_ms)}'
    return create_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
