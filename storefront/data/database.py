# storefront/data/database.py
from sqlalchemy import MetaData, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from storefront.utils.settings import DATABASE_URL, DB_LOCK_TIMEOUT_SECONDS

# najwiekszy klucz INTEGER, wieksze liczby z URL nie moga trafic do zapytania
MAX_ID = 2**31 - 1

_NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=_NAMING_CONVENTION)


def make_engine(url: str):
    """
    Engine dla podanego URL.
    SQLite nie ma blokad wierszy, wiec dostaje busy timeout i polaczenia
    wspoldzielone miedzy watkami (locking optymistyczny robi reszte).
    """
    if url.startswith("sqlite"):
        return create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": DB_LOCK_TIMEOUT_SECONDS},
        )
    return create_engine(url, pool_pre_ping=True)


def make_session_factory(bind):
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def begin_write(db):
    """
    Nowa transakcja zapisu na sesji. Wczesniejsze odczyty (autobegin)
    sa najpierw zamykane, inaczej Session.begin() rzuca InvalidRequestError.
    """
    if db.in_transaction():
        db.commit()
    return db.begin()
