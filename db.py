from contextlib import contextmanager
from pathlib import Path
import logging

from sqlalchemy import Engine, text, create_engine
from sqlalchemy.orm import sessionmaker, Session

from models.base import Base
"""
Imports of these models are needed to correctly create tables in the database.
For more information see https://stackoverflow.com/questions/7478403/sqlalchemy-classes-across-files
"""
from models.storage_entry import StorageEntry

logger = logging.getLogger(__name__)

# SQL echo stays off; statements would leak session values into the log
sql_echo = False


def create_storage_engine(db_path: str | Path) -> Engine:
    """
    Create the SQLite engine backing persistent session storage.

    A bare file name is placed under data/ (created on demand); any path with
    a directory component is used as-is.
    """
    db_path = Path(db_path)
    if db_path.parent == Path("."):
        data_folder = Path("data")
        if data_folder.exists() is False:
            data_folder.mkdir()
        db_path = data_folder / db_path
    url = f"sqlite:///{db_path}"
    logger.debug(f"[DB] Session storage at {db_path}")
    return create_engine(url, echo=sql_echo, connect_args={'check_same_thread': False})


def create_session_maker(engine: Engine) -> sessionmaker:
    return sessionmaker(engine, expire_on_commit=False)


@contextmanager
def get_db_session(session_maker: sessionmaker) -> Session:
    session = session_maker()
    try:
        yield session
    finally:
        session.close()


def check_all_tables_exist(session: Session) -> bool:
    for table in Base.metadata.tables.values():
        sql_query = f"SELECT name FROM sqlite_master WHERE type='table' AND name='{table.name}';"
        result = session.execute(text(sql_query))
        if result.scalar() is None:
            return False
    return True


def create_db_and_tables(engine: Engine, session_maker: sessionmaker) -> None:
    with get_db_session(session_maker) as session:
        if check_all_tables_exist(session):
            return
    Base.metadata.create_all(bind=engine)
    logger.info(f"[DB] Created tables: {', '.join(Base.metadata.tables.keys())}")
