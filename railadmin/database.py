from sqlalchemy import create_engine, event, BigInteger, Integer
from sqlalchemy.orm import sessionmaker, declarative_base

from railadmin.config import settings

# SQLite only autoincrements INTEGER primary keys
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

def enable_sqlite_foreign_keys(target_engine):
    """SQLite ignores FK constraints unless asked per connection"""
    @event.listens_for(target_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON")
        finally:
            cur.close()

connect_args = {"check_same_thread": False} if settings.is_sqlite else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    pool_pre_ping=True,
    connect_args=connect_args
)

if settings.is_sqlite:
    enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """Yield a database session for the duration of a request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db(bind=None):
    """Create all tables that do not exist yet"""
    from railadmin import models  # noqa: F401  registers the tables

    Base.metadata.create_all(bind=bind or engine)
