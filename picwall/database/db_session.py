from loguru import logger as logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from picwall.config import DATABASE_URL
from picwall.database.dbbase import Base


class Database:
    """ This Class contains all the methods related to the Database utitlities."""

    def __init__(self, url: str = DATABASE_URL):
        self.url = url
        engine_kwargs = {"echo": False, "pool_pre_ping": True}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url == "sqlite://":
                # a single connection keeps the in-memory database alive
                engine_kwargs["poolclass"] = StaticPool

        try:
            self.engine = create_engine(url, **engine_kwargs)
        except Exception as e:
            logging.error(f'Error while connecting to the database: {e}')
            raise

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_tables(self):
        """Create every table registered on the shared Base."""
        # make sure all models are registered before create_all
        import picwall.routers.users.models  # noqa: F401
        import picwall.routers.posts.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logging.info("Database tables ensured on {}", self.engine.url.render_as_string(hide_password=True))

    def drop_tables(self):
        Base.metadata.drop_all(bind=self.engine)

    def get_session(self):
        """ This function returns a new session; the caller closes it."""
        return self.SessionLocal()
