from sqlmodel import Session, SQLModel, create_engine

from certivo.core.config import settings


engine = create_engine(settings.database_url)


def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    """Create all tables. Production schemas are managed by Alembic."""
    SQLModel.metadata.create_all(engine)
