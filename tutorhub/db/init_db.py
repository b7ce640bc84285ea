from tutorhub.db.base import Base
from tutorhub.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
