from tutorhub.core.config import FILES_BASE_URL, UPLOAD_DIR
from tutorhub.db.session import SessionLocal
from tutorhub.services.notifications import LoggingNotifier, Notifier
from tutorhub.services.storage import FileStorage, LocalFileStorage


# every request that needs DB will get a fresh session, and it will always close.
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_notifier() -> Notifier:
    return LoggingNotifier()


def get_file_storage() -> FileStorage:
    return LocalFileStorage(UPLOAD_DIR, FILES_BASE_URL)
