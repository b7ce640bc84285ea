from tutorhub.db.base_class import Base  # noqa: F401

# import models so Base.metadata knows every table
from tutorhub.models import assignment, group, membership, submission, user  # noqa: F401
