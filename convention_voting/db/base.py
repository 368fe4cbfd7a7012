"""Database base class and model imports."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here for Alembic to detect them
from convention_voting.db.models.user import User  # noqa: F401, E402
from convention_voting.db.models.pool import Pool, UserPool  # noqa: F401, E402
from convention_voting.db.models.meeting import Meeting  # noqa: F401, E402
from convention_voting.db.models.motion import Motion  # noqa: F401, E402
from convention_voting.db.models.choice import Choice  # noqa: F401, E402
from convention_voting.db.models.vote import Vote, VoteChoice  # noqa: F401, E402
from convention_voting.db.models.activity_log import ActivityLog  # noqa: F401, E402
