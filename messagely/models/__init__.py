from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models to register tables
from .users import User  # noqa: F401,E402
from .messages import Message  # noqa: F401,E402
