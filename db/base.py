# db/base.py
from sqlalchemy.orm import declarative_base

# every model in db/models imports this Base
Base = declarative_base()
