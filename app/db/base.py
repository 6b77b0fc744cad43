"""
Declarative base shared by the local store models
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
