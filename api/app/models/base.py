"""Declarative base shared by all ORM models."""

from sqlalchemy.orm import declarative_base

# Base class for declarative models
Base = declarative_base()
