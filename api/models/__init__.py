from models.profile import Profile
from models.application import Application

__all__ = ["Profile", "Application"]
