from client.views.admin import AdminView
from client.views.applicant import ApplicantView
from client.views.auth import AuthView

__all__ = ["AdminView", "ApplicantView", "AuthView"]
