"""English and Albanian string tables with a persisted language preference."""

import logging
from pathlib import Path

from client.config import settings

logger = logging.getLogger(__name__)

LANGUAGES = ("en", "al")

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "tre.delivery": "TRE Delivery",
        "login": "Login",
        "signup": "Sign Up",
        "logout": "Logout",
        "dashboard": "Dashboard",
        "apply.now": "Apply Now",
        # Application form
        "application.form": "Courier Application Form",
        "personal.info": "Personal Information",
        "first.name": "First Name",
        "last.name": "Last Name",
        "email": "Email",
        "phone.number": "Phone Number",
        "age": "Age",
        "gender": "Gender",
        "vehicle.details": "Vehicle Details",
        "vehicle.type": "Vehicle Type",
        "working.hours": "Preferred Working Hours",
        "submit.application": "Submit Application",
        "update.application": "Update Application",
        # Gender options
        "male": "Male",
        "female": "Female",
        "other": "Other",
        "prefer_not_to_say": "Prefer not to say",
        # Vehicle types
        "bicycle": "Bicycle",
        "motorcycle": "Motorcycle",
        "car": "Car",
        "scooter": "Scooter",
        "e-bike": "E-bike",
        # Status
        "pending": "Pending",
        "approved": "Approved",
        "rejected": "Rejected",
        "application.status": "Application Status",
        "applied.on": "Applied on",
        "last.updated": "Last updated",
        # Admin
        "admin.dashboard": "Admin Dashboard",
        "all.applications": "All Applications",
        "approve": "Approve",
        "reject": "Reject",
        "admin.notes": "Admin Notes",
        "applicant.info": "Applicant Information",
        # Messages
        "application.submitted": "Application submitted successfully!",
        "application.updated": "Application updated successfully!",
        "application.decision.saved": "Application decision saved.",
        "application.exists": "You have already submitted an application",
        "application.approved": "Congratulations! Your application has been approved.",
        "application.rejected": "Unfortunately, your application has been rejected.",
        "application.edit.conflict": "Your application was reviewed while you were editing it. Your unsaved changes were discarded.",
        "form.required.fields": "Please fill in all required fields",
        "form.age.range": "Age must be a whole number between 18 and 70",
        "login.required": "Please login to access your dashboard",
        "admin.access.required": "Admin access required",
        "welcome.back": "Welcome back!",
        "account.created": "Account created successfully!",
        # Common
        "loading": "Loading...",
        "edit": "Edit",
        "cancel": "Cancel",
        "error": "Error",
        "success": "Success",
    },
    "al": {
        "tre.delivery": "TRE Delivery",
        "login": "Hyrje",
        "signup": "Regjistrohu",
        "logout": "Dalje",
        "dashboard": "Paneli",
        "apply.now": "Apliko Tani",
        "application.form": "Formulari i Aplikimit për Kurier",
        "personal.info": "Informacione Personale",
        "first.name": "Emri",
        "last.name": "Mbiemri",
        "email": "Email",
        "phone.number": "Numri i Telefonit",
        "age": "Mosha",
        "gender": "Gjinia",
        "vehicle.details": "Detajet e Mjetit",
        "vehicle.type": "Lloji i Mjetit",
        "working.hours": "Orët e Preferuara të Punës",
        "submit.application": "Dërgo Aplikimin",
        "update.application": "Përditëso Aplikimin",
        "male": "Mashkull",
        "female": "Femër",
        "other": "Tjetër",
        "prefer_not_to_say": "Prefero të mos them",
        "bicycle": "Biçikletë",
        "motorcycle": "Motocikletë",
        "car": "Makinë",
        "scooter": "Skutër",
        "e-bike": "Biçikletë Elektrike",
        "pending": "Në Pritje",
        "approved": "Aprovuar",
        "rejected": "Refuzuar",
        "application.status": "Statusi i Aplikimit",
        "applied.on": "Aplikuar më",
        "last.updated": "Përditësuar së fundmi",
        "admin.dashboard": "Paneli i Administratorit",
        "all.applications": "Të Gjitha Aplikimet",
        "approve": "Aprovo",
        "reject": "Refuzo",
        "admin.notes": "Shënime Administratori",
        "applicant.info": "Informacione Aplikuesi",
        "application.submitted": "Aplikimi u dërgua me sukses!",
        "application.updated": "Aplikimi u përditësua me sukses!",
        "application.decision.saved": "Vendimi për aplikimin u ruajt.",
        "application.exists": "Ju keni dërguar tashmë një aplikim",
        "application.approved": "Urime! Aplikimi juaj është aprovuar.",
        "application.rejected": "Fatkeqësisht, aplikimi juaj është refuzuar.",
        "application.edit.conflict": "Aplikimi juaj u shqyrtua ndërsa e ndryshonit. Ndryshimet e paruajtura u hodhën poshtë.",
        "form.required.fields": "Ju lutem plotësoni të gjitha fushat e detyrueshme",
        "form.age.range": "Mosha duhet të jetë numër i plotë nga 18 deri në 70",
        "login.required": "Ju lutem hyni për të hyrë në panelin tuaj",
        "admin.access.required": "Kërkohet qasje administratori",
        "welcome.back": "Mirë se u kthyet!",
        "account.created": "Llogaria u krijua me sukses!",
        "loading": "Duke ngarkuar...",
        "edit": "Ndrysho",
        "cancel": "Anulo",
        "error": "Gabim",
        "success": "Sukses",
    },
}


class Translator:
    """``translate(key)`` for the selected language, falling back to the key."""

    def __init__(self, language: str = settings.DEFAULT_LANGUAGE):
        if language not in LANGUAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.language = language

    def translate(self, key: str) -> str:
        return TRANSLATIONS[self.language].get(key, key)

    __call__ = translate


def load_language(path: Path = settings.LANGUAGE_FILE) -> str:
    """Persisted language preference, or the default when unset or invalid."""
    try:
        saved = Path(path).read_text().strip()
    except FileNotFoundError:
        return settings.DEFAULT_LANGUAGE
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring unreadable language file %s: %s", path, e)
        return settings.DEFAULT_LANGUAGE
    if saved not in LANGUAGES:
        logger.warning("Ignoring unknown saved language %r", saved)
        return settings.DEFAULT_LANGUAGE
    return saved


def save_language(language: str, path: Path = settings.LANGUAGE_FILE) -> None:
    if language not in LANGUAGES:
        raise ValueError(f"Unsupported language: {language}")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(language)
