import os

# --- DATABASE ---
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./dues.db")

# --- TOKENS (issued by the identity provider, verified here) ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-this-secret-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # 24 hours

# --- DEPARTMENTS WITH SPECIAL POWERS ---
ACCOUNTS_DEPARTMENT = os.getenv("ACCOUNTS_DEPARTMENT", "ACCOUNTS")
ACADEMICS_DEPARTMENT = os.getenv("ACADEMICS_DEPARTMENT", "ACADEMICS")


def _parse_person_type_defaults(raw: str) -> dict:
    """Parse "HR:Faculty,HOSTEL:Student" into {"HR": "Faculty", ...}"""
    defaults = {}
    for pair in raw.split(","):
        if ":" not in pair:
            continue
        department, person_type = pair.split(":", 1)
        if department.strip() and person_type.strip():
            defaults[department.strip().upper()] = person_type.strip()
    return defaults


# Bulk uploads from these departments imply a person type when a row omits it
DEFAULT_PERSON_TYPE_BY_DEPARTMENT = _parse_person_type_defaults(
    os.getenv("DEFAULT_PERSON_TYPE_BY_DEPARTMENT", "HR:Faculty")
)

# --- CORS ---
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_FILE_PREFIX = os.getenv("LOG_FILE_PREFIX", "dues_errors")
LOG_SQL = os.getenv("LOG_SQL", "false").lower() in ("1", "true", "yes")  # echo SQL at INFO
