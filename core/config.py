import os
import logging
from dotenv import load_dotenv

# Load .env from project root
try:
    load_dotenv(dotenv_path=os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".env")))
except Exception:
    try:
        load_dotenv()
    except Exception:
        pass

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Flat-file storage
DATA_DIR = os.path.abspath((os.getenv("DATA_DIR", "") or "").strip() or os.path.join(PROJECT_ROOT, "data"))
USERS_FILE = (os.getenv("USERS_FILE", "") or "").strip() or os.path.join(DATA_DIR, "users.json")
SITE_CONFIGS_FILE = (os.getenv("SITE_CONFIGS_FILE", "") or "").strip() or os.path.join(DATA_DIR, "site-configs.json")

# JSON Schema consumed by the validation gate (re-read when the file changes)
SCHEMAS_DIR = os.path.join(PROJECT_ROOT, "schemas")
SITE_SCHEMA_FILE = (os.getenv("SITE_SCHEMA_FILE", "") or "").strip() or os.path.join(SCHEMAS_DIR, "site-config.schema.json")
SITE_EXAMPLE_FILES = [
    os.path.join(SCHEMAS_DIR, "site-config.example.json"),
    os.path.join(SCHEMAS_DIR, "full-site-data.example.json"),
]

# Password hashing work factor (bcrypt cost)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Canonical document labels
DOCUMENT_VERSION = "1.0"
DOCUMENT_SOURCE = os.getenv("DOCUMENT_SOURCE", "TapToBuild-Frontend").strip()
DOCUMENT_ENV = os.getenv("DOCUMENT_ENV", "web").strip()

# Development posture: every origin is allowed unless ALLOWED_ORIGINS narrows it
ALLOWED_ORIGINS = [o.strip() for o in (os.getenv("ALLOWED_ORIGINS", "*") or "*").split(",") if o.strip()]

PORT = int(os.getenv("PORT", "3000"))

# Logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
logger = logging.getLogger("taptobuild")
