from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
import bcrypt

from core.config import logger, USERS_FILE, BCRYPT_ROUNDS
from core.errors import BadRequest, Conflict, InternalError, SiteBuilderError, Unauthorized, error_response
from models.user import UserRecord, normalize_email
from utils.record_store import RecordStore, get_store

router = APIRouter(prefix="/api", tags=["auth"])


def get_users_store() -> RecordStore:
    return get_store(USERS_FILE)


def _password_bytes(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes; newer releases reject longer input
    return password.encode("utf-8")[:72]


def _hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def _check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), (password_hash or "").encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


@router.post("/signup")
async def signup(payload: dict = Body(None), users: RecordStore = Depends(get_users_store)):
    """
    Register a user.
    Body: { "name"?: str, "email": str, "password": str }
    """
    try:
        data = payload or {}
        email = data.get("email")
        password = data.get("password")
        if not email or not password:
            raise BadRequest("Email and password are required")

        normalized = normalize_email(email)
        logger.info(f"[auth.signup] {normalized}")

        # Cheap pre-check so duplicates skip the bcrypt cost; append re-checks under the store lock
        if users.find(lambda u: u.get("email") == normalized):
            raise Conflict("User already exists")

        record = UserRecord(
            name=str(data.get("name") or ""),
            email=normalized,
            password_hash=_hash_password(str(password)),
        )
        try:
            users.append(record.to_storage(), unique_on="email")
        except Conflict:
            raise Conflict("User already exists")
        return JSONResponse({"message": "User created"}, status_code=201)
    except SiteBuilderError as ex:
        return error_response(ex)
    except Exception as ex:
        logger.exception(f"[auth.signup] failed: {ex}")
        return error_response(InternalError())


@router.post("/login")
async def login(payload: dict = Body(None), users: RecordStore = Depends(get_users_store)):
    """
    Check credentials. No session or token is issued.
    Body: { "email": str, "password": str }
    """
    try:
        data = payload or {}
        email = data.get("email")
        password = data.get("password")
        if not email or not password:
            raise BadRequest("Missing credentials")

        normalized = normalize_email(email)
        logger.info(f"[auth.login] {normalized}")

        # Same response for unknown user and wrong password
        user = users.find(lambda u: u.get("email") == normalized)
        if not user or not _check_password(str(password), user.get("passwordHash") or ""):
            raise Unauthorized("Invalid credentials")

        return {"message": "Login successful"}
    except SiteBuilderError as ex:
        return error_response(ex)
    except Exception as ex:
        logger.exception(f"[auth.login] failed: {ex}")
        return error_response(InternalError())
