from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from models.schemas import UserCreate, UserLogin, User, TokenResponse, RefreshRequest
from config.database import get_async_supabase_client
from config.settings import get_settings
from supabase._async.client import AsyncClient
from postgrest.exceptions import APIError
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from utils.errors import UnauthenticatedError, ConflictError
import logging
import uuid

router = APIRouter()
logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().api_prefix}/auth/login")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# -- HELPER FUNCTIONS --

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Empty or unrecognised stored hash
        logger.warning("Stored password hash could not be identified")
        return False

def _create_token(user_id: str, token_type: str, expires_delta: timedelta) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + expires_delta,
        # Makes each token unique, even for the same user in the same second
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)

def create_access_token(user_id: str) -> str:
    settings = get_settings()
    return _create_token(user_id, ACCESS_TOKEN_TYPE, timedelta(minutes=settings.access_token_expire_minutes))

def create_refresh_token(user_id: str) -> str:
    settings = get_settings()
    return _create_token(user_id, REFRESH_TOKEN_TYPE, timedelta(days=settings.refresh_token_expire_days))

def decode_token(token: str, expected_type: str) -> str:
    """Return the user id carried by a valid token of the expected type"""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.info(f"JWT Error: {str(e)}")
        raise UnauthenticatedError()

    user_id = payload.get("sub")
    if user_id is None or payload.get("type") != expected_type:
        raise UnauthenticatedError()
    return user_id

def _user_from_row(user_data: dict) -> User:
    return User(
        id=user_data["id"],
        name=user_data["name"],
        email=user_data["email"],
        timezone=user_data.get("timezone") or "UTC",
        created_at=user_data.get("created_at"),
    )

def _issue_tokens(user: User) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(str(user.id)),
        refresh_token=create_refresh_token(str(user.id)),
        expires_in=settings.access_token_expire_minutes * 60,
        user=user,
    )

async def _get_user_row(supabase: AsyncClient, user_id: str):
    result = await supabase.table("users").select("*").eq("id", user_id).execute()
    return result.data[0] if result.data else None

# -- ROUTES --

@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserCreate,
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Register a new user and return a fresh token pair"""
    email = data.email.lower()
    try:
        existing = await supabase.table("users").select("id").eq("email", email).execute()
        if existing.data:
            logger.warning("Register 409: email already registered")
            raise ConflictError("User already exists with this email")

        result = await supabase.table("users").insert({
            "name": data.name,
            "email": email,
            "password_hash": hash_password(data.password),
            "timezone": data.timezone,
        }).execute()
    except APIError as e:
        if e.code == "23505":
            raise ConflictError("User already exists with this email")
        logger.error(f"Error registering user: {e.message}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Registration failed")

    user = _user_from_row(result.data[0])
    logger.info(f"Registered user {user.id}")
    return _issue_tokens(user)

@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLogin,
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Login with email and password, returns a token pair"""
    result = await supabase.table("users").select("*").eq("email", data.email.lower()).execute()
    user_data = result.data[0] if result.data else None

    if not user_data or not verify_password(data.password, user_data.get("password_hash", "")):
        raise UnauthenticatedError("Invalid email or password")

    return _issue_tokens(_user_from_row(user_data))

@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    data: RefreshRequest,
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    """Exchange a refresh token for a new token pair"""
    user_id = decode_token(data.refresh_token, REFRESH_TOKEN_TYPE)

    user_data = await _get_user_row(supabase, user_id)
    if not user_data:
        raise UnauthenticatedError()

    return _issue_tokens(_user_from_row(user_data))

@router.post("/logout")
async def logout(
    token: str = Depends(oauth2_scheme),
    supabase: AsyncClient = Depends(get_async_supabase_client)
):
    user_id = decode_token(token, ACCESS_TOKEN_TYPE)

    existing_blacklist = await supabase.table("blacklisted_tokens").select("token").eq("token", token).execute()
    if not existing_blacklist.data:
        await supabase.table("blacklisted_tokens").insert({
            "token": token,
            "user_id": user_id,
            "blacklisted_at": datetime.now(timezone.utc).isoformat()
        }).execute()
    else:
        logger.info(f"Token already blacklisted for user {user_id}")

    return {"success": True, "message": "Successfully logged out"}

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    supabase: AsyncClient = Depends(get_async_supabase_client)
) -> User:
    """
    Resolve the caller from the bearer token.

    Missing, malformed, expired, refresh-type or blacklisted tokens are all rejected with 401
    before any protected handler runs.
    """
    user_id = decode_token(token, ACCESS_TOKEN_TYPE)

    blacklisted = await supabase.table("blacklisted_tokens").select("token").eq("token", token).execute()
    if blacklisted.data:
        raise UnauthenticatedError()

    user_data = await _get_user_row(supabase, user_id)
    if not user_data:
        raise UnauthenticatedError()

    try:
        return _user_from_row(user_data)
    except (ValueError, KeyError) as e:
        logger.error(f"Get current user error: {str(e)}")
        raise UnauthenticatedError()

@router.get("/me", response_model=User)
async def read_users_me(current_user: User = Depends(get_current_user)):
    return current_user
