"""Password hashing and verification."""

from passlib.context import CryptContext
from app.logging_config import logger

# Fixed Argon2id cost. Changing these only affects newly created hashes;
# existing hashes carry their own parameters.
PASSWORD_HASH_TIME_COST = 2
PASSWORD_HASH_MEMORY_COST = 65536  # 64 MB
PASSWORD_HASH_PARALLELISM = 4

# Argon2id password hashing context
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=PASSWORD_HASH_TIME_COST,
    argon2__memory_cost=PASSWORD_HASH_MEMORY_COST,
    argon2__parallelism=PASSWORD_HASH_PARALLELISM,
    argon2__type="ID",  # Use Argon2id variant
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: Plain text password

    Returns:
        Hashed password string (salt and parameters embedded)
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        # Malformed or unknown hash format
        logger.warning("Password verification failed", error=str(e))
        return False


def dummy_verify() -> None:
    """Spend the same effort as a real verification when no account exists."""
    pwd_context.dummy_verify()
