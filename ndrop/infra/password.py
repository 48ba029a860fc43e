"""Password hashing for admin accounts.

All modules requiring password hashing import from here so parameters stay
consistent across the application.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Argon2id: 64 MB memory, 3 iterations, 4 lanes
PASSWORD_HASHER = PasswordHasher(
	time_cost=3,
	memory_cost=65536,
	parallelism=4,
	hash_len=32,
	salt_len=16,
)


def hash_password(password: str) -> str:
	return PASSWORD_HASHER.hash(password)


def verify_password(hash: str, password: str) -> bool:
	"""Return True if the password matches the stored hash."""
	try:
		return PASSWORD_HASHER.verify(hash, password)
	except (VerificationError, InvalidHashError):
		return False


def check_needs_rehash(hash: str) -> bool:
	return PASSWORD_HASHER.check_needs_rehash(hash)
