import logging
import re
from werkzeug.security import check_password_hash, generate_password_hash
from database.user_dao import UserDAO
from models.user import User

logger = logging.getLogger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


class AuthService:
    def __init__(self, user_dao: UserDAO):
        self._users = user_dao

    def register(self, email: str, password: str, full_name: str = "") -> User:
        email = (email or "").strip()
        if not _EMAIL.match(email):
            raise ValueError("Informe um e-mail válido.")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(
                f"A senha deve ter pelo menos {MIN_PASSWORD_LENGTH} caracteres."
            )
        if self._users.get_by_email(email) is not None:
            raise ValueError("Já existe um usuário com este e-mail.")
        user = self._users.create(email, (full_name or "").strip(), generate_password_hash(password))
        logger.info("User registered: id=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._users.get_by_email((email or "").strip())
        if user is None or not user.password_hash or not check_password_hash(
            user.password_hash, password or ""
        ):
            logger.warning("Failed login attempt")
            raise PermissionError("E-mail ou senha inválidos.")
        return user

    def get_user(self, user_id: int) -> User | None:
        return self._users.get_by_id(user_id)
