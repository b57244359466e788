"""Authentication service for user registration and login."""
from sqlalchemy.ext.asyncio import AsyncSession
from eventhub.schemas import UserCreate, LoginRequest
from eventhub.db.repositories import create_user as db_create_user, get_user_by_email as db_get_user_by_email
from eventhub.core.security import create_access_token, verify_password
from eventhub.core.exceptions import AuthenticationError, ValidationError
from eventhub.core.logging import logger


class AuthService:
    """
    Service layer for authentication operations.

    Handles user registration and login; both hand back an access token.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def register(self, payload: UserCreate) -> dict:
        """
        Register a new user.

        Args:
            payload: User registration data containing email, password, and name

        Returns:
            Dictionary with token and the created user

        Raises:
            ValidationError: If the email is already registered
        """
        existing = await db_get_user_by_email(self.session, payload.email)
        if existing:
            raise ValidationError("User already exists")

        user = await db_create_user(self.session, payload)
        logger.info(f"Registered user {user.id}")
        return {"token": self._issue_token(user.id), "user": user}

    async def login(self, form_data: LoginRequest) -> dict:
        """
        Authenticate user and generate an access token.

        Raises:
            AuthenticationError: If credentials are invalid
        """
        user = await db_get_user_by_email(self.session, form_data.email)
        if not user or not verify_password(form_data.password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")

        return {"token": self._issue_token(user.id), "user": user}

    @staticmethod
    def _issue_token(user_id: str) -> str:
        return create_access_token({"sub": str(user_id)})
