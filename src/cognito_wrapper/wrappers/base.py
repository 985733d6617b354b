"""
Abstract base class for identity-provider wrappers.

The ordered sequence only talks to this interface, so a live Cognito
client and the in-memory fake are interchangeable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Exception raised when a remote identity-provider call fails."""

    def __init__(self, code: str, message: str, operation: Optional[str] = None):
        self.code = code
        self.message = message
        self.operation = operation
        prefix = f"{operation}: " if operation else ""
        super().__init__(f"{prefix}{code}: {message}")


class IdentityProviderWrapper(ABC):
    """Async operations against a managed user pool.

    Each method is a single pass-through call to the identity provider.
    """

    @abstractmethod
    async def sign_up(self, client_id: str, user_name: str, password: str, email: str) -> bool:
        """Register a new user with an email attribute.

        Returns:
            True if the provider acknowledged the sign-up
        """
        pass

    @abstractmethod
    async def list_user_pools(self) -> List[Dict[str, Any]]:
        """List all user pools visible to the caller."""
        pass

    @abstractmethod
    async def get_admin_user(self, user_name: str, pool_id: str) -> str:
        """Return the user's status (e.g. 'CONFIRMED', 'UNCONFIRMED')."""
        pass

    @abstractmethod
    async def resend_confirmation_code(self, client_id: str, user_name: str) -> Dict[str, Any]:
        """Send a new confirmation code.

        Returns:
            Code delivery details with keys Destination, DeliveryMedium
            and AttributeName
        """
        pass

    @abstractmethod
    async def confirm_signup(self, client_id: str, code: Optional[str], user_name: str) -> bool:
        """Confirm a sign-up with the code delivered to the user."""
        pass

    @abstractmethod
    async def initiate_auth(self, client_id: str, user_name: str, password: str) -> Dict[str, Any]:
        """Start a username/password authentication flow.

        Returns:
            Response dict; carries Session when a challenge follows
        """
        pass

    @abstractmethod
    async def list_users(self, pool_id: str) -> List[Dict[str, Any]]:
        """List all users in a pool."""
        pass

    @abstractmethod
    async def verify_software_token(self, session: Optional[str], code: Optional[str]) -> str:
        """Verify a TOTP code. Returns 'SUCCESS' or 'ERROR'."""
        pass

    @abstractmethod
    async def associate_software_token(self, session: Optional[str]) -> Dict[str, Any]:
        """Begin TOTP setup. Returns SecretCode and a follow-up Session."""
        pass

    @abstractmethod
    async def respond_to_auth_challenge(
        self,
        user_name: str,
        client_id: str,
        code: Optional[str],
        session: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        """Answer a software-token MFA challenge.

        Returns:
            The authentication result (tokens), or None if the provider
            issued a further challenge instead
        """
        pass
