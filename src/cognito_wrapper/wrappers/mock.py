"""
Mock Cognito wrapper for local testing
Simulates one user pool and app client in memory
"""
import logging
import secrets
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..mfa import new_totp_secret, verify_totp
from .base import IdentityProviderError, IdentityProviderWrapper

logger = logging.getLogger(__name__)


class MockCognitoWrapper(IdentityProviderWrapper):
    """In-memory stand-in for CognitoWrapper.

    Every one-time code (sign-up confirmation and software token) is a TOTP
    derived from ``totp_secret``, so one MFA token satisfies every step that
    consumes it.

    Unlike Cognito, confirming an already CONFIRMED user succeeds (Cognito
    answers NotAuthorizedException). With ``auto_confirm`` the user is
    CONFIRMED right after sign-up, and the sequence checks that status
    before it confirms the sign-up.
    """

    def __init__(
        self,
        user_pool_id: str = "us-east-1_mockpool",
        client_id: str = "mock-client-id",
        pool_name: str = "mock-pool",
        totp_secret: Optional[str] = None,
        auto_confirm: bool = True,
    ):
        self.user_pool_id = user_pool_id
        self.client_id = client_id
        self.pool_name = pool_name
        self.totp_secret = totp_secret or new_totp_secret()
        self.auto_confirm = auto_confirm

        self._users: Dict[str, Dict[str, Any]] = {}
        self._sessions: Dict[str, str] = {}
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

        logger.info(f"🎭 MockCognitoWrapper initialized for pool {user_pool_id}")

    # ---- helpers ----------------------------------------------------------------
    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))

    def _check_client(self, operation: str, client_id: str) -> None:
        if client_id != self.client_id:
            raise IdentityProviderError(
                "ResourceNotFoundException", f"User pool client {client_id} does not exist.", operation
            )

    def _check_pool(self, operation: str, pool_id: str) -> None:
        if pool_id != self.user_pool_id:
            raise IdentityProviderError(
                "ResourceNotFoundException", f"User pool {pool_id} does not exist.", operation
            )

    def _get_user(self, operation: str, user_name: str) -> Dict[str, Any]:
        user = self._users.get(user_name)
        if user is None:
            raise IdentityProviderError("UserNotFoundException", "User does not exist.", operation)
        return user

    def _check_code(self, operation: str, code: Optional[str]) -> None:
        if code is None:
            raise IdentityProviderError("InvalidParameterException", "Missing required code.", operation)
        if not verify_totp(self.totp_secret, code):
            raise IdentityProviderError(
                "CodeMismatchException", "Invalid verification code provided, please try again.", operation
            )

    def _user_for_session(self, operation: str, session: Optional[str]) -> Dict[str, Any]:
        user_name = self._sessions.get(session) if session else None
        if user_name is None:
            raise IdentityProviderError("NotAuthorizedException", "Invalid session for the user.", operation)
        return self._users[user_name]

    def _new_session(self, user_name: str) -> str:
        session = secrets.token_urlsafe(32)
        self._sessions[session] = user_name
        return session

    # ---- operations -------------------------------------------------------------
    async def sign_up(self, client_id: str, user_name: str, password: str, email: str) -> bool:
        self._record("sign_up", client_id, user_name, password, email)
        self._check_client("sign_up", client_id)
        if user_name in self._users:
            raise IdentityProviderError("UsernameExistsException", "User already exists", "sign_up")

        self._users[user_name] = {
            "Username": user_name,
            "Password": password,
            "Email": email,
            "UserStatus": "CONFIRMED" if self.auto_confirm else "UNCONFIRMED",
            "UserCreateDate": datetime.now(timezone.utc),
            "Enabled": True,
        }
        logger.info(f"🎭 Mock sign-up for {user_name}")
        return True

    async def list_user_pools(self) -> List[Dict[str, Any]]:
        self._record("list_user_pools")
        return [{"Id": self.user_pool_id, "Name": self.pool_name}]

    async def get_admin_user(self, user_name: str, pool_id: str) -> str:
        self._record("get_admin_user", user_name, pool_id)
        self._check_pool("get_admin_user", pool_id)
        return self._get_user("get_admin_user", user_name)["UserStatus"]

    async def resend_confirmation_code(self, client_id: str, user_name: str) -> Dict[str, Any]:
        self._record("resend_confirmation_code", client_id, user_name)
        self._check_client("resend_confirmation_code", client_id)
        user = self._get_user("resend_confirmation_code", user_name)
        return {"Destination": user["Email"], "DeliveryMedium": "EMAIL", "AttributeName": "email"}

    async def confirm_signup(self, client_id: str, code: Optional[str], user_name: str) -> bool:
        self._record("confirm_signup", client_id, code, user_name)
        self._check_client("confirm_signup", client_id)
        user = self._get_user("confirm_signup", user_name)
        self._check_code("confirm_signup", code)
        # Already-confirmed users are accepted, see class docstring
        user["UserStatus"] = "CONFIRMED"
        return True

    async def initiate_auth(self, client_id: str, user_name: str, password: str) -> Dict[str, Any]:
        self._record("initiate_auth", client_id, user_name, password)
        self._check_client("initiate_auth", client_id)
        user = self._users.get(user_name)
        if user is None or user["Password"] != password:
            raise IdentityProviderError("NotAuthorizedException", "Incorrect username or password.", "initiate_auth")
        if user["UserStatus"] != "CONFIRMED":
            raise IdentityProviderError("UserNotConfirmedException", "User is not confirmed.", "initiate_auth")

        return {
            "ChallengeName": "SOFTWARE_TOKEN_MFA",
            "ChallengeParameters": {"USER_ID_FOR_SRP": user_name},
            "Session": self._new_session(user_name),
        }

    async def list_users(self, pool_id: str) -> List[Dict[str, Any]]:
        self._record("list_users", pool_id)
        self._check_pool("list_users", pool_id)
        return [
            {
                "Username": user["Username"],
                "UserStatus": user["UserStatus"],
                "Enabled": user["Enabled"],
                "UserCreateDate": user["UserCreateDate"],
                "Attributes": [{"Name": "email", "Value": user["Email"]}],
            }
            for user in self._users.values()
        ]

    async def verify_software_token(self, session: Optional[str], code: Optional[str]) -> str:
        self._record("verify_software_token", session, code)
        self._user_for_session("verify_software_token", session)
        if code is None:
            raise IdentityProviderError("InvalidParameterException", "Missing required code.", "verify_software_token")
        return "SUCCESS" if verify_totp(self.totp_secret, code) else "ERROR"

    async def associate_software_token(self, session: Optional[str]) -> Dict[str, Any]:
        self._record("associate_software_token", session)
        user = self._user_for_session("associate_software_token", session)
        # The original session stays valid so later challenge steps can reuse it.
        return {"SecretCode": self.totp_secret, "Session": self._new_session(user["Username"])}

    async def respond_to_auth_challenge(
        self,
        user_name: str,
        client_id: str,
        code: Optional[str],
        session: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        self._record("respond_to_auth_challenge", user_name, client_id, code, session)
        self._check_client("respond_to_auth_challenge", client_id)
        user = self._user_for_session("respond_to_auth_challenge", session)
        if user["Username"] != user_name:
            raise IdentityProviderError("NotAuthorizedException", "Invalid session for the user.", "respond_to_auth_challenge")
        self._check_code("respond_to_auth_challenge", code)

        return {
            "AccessToken": secrets.token_urlsafe(32),
            "IdToken": secrets.token_urlsafe(32),
            "RefreshToken": secrets.token_urlsafe(32),
            "ExpiresIn": 3600,
            "TokenType": "Bearer",
        }
