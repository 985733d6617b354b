"""
Amazon Cognito wrapper
Drives the cognito-idp API through boto3
"""
import logging
from functools import partial
from typing import Any, Callable, Dict, List, Optional

import anyio
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .base import IdentityProviderError, IdentityProviderWrapper

logger = logging.getLogger(__name__)

# Largest page size ListUserPools accepts
USER_POOL_PAGE_SIZE = 60


class CognitoWrapper(IdentityProviderWrapper):
    """Wrapper around a boto3 cognito-idp client.

    boto3 is blocking, so every call runs in a worker thread and the
    caller awaits the result.
    """

    def __init__(self, client: Any = None, region_name: Optional[str] = None):
        self._client = client or boto3.client("cognito-idp", region_name=region_name)

    @property
    def client(self) -> Any:
        return self._client

    async def _run(self, operation: str, func: Callable[[], Any]) -> Any:
        try:
            return await anyio.to_thread.run_sync(func)
        except ClientError as e:
            error = e.response.get("Error", {})
            code = error.get("Code", "Unknown")
            message = error.get("Message", str(e))
            logger.error(f"Cognito {operation} failed: {code} - {message}")
            raise IdentityProviderError(code, message, operation) from e
        except BotoCoreError as e:
            logger.error(f"Cognito {operation} failed: {e}")
            raise IdentityProviderError(type(e).__name__, str(e), operation) from e

    async def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        method = getattr(self._client, operation)
        return await self._run(operation, partial(method, **params))

    async def _paginate(self, operation: str, result_key: str, **params: Any) -> List[Dict[str, Any]]:
        def collect() -> List[Dict[str, Any]]:
            items: List[Dict[str, Any]] = []
            paginator = self._client.get_paginator(operation)
            for page in paginator.paginate(**params):
                items.extend(page.get(result_key, []))
            return items

        return await self._run(operation, collect)

    @staticmethod
    def _succeeded(response: Dict[str, Any]) -> bool:
        return response.get("ResponseMetadata", {}).get("HTTPStatusCode") == 200

    async def sign_up(self, client_id: str, user_name: str, password: str, email: str) -> bool:
        response = await self._call(
            "sign_up",
            ClientId=client_id,
            Username=user_name,
            Password=password,
            UserAttributes=[{"Name": "email", "Value": email}],
        )
        logger.info(f"Signed up {user_name} (confirmed={response.get('UserConfirmed')})")
        return self._succeeded(response)

    async def list_user_pools(self) -> List[Dict[str, Any]]:
        pools = await self._paginate("list_user_pools", "UserPools", MaxResults=USER_POOL_PAGE_SIZE)
        logger.debug(f"Found {len(pools)} user pools")
        return pools

    async def get_admin_user(self, user_name: str, pool_id: str) -> str:
        response = await self._call("admin_get_user", Username=user_name, UserPoolId=pool_id)
        return response["UserStatus"]

    async def resend_confirmation_code(self, client_id: str, user_name: str) -> Dict[str, Any]:
        response = await self._call("resend_confirmation_code", ClientId=client_id, Username=user_name)
        details = response["CodeDeliveryDetails"]
        logger.info(f"Confirmation code for {user_name} sent via {details.get('DeliveryMedium')}")
        return details

    async def confirm_signup(self, client_id: str, code: Optional[str], user_name: str) -> bool:
        response = await self._call(
            "confirm_sign_up",
            ClientId=client_id,
            ConfirmationCode=code,
            Username=user_name,
        )
        logger.info(f"Confirmed sign-up for {user_name}")
        return self._succeeded(response)

    async def initiate_auth(self, client_id: str, user_name: str, password: str) -> Dict[str, Any]:
        response = await self._call(
            "initiate_auth",
            ClientId=client_id,
            AuthFlow="USER_PASSWORD_AUTH",
            AuthParameters={"USERNAME": user_name, "PASSWORD": password},
        )
        logger.info(f"Started auth for {user_name}, challenge={response.get('ChallengeName')}")
        return response

    async def list_users(self, pool_id: str) -> List[Dict[str, Any]]:
        users = await self._paginate("list_users", "Users", UserPoolId=pool_id)
        logger.debug(f"Found {len(users)} users in {pool_id}")
        return users

    async def verify_software_token(self, session: Optional[str], code: Optional[str]) -> str:
        response = await self._call("verify_software_token", Session=session, UserCode=code)
        return response["Status"]

    async def associate_software_token(self, session: Optional[str]) -> Dict[str, Any]:
        response = await self._call("associate_software_token", Session=session)
        return {"SecretCode": response.get("SecretCode"), "Session": response.get("Session")}

    async def respond_to_auth_challenge(
        self,
        user_name: str,
        client_id: str,
        code: Optional[str],
        session: Optional[str],
    ) -> Optional[Dict[str, Any]]:
        response = await self._call(
            "respond_to_auth_challenge",
            ClientId=client_id,
            ChallengeName="SOFTWARE_TOKEN_MFA",
            ChallengeResponses={"USERNAME": user_name, "SOFTWARE_TOKEN_MFA_CODE": code},
            Session=session,
        )
        result = response.get("AuthenticationResult")
        if result is None:
            logger.warning(f"Challenge answered for {user_name} but got {response.get('ChallengeName')}")
        return result

    async def confirm_device(self, access_token: str, device_key: str, device_name: str) -> bool:
        """Remember a device for the signed-in user.

        Returns:
            True if the user must still confirm the device
        """
        response = await self._call(
            "confirm_device",
            AccessToken=access_token,
            DeviceKey=device_key,
            DeviceName=device_name,
        )
        return bool(response.get("UserConfirmationNecessary"))
