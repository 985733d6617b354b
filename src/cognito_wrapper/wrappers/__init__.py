"""
Identity-provider wrapper layer.

Every wrapper implements the IdentityProviderWrapper interface:
- CognitoWrapper: Amazon Cognito user pools via boto3
- MockCognitoWrapper: in-memory fake for deterministic runs

Usage:
    from cognito_wrapper.wrappers import CognitoWrapper

    wrapper = CognitoWrapper(region_name='us-east-1')
    pools = await wrapper.list_user_pools()
"""

from .base import IdentityProviderError, IdentityProviderWrapper
from .cognito import CognitoWrapper
from .mock import MockCognitoWrapper

__all__ = [
    'IdentityProviderError',
    'IdentityProviderWrapper',
    'CognitoWrapper',
    'MockCognitoWrapper',
]
