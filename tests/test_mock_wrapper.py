"""Tests for MockCognitoWrapper's service-style behaviour."""
import pytest

from cognito_wrapper.mfa import totp_code
from cognito_wrapper.wrappers import IdentityProviderError, IdentityProviderWrapper, MockCognitoWrapper


@pytest.fixture
def wrapper():
    return MockCognitoWrapper(user_pool_id="pool-1", client_id="abc123", pool_name="test-pool")


async def _signed_up(wrapper):
    await wrapper.sign_up("abc123", "alice", "P@ssw0rd!", "alice@example.com")
    return wrapper


def test_implements_wrapper_interface(wrapper):
    assert isinstance(wrapper, IdentityProviderWrapper)


@pytest.mark.asyncio
async def test_duplicate_sign_up_rejected(wrapper):
    await _signed_up(wrapper)

    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.sign_up("abc123", "alice", "other", "alice@example.com")

    assert exc_info.value.code == "UsernameExistsException"


@pytest.mark.asyncio
async def test_list_user_pools(wrapper):
    assert await wrapper.list_user_pools() == [{"Id": "pool-1", "Name": "test-pool"}]


@pytest.mark.asyncio
async def test_unknown_pool(wrapper):
    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.list_users("pool-404")

    assert exc_info.value.code == "ResourceNotFoundException"


@pytest.mark.asyncio
async def test_unknown_user(wrapper):
    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.get_admin_user("bob", "pool-1")

    assert exc_info.value.code == "UserNotFoundException"


@pytest.mark.asyncio
async def test_confirm_signup_marks_user_confirmed():
    wrapper = MockCognitoWrapper(user_pool_id="pool-1", client_id="abc123", auto_confirm=False)
    await _signed_up(wrapper)
    assert await wrapper.get_admin_user("alice", "pool-1") == "UNCONFIRMED"

    assert await wrapper.confirm_signup("abc123", totp_code(wrapper.totp_secret), "alice") is True
    assert await wrapper.get_admin_user("alice", "pool-1") == "CONFIRMED"


@pytest.mark.asyncio
async def test_confirm_signup_wrong_code(wrapper):
    await _signed_up(wrapper)

    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.confirm_signup("abc123", "abcdef", "alice")

    assert exc_info.value.code == "CodeMismatchException"


@pytest.mark.asyncio
async def test_unconfirmed_user_cannot_authenticate():
    wrapper = MockCognitoWrapper(user_pool_id="pool-1", client_id="abc123", auto_confirm=False)
    await _signed_up(wrapper)

    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.initiate_auth("abc123", "alice", "P@ssw0rd!")

    assert exc_info.value.code == "UserNotConfirmedException"


@pytest.mark.asyncio
async def test_wrong_password(wrapper):
    await _signed_up(wrapper)

    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.initiate_auth("abc123", "alice", "wrong")

    assert exc_info.value.code == "NotAuthorizedException"


@pytest.mark.asyncio
async def test_unknown_session(wrapper):
    with pytest.raises(IdentityProviderError) as exc_info:
        await wrapper.associate_software_token("not-a-session")

    assert exc_info.value.code == "NotAuthorizedException"


@pytest.mark.asyncio
async def test_challenge_round_trip(wrapper):
    await _signed_up(wrapper)
    response = await wrapper.initiate_auth("abc123", "alice", "P@ssw0rd!")
    session = response["Session"]
    code = totp_code(wrapper.totp_secret)

    assert response["ChallengeName"] == "SOFTWARE_TOKEN_MFA"
    assert await wrapper.verify_software_token(session, code) == "SUCCESS"

    association = await wrapper.associate_software_token(session)
    assert association["SecretCode"] == wrapper.totp_secret
    assert association["Session"] != session

    result = await wrapper.respond_to_auth_challenge("alice", "abc123", code, session)
    assert result["TokenType"] == "Bearer"


@pytest.mark.asyncio
async def test_list_users_exposes_email(wrapper):
    await _signed_up(wrapper)

    users = await wrapper.list_users("pool-1")

    assert [u["Username"] for u in users] == ["alice"]
    assert users[0]["Attributes"] == [{"Name": "email", "Value": "alice@example.com"}]


@pytest.mark.asyncio
async def test_calls_are_recorded(wrapper):
    await wrapper.list_user_pools()
    await wrapper.list_users("pool-1")

    assert [name for name, _ in wrapper.calls] == ["list_user_pools", "list_users"]


@pytest.mark.asyncio
async def test_confirm_signup_accepts_already_confirmed_user(wrapper):
    await _signed_up(wrapper)
    assert await wrapper.get_admin_user("alice", "pool-1") == "CONFIRMED"

    assert await wrapper.confirm_signup("abc123", totp_code(wrapper.totp_secret), "alice") is True
    assert await wrapper.get_admin_user("alice", "pool-1") == "CONFIRMED"
