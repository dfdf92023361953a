import pytest

from messagely.auth import CredentialService
from messagely.config import Settings
from messagely.errors import AuthenticationError, UserAlreadyExistsError
from .helpers import make_user


@pytest.mark.asyncio
async def test_register_then_authenticate(credentials):
    user = await credentials.register(make_user('alice', 'correct horse'))
    assert user['username'] == 'alice'
    assert user['first_name'] == 'Alice'
    # stored value is a hash, not the plaintext
    assert user['password'] != 'correct horse'
    assert user['password'].startswith('$2')

    assert await credentials.authenticate('alice', 'correct horse') is True
    assert await credentials.authenticate('alice', 'wrong horse') is False
    assert await credentials.authenticate('alice', '') is False


@pytest.mark.asyncio
async def test_duplicate_username_rejected(credentials):
    await credentials.register(make_user('alice'))
    with pytest.raises(UserAlreadyExistsError):
        await credentials.register(make_user('alice', 'other', first_name='Impostor'))
    # original row untouched
    assert await credentials.authenticate('alice', 'secret1') is True


@pytest.mark.asyncio
async def test_authenticate_rejects_password_past_72_bytes(credentials):
    await credentials.register(make_user('alice', 'p' * 72))
    assert await credentials.authenticate('alice', 'p' * 72) is True
    # same first 72 bytes, different password
    assert await credentials.authenticate('alice', 'p' * 72 + 'anything-else') is False


@pytest.mark.asyncio
async def test_authenticate_unknown_user(credentials):
    with pytest.raises(AuthenticationError) as exc:
        await credentials.authenticate('nobody', 'secret1')
    assert exc.value.message == 'User does not exist'
    assert exc.value.status_code == 400


@pytest.mark.asyncio
async def test_token_roundtrip(credentials):
    token = credentials.issue_token({'username': 'alice'})
    assert credentials.decode_token(token) == {'username': 'alice'}


@pytest.mark.asyncio
async def test_token_rejected_with_other_secret(database, credentials):
    token = credentials.issue_token({'username': 'alice'})
    other = CredentialService(database, Settings(jwt_secret='not-the-same', bcrypt_work_factor=4))
    assert other.decode_token(token) is None
    assert credentials.decode_token('garbage') is None


@pytest.mark.asyncio
async def test_token_expiry_claim_only_when_configured(database, settings):
    plain = CredentialService(database, settings)
    assert 'exp' not in plain.decode_token(plain.issue_token({'username': 'a'}))

    expiring = CredentialService(database, settings.model_copy(update={'access_token_expire_minutes': 5}))
    assert 'exp' in expiring.decode_token(expiring.issue_token({'username': 'a'}))


@pytest.mark.asyncio
async def test_work_factor_applied(database, settings):
    svc = CredentialService(database, settings)
    hashed = svc.hash_password('pw')
    # bcrypt encodes the cost as $2b$04$...
    assert hashed.split('$')[2] == '04'
    assert svc.verify_password('pw', hashed)


def test_settings_rewrite_postgres_url():
    s = Settings(database_url='postgresql://u:p@db:5432/x')
    assert s.database_url == 'postgresql+asyncpg://u:p@db:5432/x'


def test_settings_work_factor_bounds():
    with pytest.raises(ValueError):
        Settings(bcrypt_work_factor=3)
