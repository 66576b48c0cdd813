import asyncio
from datetime import timedelta

import pytest
from sqlalchemy import select, update

from src.core.exceptions import InvalidSessionError, NotFoundError
from src.domain.entities.session import DeviceType, UserSession
from src.domain.services.auth.session import SessionTokenManager
from src.domain.value_objects.device_info import DeviceInfo
from src.utils.clock import utcnow
from src.utils.security import hash_session_token
from tests.factories.user import create_fake_user


async def expire(db_session, session_id):
    await db_session.execute(
        update(UserSession).where(UserSession.id == session_id).values(expires_at=utcnow() - timedelta(seconds=1))
    )
    await db_session.commit()


@pytest.mark.asyncio
async def test_create_then_validate(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)

    issued = await manager.create(user.id, web_device)

    assert issued.token.startswith("sess_")
    assert issued.session.token_hash == hash_session_token(issued.token)
    assert issued.token not in repr(issued)
    validated = await manager.validate(issued.token)
    assert validated.id == user.id


@pytest.mark.asyncio
async def test_plaintext_token_is_never_stored(db_session, web_device):
    user = await create_fake_user(db_session)
    issued = await SessionTokenManager(db_session).create(user.id, web_device)

    row = (await db_session.execute(select(UserSession))).scalars().one()
    assert issued.token not in (row.token_hash, row.token_hint)
    assert row.token_hint == issued.token[-4:]


@pytest.mark.asyncio
async def test_ttl_depends_on_device_type(db_session, web_device, mobile_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)

    web = await manager.create(user.id, web_device)
    mobile = await manager.create(user.id, mobile_device)

    assert web.expires_at - web.session.created_at == timedelta(days=7)
    assert mobile.expires_at - mobile.session.created_at == timedelta(days=30)
    assert SessionTokenManager.ttl_for(DeviceType.UNKNOWN) == timedelta(days=30)


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "garbage", "sess_doesnotexist", "Bearer sess_x"])
async def test_validate_unknown_tokens(db_session, token):
    with pytest.raises(InvalidSessionError):
        await SessionTokenManager(db_session).validate(token)


@pytest.mark.asyncio
async def test_expired_session_is_invalid(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    issued = await manager.create(user.id, web_device)

    await expire(db_session, issued.session.id)

    with pytest.raises(InvalidSessionError):
        await manager.validate(issued.token)
    with pytest.raises(InvalidSessionError):
        await manager.refresh(issued.token, DeviceInfo())


@pytest.mark.asyncio
async def test_inactive_owner_invalidates_session(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    issued = await manager.create(user.id, web_device)

    user.is_active = False
    db_session.add(user)
    await db_session.commit()

    with pytest.raises(InvalidSessionError):
        await manager.validate(issued.token)


@pytest.mark.asyncio
async def test_refresh_replaces_token(db_session, mobile_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    old = await manager.create(user.id, mobile_device)

    new = await manager.refresh(old.token, DeviceInfo(ip_address="192.0.2.7"))

    assert new.token != old.token
    assert (await manager.validate(new.token)).id == user.id
    with pytest.raises(InvalidSessionError):
        await manager.validate(old.token)
    with pytest.raises(InvalidSessionError):
        await manager.refresh(old.token, DeviceInfo())


@pytest.mark.asyncio
async def test_refresh_keeps_device_fields_not_supplied(db_session, mobile_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    old = await manager.create(user.id, mobile_device)

    new = await manager.refresh(old.token, DeviceInfo(ip_address="192.0.2.7"))

    assert new.session.device_type is DeviceType.IOS
    assert new.session.device_name == "Test iPhone"
    assert new.session.user_agent == "AuthCoreApp/1.0"
    assert new.session.ip_address == "192.0.2.7"


@pytest.mark.asyncio
async def test_concurrent_refresh_yields_exactly_one_successor(database, mobile_device):
    async with database.session() as setup:
        user = await create_fake_user(setup)
        old = await SessionTokenManager(setup).create(user.id, mobile_device)

    async def attempt():
        async with database.session() as db_session:
            return await SessionTokenManager(db_session).refresh(old.token, DeviceInfo())

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)

    successes = [r for r in results if not isinstance(r, BaseException)]
    failures = [r for r in results if isinstance(r, BaseException)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], InvalidSessionError)

    async with database.session() as check:
        rows = (await check.execute(select(UserSession).where(UserSession.user_id == user.id))).scalars().all()
        assert [r.token_hash for r in rows] == [hash_session_token(successes[0].token)]


@pytest.mark.asyncio
async def test_cancelled_refresh_keeps_old_session(database, mobile_device, mocker):
    async with database.session() as setup:
        user = await create_fake_user(setup)
        user_id = user.id
        old = await SessionTokenManager(setup).create(user_id, mobile_device)

    reached_commit = asyncio.Event()

    async def stall():
        reached_commit.set()
        await asyncio.Event().wait()

    async with database.session() as db_session:
        mocker.patch.object(db_session, "commit", side_effect=stall)
        task = asyncio.create_task(SessionTokenManager(db_session).refresh(old.token, DeviceInfo()))
        await reached_commit.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async with database.session() as check:
        rows = (await check.execute(select(UserSession).where(UserSession.user_id == user_id))).scalars().all()
        assert [r.token_hash for r in rows] == [hash_session_token(old.token)]
        assert (await SessionTokenManager(check).validate(old.token)).id == user_id


@pytest.mark.asyncio
async def test_delete_is_idempotent(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    issued = await manager.create(user.id, web_device)

    await manager.delete(issued.token)
    await manager.delete(issued.token)

    with pytest.raises(InvalidSessionError):
        await manager.validate(issued.token)


@pytest.mark.asyncio
async def test_delete_all_for_user_leaves_other_users_alone(db_session, web_device, mobile_device):
    alice = await create_fake_user(db_session)
    bob = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    await manager.create(alice.id, web_device)
    await manager.create(alice.id, mobile_device)
    bobs = await manager.create(bob.id, web_device)

    assert await manager.delete_all_for_user(alice.id) == 2
    assert await manager.list_for_user(alice.id) == []
    assert (await manager.validate(bobs.token)).id == bob.id


@pytest.mark.asyncio
async def test_list_for_user_masks_tokens_and_flags_current(db_session, web_device, mobile_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    first = await manager.create(user.id, web_device)
    second = await manager.create(user.id, mobile_device)

    views = await manager.list_for_user(user.id, current_token=second.token)

    assert [v.id for v in views] == [first.session.id, second.session.id]
    assert [v.is_current for v in views] == [False, True]
    for view, issued in zip(views, (first, second)):
        assert view.masked_token == f"sess_****{issued.token[-4:]}"
        assert issued.token not in repr(view)


@pytest.mark.asyncio
async def test_list_for_user_hides_expired(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    issued = await manager.create(user.id, web_device)
    await expire(db_session, issued.session.id)

    assert await manager.list_for_user(user.id) == []


@pytest.mark.asyncio
async def test_delete_for_user_only_removes_own_sessions(db_session, web_device):
    alice = await create_fake_user(db_session)
    bob = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    alice_id, bob_id = alice.id, bob.id
    bobs = await manager.create(bob_id, web_device)
    session_id = bobs.session.id

    with pytest.raises(NotFoundError):
        await manager.delete_for_user(session_id, alice_id)
    assert (await manager.validate(bobs.token)).id == bob_id

    await manager.delete_for_user(session_id, bob_id)
    with pytest.raises(InvalidSessionError):
        await manager.validate(bobs.token)


@pytest.mark.asyncio
async def test_purge_expired(db_session, web_device):
    user = await create_fake_user(db_session)
    manager = SessionTokenManager(db_session)
    stale = await manager.create(user.id, web_device)
    live = await manager.create(user.id, web_device)
    await expire(db_session, stale.session.id)

    assert await manager.purge_expired() == 1
    assert (await manager.validate(live.token)).id == user.id
