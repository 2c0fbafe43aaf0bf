"""Database and Redis adapters of the token blacklist."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from sqlalchemy import func, select

from furnibles.infra.db.sqlalchemy_blacklist_store import SQLAlchemyBlacklistStore
from furnibles.infra.redis.redis_blacklist_store import RedisBlacklistStore
from furnibles.models.token_blacklist import BlacklistedToken
from furnibles.services._shared.ports import BlacklistStatus
from tests.factories.user import UserFactory


def _rows(session) -> int:
    return session.execute(select(func.count()).select_from(BlacklistedToken)).scalar_one()


class TestSQLAlchemyBlacklistStore:
    @pytest.fixture()
    def store(self) -> SQLAlchemyBlacklistStore:
        return SQLAlchemyBlacklistStore()

    def test_add_then_lookup_revoked(self, store, session):
        user = UserFactory()
        now = datetime.now(UTC)

        assert store.add(token="t1", user_id=user.id, expires_at=now + timedelta(hours=1))
        assert store.lookup("t1", now=now) is BlacklistStatus.REVOKED
        assert store.lookup("other", now=now) is BlacklistStatus.ABSENT

    def test_second_add_is_a_noop(self, store, session):
        expires = datetime.now(UTC) + timedelta(hours=1)

        assert store.add(token="t1", user_id=None, expires_at=expires) is True
        assert store.add(token="t1", user_id=None, expires_at=expires) is False
        assert _rows(session) == 1

    def test_expired_entry_is_deleted_on_lookup(self, store, session):
        now = datetime.now(UTC)
        store.add(token="t1", user_id=None, expires_at=now - timedelta(seconds=1))

        assert store.lookup("t1", now=now) is BlacklistStatus.EXPIRED
        assert _rows(session) == 0
        assert store.lookup("t1", now=now) is BlacklistStatus.ABSENT

    def test_purge_expired_keeps_live_entries(self, store, session):
        now = datetime.now(UTC)
        store.add(token="old-1", user_id=None, expires_at=now - timedelta(minutes=5))
        store.add(token="old-2", user_id=None, expires_at=now - timedelta(minutes=1))
        store.add(token="live", user_id=None, expires_at=now + timedelta(minutes=5))

        assert store.purge_expired(now=now) == 2
        assert store.lookup("live", now=now) is BlacklistStatus.REVOKED


class TestRedisBlacklistStore:
    @pytest.fixture()
    def redis_client(self):
        return fakeredis.FakeRedis()

    @pytest.fixture()
    def store(self, redis_client) -> RedisBlacklistStore:
        return RedisBlacklistStore(redis_client)

    def test_add_sets_ttl_and_hides_raw_token(self, store, redis_client):
        expires = datetime.now(UTC) + timedelta(minutes=10)

        assert store.add(token="raw-token", user_id=7, expires_at=expires) is True

        keys = [k.decode() for k in redis_client.keys("*")]
        assert len(keys) == 1
        assert "raw-token" not in keys[0]
        assert 0 < redis_client.ttl(keys[0]) <= 600

    def test_lookup(self, store):
        now = datetime.now(UTC)
        store.add(token="t1", user_id=1, expires_at=now + timedelta(minutes=1))

        assert store.lookup("t1", now=now) is BlacklistStatus.REVOKED
        assert store.lookup("t2", now=now) is BlacklistStatus.ABSENT

    def test_repeat_add_and_expired_add_are_noops(self, store):
        now = datetime.now(UTC)

        assert store.add(token="t1", user_id=1, expires_at=now + timedelta(minutes=1)) is True
        assert store.add(token="t1", user_id=1, expires_at=now + timedelta(minutes=1)) is False
        assert store.add(token="gone", user_id=1, expires_at=now - timedelta(minutes=1)) is False
        assert store.lookup("gone", now=now) is BlacklistStatus.ABSENT

    def test_purge_is_left_to_redis(self, store):
        assert store.purge_expired(now=datetime.now(UTC)) == 0
