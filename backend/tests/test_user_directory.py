"""
TripFolders Backend — User Directory Tests
===========================================

What:  Token verification and user lookups.

What we test:
    ✅ Tokens round-trip to the user id; missing/bad/expired ones fail
    ✅ Tokens for deleted accounts fail
    ✅ Username resolution keeps order and blanks unknown ids
    ✅ Database failures surface as DatabaseError
"""

import uuid
from datetime import timedelta

import pytest
from jose import jwt
from sqlalchemy.exc import OperationalError

from tripfolders.config import settings
from tripfolders.exceptions import AuthError, DatabaseError
from tripfolders.services.user_directory import UserDirectory, create_access_token


class TestVerify:

    def setup_method(self):
        self.directory = UserDirectory()

    def test_valid_token(self):
        user_id = uuid.uuid4()
        assert self.directory.verify(create_access_token(user_id)) == user_id

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, token):
        with pytest.raises(AuthError):
            self.directory.verify(token)

    def test_garbage_token(self):
        with pytest.raises(AuthError):
            self.directory.verify("not.a.jwt")

    def test_wrong_signature(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "some-other-key", algorithm="HS256")
        with pytest.raises(AuthError):
            self.directory.verify(token)

    def test_expired_token(self):
        token = create_access_token(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthError) as exc_info:
            self.directory.verify(token)
        assert "expired" in exc_info.value.message

    def test_subject_must_be_a_uuid(self):
        token = jwt.encode({"sub": "alice"}, settings.secret_key, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthError):
            self.directory.verify(token)


class TestLookups:

    def setup_method(self):
        self.directory = UserDirectory()

    @pytest.mark.asyncio
    async def test_authenticate(self, db_session, alice):
        user = await self.directory.authenticate(db_session, create_access_token(alice.id))
        assert user.username == "alice"

    @pytest.mark.asyncio
    async def test_authenticate_unknown_account(self, db_session):
        with pytest.raises(AuthError):
            await self.directory.authenticate(db_session, create_access_token(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_find_by_username(self, db_session, alice):
        assert (await self.directory.find_by_username(db_session, "alice")).id == alice.id
        assert await self.directory.find_by_username(db_session, "nobody") is None

    @pytest.mark.asyncio
    async def test_usernames_for_keeps_order_and_blanks_unknown(self, db_session, alice, bob):
        names = await self.directory.usernames_for(db_session, [bob.id, uuid.uuid4(), alice.id])
        assert names == ["bob", "", "alice"]

    @pytest.mark.asyncio
    async def test_usernames_for_nothing(self, mock_db_session):
        assert await self.directory.usernames_for(mock_db_session, []) == []
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, db_session, alice, make_user):
        await make_user("under_score")
        await make_user("underscore")

        found = await self.directory.search(db_session, alice, "r_s")

        assert [u.username for u in found] == ["under_score"]

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))
        with pytest.raises(DatabaseError):
            await self.directory.find_by_username(mock_db_session, "alice")
