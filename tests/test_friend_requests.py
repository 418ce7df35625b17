"""
Tests for the friend-request store.
"""

import pytest
from sqlalchemy import func, select

from app.core.errors import ConflictError, ForbiddenError, NotFoundError
from app.models import FriendRequest, FriendRequestStatus, UserFriend
from app.services import friend_requests


async def _status_of(db, request_id):
    result = await db.execute(select(FriendRequest.status).where(FriendRequest.id == request_id))
    return result.scalar_one_or_none()


async def _edge_count(db):
    result = await db.execute(select(func.count()).select_from(UserFriend))
    return result.scalar_one()


class TestCreateRequest:

    async def test_creates_pending_request(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        req = await friend_requests.create_request(db, alice.id, bob.id)

        assert req.sender_id == alice.id
        assert req.recipient_id == bob.id
        assert req.status == FriendRequestStatus.PENDING
        assert req.created_at is not None

    async def test_duplicate_request_conflicts(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        await friend_requests.create_request(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            await friend_requests.create_request(db, alice.id, bob.id)

    async def test_reverse_direction_conflicts(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")

        await friend_requests.create_request(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            await friend_requests.create_request(db, bob.id, alice.id)

    async def test_self_request_conflicts(self, db, make_user):
        alice = await make_user("Alice")

        with pytest.raises(ConflictError):
            await friend_requests.create_request(db, alice.id, alice.id)

    async def test_unknown_recipient_not_found(self, db, make_user):
        alice = await make_user("Alice")

        with pytest.raises(NotFoundError):
            await friend_requests.create_request(db, alice.id, "missing-user")

    async def test_already_friends_conflicts(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)
        await friend_requests.accept_request(db, req.id, bob.id)

        with pytest.raises(ConflictError):
            await friend_requests.create_request(db, alice.id, bob.id)
        with pytest.raises(ConflictError):
            await friend_requests.create_request(db, bob.id, alice.id)


class TestAcceptRequest:

    async def test_accept_makes_friendship_symmetric(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        accepted = await friend_requests.accept_request(db, req.id, bob.id)

        assert accepted.status == FriendRequestStatus.ACCEPTED
        assert [u.id for u in await friend_requests.list_friends(db, alice.id)] == [bob.id]
        assert [u.id for u in await friend_requests.list_friends(db, bob.id)] == [alice.id]

    async def test_only_recipient_may_accept(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            await friend_requests.accept_request(db, req.id, alice.id)
        with pytest.raises(ForbiddenError):
            await friend_requests.accept_request(db, req.id, carol.id)

        assert await _status_of(db, req.id) == FriendRequestStatus.PENDING
        assert await _edge_count(db) == 0

    async def test_accepting_twice_not_found(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)
        await friend_requests.accept_request(db, req.id, bob.id)

        with pytest.raises(NotFoundError):
            await friend_requests.accept_request(db, req.id, bob.id)

    async def test_accepting_deleted_request_not_found(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)
        await friend_requests.decline_request(db, req.id, bob.id)

        with pytest.raises(NotFoundError):
            await friend_requests.accept_request(db, req.id, bob.id)

    async def test_accept_is_all_or_nothing(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        # A stray one-sided edge makes the second insert collide
        db.add(UserFriend(user_id=bob.id, friend_id=alice.id))
        await db.commit()
        db.expunge_all()

        with pytest.raises(ConflictError):
            await friend_requests.accept_request(db, req.id, bob.id)

        assert await _status_of(db, req.id) == FriendRequestStatus.PENDING
        result = await db.execute(
            select(UserFriend).where(UserFriend.user_id == alice.id, UserFriend.friend_id == bob.id)
        )
        assert result.scalar_one_or_none() is None


class TestDeclineAndCancel:

    async def test_decline_deletes_and_allows_rerequest(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        incoming = await friend_requests.list_incoming(db, bob.id)
        outgoing = await friend_requests.list_outgoing(db, alice.id)
        assert [(r.sender.id, r.id) for r in incoming] == [(alice.id, req.id)]
        assert [(r.recipient.id, r.id) for r in outgoing] == [(bob.id, req.id)]

        await friend_requests.decline_request(db, req.id, bob.id)

        assert await friend_requests.list_incoming(db, bob.id) == []
        assert await friend_requests.list_outgoing(db, alice.id) == []
        assert await _status_of(db, req.id) is None

        again = await friend_requests.create_request(db, alice.id, bob.id)
        assert again.id != req.id

    async def test_only_recipient_may_decline(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            await friend_requests.decline_request(db, req.id, alice.id)
        assert await _status_of(db, req.id) == FriendRequestStatus.PENDING

    async def test_decline_unknown_request_not_found(self, db, make_user):
        bob = await make_user("Bob")

        with pytest.raises(NotFoundError):
            await friend_requests.decline_request(db, "nope", bob.id)

    async def test_cancel_by_sender_deletes(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        await friend_requests.cancel_request(db, req.id, alice.id)

        assert await _status_of(db, req.id) is None
        assert await friend_requests.list_incoming(db, bob.id) == []

    async def test_cancel_by_other_user_forbidden(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        req = await friend_requests.create_request(db, alice.id, bob.id)

        with pytest.raises(ForbiddenError):
            await friend_requests.cancel_request(db, req.id, bob.id)
        with pytest.raises(ForbiddenError):
            await friend_requests.cancel_request(db, req.id, carol.id)
        assert await _status_of(db, req.id) == FriendRequestStatus.PENDING

    async def test_cancel_accepted_request_conflicts(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)
        await friend_requests.accept_request(db, req.id, bob.id)

        with pytest.raises(ConflictError):
            await friend_requests.cancel_request(db, req.id, alice.id)
        assert await _status_of(db, req.id) == FriendRequestStatus.ACCEPTED

    async def test_cancel_unknown_request_not_found(self, db, make_user):
        alice = await make_user("Alice")

        with pytest.raises(NotFoundError):
            await friend_requests.cancel_request(db, "nope", alice.id)


class TestProjections:

    async def test_incoming_excludes_accepted(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        accepted = await friend_requests.create_request(db, alice.id, bob.id)
        pending = await friend_requests.create_request(db, carol.id, bob.id)
        await friend_requests.accept_request(db, accepted.id, bob.id)

        incoming = await friend_requests.list_incoming(db, bob.id)

        assert [r.id for r in incoming] == [pending.id]

    async def test_accepted_outgoing_lists_sent_and_accepted(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        carol = await make_user("Carol")
        to_bob = await friend_requests.create_request(db, alice.id, bob.id)
        await friend_requests.create_request(db, alice.id, carol.id)
        await friend_requests.accept_request(db, to_bob.id, bob.id)

        accepted = await friend_requests.list_accepted_outgoing(db, alice.id)

        assert [(r.id, r.recipient.full_name) for r in accepted] == [(to_bob.id, "Bob")]
        assert await friend_requests.list_accepted_outgoing(db, bob.id) == []

    async def test_list_friends_empty_for_new_user(self, db, make_user):
        alice = await make_user("Alice")

        assert await friend_requests.list_friends(db, alice.id) == []


class TestRecommend:

    async def test_excludes_self_friends_and_pending(self, db, make_user):
        alice = await make_user("Alice")
        friend = await make_user("Friend")
        asked_by_alice = await make_user("Asked")
        asking_alice = await make_user("Asking")
        stranger = await make_user("Stranger")

        req = await friend_requests.create_request(db, alice.id, friend.id)
        await friend_requests.accept_request(db, req.id, friend.id)
        await friend_requests.create_request(db, alice.id, asked_by_alice.id)
        await friend_requests.create_request(db, asking_alice.id, alice.id)

        recommended = {u.id for u in await friend_requests.recommend(db, alice.id)}

        assert recommended == {stranger.id}

    async def test_excludes_users_not_onboarded(self, db, make_user):
        alice = await make_user("Alice")
        await make_user("Newbie", is_onboarded=False)
        ready = await make_user("Ready")

        recommended = [u.id for u in await friend_requests.recommend(db, alice.id)]

        assert recommended == [ready.id]

    async def test_declined_user_is_recommended_again(self, db, make_user):
        alice = await make_user("Alice")
        bob = await make_user("Bob")
        req = await friend_requests.create_request(db, alice.id, bob.id)
        assert await friend_requests.recommend(db, alice.id) == []

        await friend_requests.decline_request(db, req.id, bob.id)

        assert [u.id for u in await friend_requests.recommend(db, alice.id)] == [bob.id]
