"""Tests for FollowService (follow authorization and unfollow)."""

from unittest.mock import patch

import pytest

import repositories.db_models as db_models
from models.exceptions import ConversationNotFoundException, UserNotFoundException
from services.follow_service import FollowService
from services.invite_service import InviteService
from services.subscription_service import SubscriptionService


def _subscription_count(db, user_id: int, conversation_id: int) -> int:
    return (
        db.query(db_models.Subscription)
        .filter_by(user_id=user_id, conversation_id=conversation_id)
        .count()
    )


class TestFollow:
    """Tests for follow."""

    def test_public_conversation_is_open(
        self, db_session, bob, public_conversation
    ) -> None:
        assert FollowService.follow(db_session, bob.id, public_conversation.id) is True

        subscription = SubscriptionService.get_subscription(
            db_session, bob.id, public_conversation.id
        )
        assert subscription is not None
        assert subscription.last_read_at is not None

    def test_follow_twice_keeps_one_subscription(
        self, db_session, bob, public_conversation
    ) -> None:
        FollowService.follow(db_session, bob.id, public_conversation.id)
        FollowService.follow(db_session, bob.id, public_conversation.id)

        assert _subscription_count(db_session, bob.id, public_conversation.id) == 1

    def test_owner_may_follow_own_private_conversation(
        self, db_session, alice, private_conversation
    ) -> None:
        assert FollowService.follow(db_session, alice.id, private_conversation.id)

    def test_private_without_invite_refused(
        self, db_session, bob, private_conversation
    ) -> None:
        result = FollowService.follow(
            db_session, bob.id, private_conversation.id, token="anything"
        )

        assert result is False
        assert _subscription_count(db_session, bob.id, private_conversation.id) == 0

    def test_private_without_token_refused(
        self, db_session, bob, private_conversation, invite_for_bob
    ) -> None:
        assert FollowService.follow(db_session, bob.id, private_conversation.id) is False

        db_session.refresh(invite_for_bob)
        assert invite_for_bob.token == "abc123"

    def test_wrong_token_refused(
        self, db_session, bob, private_conversation, invite_for_bob
    ) -> None:
        result = FollowService.follow(
            db_session, bob.id, private_conversation.id, token="xyz"
        )

        assert result is False
        assert _subscription_count(db_session, bob.id, private_conversation.id) == 0
        db_session.refresh(invite_for_bob)
        assert invite_for_bob.is_active

    def test_token_of_other_user_refused(
        self, db_session, create_user, private_conversation, invite_for_bob
    ) -> None:
        """An invite only authorizes the invited user."""
        carol = create_user("carol")

        result = FollowService.follow(
            db_session, carol.id, private_conversation.id, token="abc123"
        )

        assert result is False
        db_session.refresh(invite_for_bob)
        assert invite_for_bob.is_active

    def test_invite_scenario(
        self, db_session, bob, private_conversation, invite_for_bob
    ) -> None:
        """Wrong token, right token, then the spent token again."""
        convo_id = private_conversation.id

        assert FollowService.follow(db_session, bob.id, convo_id, "xyz") is False
        assert _subscription_count(db_session, bob.id, convo_id) == 0

        assert FollowService.follow(db_session, bob.id, convo_id, "abc123") is True
        assert _subscription_count(db_session, bob.id, convo_id) == 1
        db_session.refresh(invite_for_bob)
        assert invite_for_bob.token is None
        assert invite_for_bob.consumed_at is not None

        subscription = SubscriptionService.get_subscription(db_session, bob.id, convo_id)
        before = (subscription.id, subscription.activated_at, subscription.last_read_at)

        assert FollowService.follow(db_session, bob.id, convo_id, "abc123") is False

        subscription = SubscriptionService.get_subscription(db_session, bob.id, convo_id)
        assert (
            subscription.id,
            subscription.activated_at,
            subscription.last_read_at,
        ) == before
        assert _subscription_count(db_session, bob.id, convo_id) == 1

    def test_issued_invite_authorizes_follow(
        self, db_session, alice, bob, private_conversation
    ) -> None:
        with patch.object(InviteService, "generate_token", return_value="abc123"):
            InviteService.issue_invite(
                db_session, bob.id, private_conversation.id, requestor_id=alice.id
            )

        assert FollowService.follow(
            db_session, bob.id, private_conversation.id, "abc123"
        )

    def test_lost_token_race_refused(
        self, db_session, bob, private_conversation, invite_for_bob
    ) -> None:
        """A token spent between lookup and consumption does not authorize."""
        with patch.object(InviteService, "consume", return_value=False):
            result = FollowService.follow(
                db_session, bob.id, private_conversation.id, "abc123"
            )

        assert result is False
        assert _subscription_count(db_session, bob.id, private_conversation.id) == 0

    def test_unknown_conversation_raises(self, db_session, bob) -> None:
        with pytest.raises(ConversationNotFoundException):
            FollowService.follow(db_session, bob.id, 9999)

    def test_unknown_user_raises(self, db_session, public_conversation) -> None:
        with pytest.raises(UserNotFoundException):
            FollowService.follow(db_session, 9999, public_conversation.id)

        assert _subscription_count(db_session, 9999, public_conversation.id) == 0


class TestUnfollow:
    """Tests for unfollow."""

    def test_removes_subscription(self, db_session, bob, public_conversation) -> None:
        FollowService.follow(db_session, bob.id, public_conversation.id)

        FollowService.unfollow(db_session, bob.id, public_conversation.id)

        assert _subscription_count(db_session, bob.id, public_conversation.id) == 0

    def test_destroys_invites(
        self, db_session, bob, private_conversation, invite_for_bob
    ) -> None:
        FollowService.follow(db_session, bob.id, private_conversation.id, "abc123")

        FollowService.unfollow(db_session, bob.id, private_conversation.id)

        assert (
            db_session.query(db_models.Invite)
            .filter_by(user_id=bob.id, conversation_id=private_conversation.id)
            .count()
            == 0
        )

    def test_not_following_is_noop(self, db_session, bob, public_conversation) -> None:
        FollowService.unfollow(db_session, bob.id, public_conversation.id)

        assert _subscription_count(db_session, bob.id, public_conversation.id) == 0

    def test_can_unfollow_own_personal_conversation(self, db_session, alice) -> None:
        FollowService.unfollow(db_session, alice.id, alice.personal_conversation_id)

        assert (
            _subscription_count(db_session, alice.id, alice.personal_conversation_id)
            == 0
        )
