"""Tests for SubscriptionRepository."""

from datetime import datetime, timedelta

import repositories.db_models as db_models
from repositories.subscription_repository import SubscriptionRepository

T0 = datetime(2026, 3, 1, 12, 0, 0)


class TestSubscriptionRepository:
    """Tests for conditional writes and derived counts."""

    def test_unique_per_user_and_conversation(
        self, db_session, bob, public_conversation
    ) -> None:
        repo = SubscriptionRepository(db_session)
        repo.create(
            db_models.Subscription(user_id=bob.id, conversation_id=public_conversation.id)
        )

        duplicate = repo.create_unique(
            db_models.Subscription(user_id=bob.id, conversation_id=public_conversation.id)
        )

        assert duplicate is None
        assert repo.count_for_conversation(public_conversation.id, exclude_user_id=bob.id) == 1

    def test_set_last_read_unknown_subscription(self, db_session) -> None:
        assert SubscriptionRepository(db_session).set_last_read(9999, T0) is False

    def test_set_activated(self, db_session, bob, public_conversation) -> None:
        repo = SubscriptionRepository(db_session)
        subscription = repo.create(
            db_models.Subscription(
                user_id=bob.id, conversation_id=public_conversation.id, activated_at=T0
            )
        )

        later = T0 + timedelta(days=1)
        assert repo.set_activated(bob.id, public_conversation.id, later) is True

        db_session.refresh(subscription)
        assert subscription.activated_at == later

    def test_most_recent_for_user(self, db_session, alice, create_conversation) -> None:
        repo = SubscriptionRepository(db_session)
        convo = create_conversation(alice, name="Latest")
        repo.set_activated(alice.id, convo.id, datetime(2030, 1, 1))

        assert repo.get_most_recent_for_user(alice.id).conversation_id == convo.id
        assert repo.count_for_user(alice.id) == 2

    def test_get_with_new_messages_skips_read_subscriptions(
        self, db_session, alice, bob, public_conversation, create_message
    ) -> None:
        repo = SubscriptionRepository(db_session)
        subscription = repo.create(
            db_models.Subscription(user_id=bob.id, conversation_id=public_conversation.id)
        )
        create_message(alice, public_conversation, created_at=T0)

        assert [(s.id, n) for s, n in repo.get_with_new_messages(bob.id)] == [
            (subscription.id, 1)
        ]

        repo.set_last_read(subscription.id, T0)
        assert repo.get_with_new_messages(bob.id) == []

    def test_delete_for_user_and_conversation(
        self, db_session, bob, public_conversation
    ) -> None:
        repo = SubscriptionRepository(db_session)
        repo.create(
            db_models.Subscription(user_id=bob.id, conversation_id=public_conversation.id)
        )

        assert repo.delete_for_user_and_conversation(bob.id, public_conversation.id) == 1
        assert repo.delete_for_user_and_conversation(bob.id, public_conversation.id) == 0
