"""Tests for ConversationService."""

import pytest
from pydantic import ValidationError

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import ConversationNotFoundException, MessageNotFoundException
from services.conversation_service import ConversationService
from services.subscription_service import SubscriptionService


class TestCreateConversation:
    """Tests for conversation creation."""

    def test_owner_follows_new_conversation(self, db_session, alice) -> None:
        conversation = ConversationService.create_conversation(
            db_session, alice.id, schemas.ConversationCreate(name="  Plans  ")
        )

        assert conversation.name == "Plans"
        assert conversation.owner.id == alice.id
        subscription = SubscriptionService.get_subscription(
            db_session, alice.id, conversation.id
        )
        assert subscription is not None
        assert subscription.last_read_at is not None

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            schemas.ConversationCreate(name="   ")

    def test_spawn_from_message(self, db_session, bob, message) -> None:
        spawned = ConversationService.spawn_from_message(
            db_session, bob.id, message.id, schemas.ConversationCreate(name="Side")
        )

        assert spawned.parent_message_id == message.id
        assert spawned.user_id == bob.id
        db_session.refresh(message)
        assert [c.id for c in message.spawned_conversations] == [spawned.id]

    def test_spawn_from_unknown_message(self, db_session, bob) -> None:
        with pytest.raises(MessageNotFoundException):
            ConversationService.spawn_from_message(
                db_session, bob.id, 9999, schemas.ConversationCreate(name="Side")
            )

    def test_get_unknown_conversation(self, db_session) -> None:
        with pytest.raises(ConversationNotFoundException):
            ConversationService.get_conversation(db_session, 9999)


class TestPersonalConversation:
    """Tests for add_personal."""

    def test_idempotent(self, db_session, alice) -> None:
        personal = ConversationService.add_personal(db_session, alice)

        assert personal.id == alice.personal_conversation_id
        assert personal.personal is True
        assert personal.name == "alice"
        assert (
            db_session.query(db_models.Conversation)
            .filter_by(user_id=alice.id, personal=True)
            .count()
            == 1
        )


class TestSubscriptions:
    """Tests for add_subscription / remove_subscription."""

    def test_add_is_idempotent(self, db_session, bob, public_conversation) -> None:
        first = ConversationService.add_subscription(
            db_session, bob.id, public_conversation.id
        )
        second = ConversationService.add_subscription(
            db_session, bob.id, public_conversation.id
        )
        assert first.id == second.id

    def test_remove(self, db_session, bob, public_conversation) -> None:
        ConversationService.add_subscription(db_session, bob.id, public_conversation.id)

        assert ConversationService.remove_subscription(
            db_session, bob.id, public_conversation.id
        ) is True
        assert ConversationService.remove_subscription(
            db_session, bob.id, public_conversation.id
        ) is False


class TestVisits:
    """Tests for add_visit."""

    def test_first_visit_then_increment(self, db_session, bob, public_conversation) -> None:
        ConversationService.add_visit(db_session, bob.id, public_conversation.id)
        ConversationService.add_visit(db_session, bob.id, public_conversation.id)
        ConversationService.add_visit(db_session, bob.id, public_conversation.id)

        visit = (
            db_session.query(db_models.ConversationVisit)
            .filter_by(user_id=bob.id, conversation_id=public_conversation.id)
            .one()
        )
        assert visit.visits_count == 3


class TestTags:
    """Tests for tagging."""

    def test_tags_normalized_and_deduplicated(
        self, db_session, alice, bob, public_conversation
    ) -> None:
        ConversationService.tag_conversation(
            db_session, public_conversation.id, "Python", alice.id
        )
        ConversationService.tag_conversation(
            db_session, public_conversation.id, " python ", bob.id
        )
        ConversationService.tag_conversation(
            db_session, public_conversation.id, "python", bob.id
        )

        tags = ConversationService.tags(db_session, public_conversation.id)
        assert [str(tag) for tag in tags] == ["python"]
        assert db_session.query(db_models.Tag).count() == 1

    def test_tag_counts(self, db_session, alice, bob, public_conversation) -> None:
        for tagger in (alice, bob):
            ConversationService.tag_conversation(
                db_session, public_conversation.id, "news", tagger.id
            )
        ConversationService.tag_conversation(
            db_session, public_conversation.id, "misc", alice.id
        )

        assert ConversationService.tag_counts(db_session, public_conversation.id) == {
            "misc": 1,
            "news": 2,
        }

    def test_tag_unknown_conversation(self, db_session) -> None:
        with pytest.raises(ConversationNotFoundException):
            ConversationService.tag_conversation(db_session, 9999, "x")
