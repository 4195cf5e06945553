"""Tests for TagRepository and ConversationTaggingRepository."""

import repositories.db_models as db_models
from repositories.tag_repository import ConversationTaggingRepository, TagRepository


class TestTagRepository:
    """Tests for tag lookups."""

    def test_create_or_get_normalizes(self, db_session) -> None:
        repo = TagRepository(db_session)

        first = repo.create_or_get_tag("  Rust ")
        second = repo.create_or_get_tag("RUST")

        assert first.id == second.id
        assert first.name == "rust"
        assert repo.get_by_name("rust").id == first.id

    def test_create_or_get_after_concurrent_insert(self, db_session) -> None:
        db_session.add(db_models.Tag(name="go"))
        db_session.commit()
        repo = TagRepository(db_session)

        created = repo.create_unique(db_models.Tag(name="go"))

        assert created is None
        assert repo.create_or_get_tag("go").name == "go"


class TestConversationTaggingRepository:
    """Tests for taggings."""

    def test_untracked_tagging_deduplicated(
        self, db_session, public_conversation
    ) -> None:
        tag = TagRepository(db_session).create_or_get_tag("misc")
        repo = ConversationTaggingRepository(db_session)

        first = repo.add_tagging(public_conversation.id, tag.id, None)
        second = repo.add_tagging(public_conversation.id, tag.id, None)

        assert first.id == second.id

    def test_one_tagging_per_tagger(
        self, db_session, alice, bob, public_conversation
    ) -> None:
        tag = TagRepository(db_session).create_or_get_tag("misc")
        repo = ConversationTaggingRepository(db_session)

        repo.add_tagging(public_conversation.id, tag.id, alice.id)
        repo.add_tagging(public_conversation.id, tag.id, bob.id)
        repo.add_tagging(public_conversation.id, tag.id, bob.id)

        counts = TagRepository(db_session).get_tag_counts_for_conversation(
            public_conversation.id
        )
        assert [(t.name, n) for t, n in counts] == [("misc", 2)]
