# tests/services/test_engagement.py
"""Tests for the engagement ledger."""

import pytest
from conftest import make_post
from sqlalchemy.exc import IntegrityError

from pulseboard.core.errors import Conflict, Forbidden, NotFound, Unauthenticated, ValidationFailed
from pulseboard.models import PostLike, PostUnlike
from pulseboard.repositories import EngagementRepository, PostRepository
from pulseboard.services.engagement import EngagementEvent, EngagementLedger


@pytest.fixture()
def events() -> list[EngagementEvent]:
    return []


@pytest.fixture()
def ledger(db_session, events) -> EngagementLedger:
    return EngagementLedger(db_session, listeners=[events.append])


def _counts(db_session, post_id: int) -> dict[str, int]:
    return PostRepository(db_session).counts_for([post_id])[post_id]


def test_like_creates_reaction_and_emits_event(ledger, events, test_post, other_user, test_user) -> None:
    result = ledger.like(test_post.id, other_user.id)

    assert result.active is True
    assert result.post_id == test_post.id
    assert events == [
        EngagementEvent(liker_id=other_user.id, post_id=test_post.id, post_owner_id=test_user.id)
    ]
    assert result.event == events[0]
    assert _counts(ledger.db, test_post.id)["likes"] == 1


def test_second_like_toggles_off_without_event(ledger, events, test_post, other_user) -> None:
    first = ledger.like(test_post.id, other_user.id)
    second = ledger.like(test_post.id, other_user.id)

    assert second.active is False
    assert second.reaction_id == first.reaction_id
    assert second.event is None
    assert len(events) == 1
    assert ledger.reaction_state(test_post.id, other_user.id) == (False, False)


def test_unlike_clears_existing_like(ledger, events, test_post, other_user) -> None:
    ledger.like(test_post.id, other_user.id)
    result = ledger.unlike(test_post.id, other_user.id)

    assert result.active is True
    assert ledger.reaction_state(test_post.id, other_user.id) == (False, True)
    counts = _counts(ledger.db, test_post.id)
    assert counts["likes"] == 0
    assert counts["unlikes"] == 1
    # Only the original like produced an event.
    assert len(events) == 1


def test_like_clears_existing_unlike(ledger, test_post, other_user) -> None:
    ledger.unlike(test_post.id, other_user.id)
    ledger.like(test_post.id, other_user.id)

    repo = EngagementRepository(ledger.db)
    assert repo.has_reaction(PostLike, test_post.id, other_user.id)
    assert not repo.has_reaction(PostUnlike, test_post.id, other_user.id)


def test_unlike_never_emits(ledger, events, test_post, other_user) -> None:
    ledger.unlike(test_post.id, other_user.id)
    ledger.unlike(test_post.id, other_user.id)
    assert events == []


def test_self_like_is_emitted(ledger, events, test_post, test_user) -> None:
    ledger.like(test_post.id, test_user.id)
    assert events[0].liker_id == events[0].post_owner_id == test_user.id


def test_reactions_on_missing_post_raise_not_found(ledger, other_user) -> None:
    with pytest.raises(NotFound, match="Post does not exist!"):
        ledger.like(9999, other_user.id)
    with pytest.raises(NotFound):
        ledger.unlike(9999, other_user.id)


def test_add_comment_rejects_blank_text(ledger, test_post, other_user) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        ledger.add_comment(test_post.id, other_user.id, "   ")
    assert excinfo.value.data == [{"message": "Comment text can not be empty!"}]


def test_edit_comment_edited_flag_is_monotonic(ledger, test_post, other_user) -> None:
    comment = ledger.add_comment(test_post.id, other_user.id, "a")
    assert comment.edited is False

    same = ledger.edit_comment(test_post.id, comment.id, other_user.id, "a")
    assert same.edited is False

    changed = ledger.edit_comment(test_post.id, comment.id, other_user.id, "b")
    assert changed.edited is True
    assert changed.text == "b"

    reverted = ledger.edit_comment(test_post.id, comment.id, other_user.id, "a")
    assert reverted.edited is True

    resubmitted = ledger.edit_comment(test_post.id, comment.id, other_user.id, "a")
    assert resubmitted.edited is True


def test_edit_comment_by_other_user_is_forbidden(ledger, test_post, test_user, other_user) -> None:
    comment = ledger.add_comment(test_post.id, other_user.id, "mine")
    with pytest.raises(Forbidden, match="Not authorized."):
        ledger.edit_comment(test_post.id, comment.id, test_user.id, "hijacked")


def test_delete_comment(ledger, test_post, other_user) -> None:
    comment = ledger.add_comment(test_post.id, other_user.id, "bye")
    comment_id = comment.id

    assert ledger.delete_comment(test_post.id, comment_id, other_user.id) == comment_id
    assert ledger.list_comments(test_post.id) == []
    with pytest.raises(NotFound, match="This comment does not exist!"):
        ledger.delete_comment(test_post.id, comment_id, other_user.id)


def test_comment_must_belong_to_post(ledger, db_session, test_post, test_user, other_user) -> None:
    another = make_post(db_session, test_user, title="Another")
    comment = ledger.add_comment(test_post.id, other_user.id, "here")
    with pytest.raises(NotFound):
        ledger.edit_comment(another.id, comment.id, other_user.id, "there")


def test_favorite_toggles_membership(ledger, test_post, other_user) -> None:
    assert ledger.toggle_favorite(other_user.id, test_post.id).favorited is True
    assert EngagementRepository(ledger.db).favorite_post_ids(other_user.id) == [test_post.id]

    assert ledger.toggle_favorite(other_user.id, test_post.id).favorited is False
    assert EngagementRepository(ledger.db).favorite_post_ids(other_user.id) == []


def test_favorite_missing_post_raises_not_found(ledger, other_user) -> None:
    with pytest.raises(NotFound):
        ledger.toggle_favorite(other_user.id, 4242)


@pytest.mark.parametrize("action", ["like", "unlike"])
def test_reaction_by_missing_user_is_unauthenticated(ledger, events, db_session, test_post, action) -> None:
    with pytest.raises(Unauthenticated, match="Invalid user."):
        getattr(ledger, action)(test_post.id, 9999)

    assert events == []
    assert _counts(db_session, test_post.id) == {"likes": 0, "unlikes": 0, "comments": 0}


def test_comment_and_favorite_by_missing_user_are_unauthenticated(ledger, test_post) -> None:
    with pytest.raises(Unauthenticated):
        ledger.add_comment(test_post.id, 9999, "ghost")
    with pytest.raises(Unauthenticated):
        ledger.toggle_favorite(9999, test_post.id)


def test_lost_insert_race_is_conflict(mocker, ledger, events, test_post, other_user) -> None:
    mocker.patch.object(
        ledger.repo, "insert_reaction", side_effect=IntegrityError("INSERT", {}, Exception("UNIQUE"))
    )
    mocker.patch.object(ledger.repo, "has_reaction", return_value=True)

    with pytest.raises(Conflict, match="Reaction already recorded"):
        ledger.like(test_post.id, other_user.id)
    assert events == []


def test_other_integrity_errors_are_not_reported_as_conflict(mocker, ledger, test_post, other_user) -> None:
    mocker.patch.object(
        ledger.repo, "insert_reaction", side_effect=IntegrityError("INSERT", {}, Exception("FOREIGN KEY"))
    )
    mocker.patch.object(ledger.repo, "has_reaction", return_value=False)

    with pytest.raises(IntegrityError):
        ledger.like(test_post.id, other_user.id)
