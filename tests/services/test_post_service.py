# tests/services/test_post_service.py
"""Tests for post creation, update and deletion."""

import pytest
from conftest import identity_for, make_post
from sqlalchemy import func, select

from pulseboard.core.enums import PostStatus
from pulseboard.core.errors import Forbidden, NotFound, ValidationFailed
from pulseboard.models import Comment, Notification, Post, PostLike
from pulseboard.schemas.post import PostCreate, PostUpdate
from pulseboard.services import post_service
from pulseboard.services.engagement import EngagementLedger
from pulseboard.services.images import ImageStore
from pulseboard.services.notifications import NotificationPipeline


@pytest.fixture
def images(mocker):
    return mocker.MagicMock(spec=ImageStore)


def _count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


def test_create_post_normalizes_status(db_session, test_user) -> None:
    data = PostCreate(title="Hello", content="World", status="PRIVATE")

    created = post_service.create_post(db_session, identity_for(test_user), data)

    assert created.status is PostStatus.PRIVATE
    assert created.creator.id == test_user.id


def test_create_post_rejects_blank_fields(db_session, test_user) -> None:
    with pytest.raises(ValidationFailed) as excinfo:
        post_service.create_post(db_session, identity_for(test_user), PostCreate(title=" ", content="x", status="public"))
    assert excinfo.value.data == [{"message": "Please fill all inputs!"}]


def test_create_post_with_unknown_category(db_session, test_user) -> None:
    with pytest.raises(NotFound):
        post_service.create_post(
            db_session,
            identity_for(test_user),
            PostCreate(title="t", content="c", status="public", category_ids=[77]),
        )


def test_update_by_non_owner_is_forbidden(db_session, test_post, other_user, images) -> None:
    with pytest.raises(Forbidden, match="You do NOT have access to update this post!"):
        post_service.update_post(
            db_session,
            identity_for(other_user),
            test_post.id,
            PostUpdate(title="x", content="y", status="public"),
            images,
        )


def test_admin_may_update_any_post(db_session, test_post, admin_user, images) -> None:
    updated = post_service.update_post(
        db_session,
        identity_for(admin_user),
        test_post.id,
        PostUpdate(title="edited", content="by admin", status="public"),
        images,
    )
    assert updated.title == "edited"
    images.release.assert_not_called()


def test_update_releases_replaced_image_once(db_session, test_user, images) -> None:
    post = make_post(db_session, test_user, image_url="images/old.png")

    post_service.update_post(
        db_session,
        identity_for(test_user),
        post.id,
        PostUpdate(title="t", content="c", status="public", image_url="images/new.png"),
        images,
    )

    images.release.assert_called_once_with("images/old.png")


def test_update_status(db_session, test_post, test_user) -> None:
    updated = post_service.update_status(db_session, identity_for(test_user), test_post.id, PostStatus.PRIVATE)
    assert updated.status is PostStatus.PRIVATE


def test_delete_by_non_owner_is_forbidden(db_session, test_post, other_user, images) -> None:
    with pytest.raises(Forbidden):
        post_service.delete_post(db_session, identity_for(other_user), test_post.id, images)
    assert db_session.get(Post, test_post.id) is not None


def test_delete_removes_engagement_and_releases_image_once(db_session, test_user, other_user, images) -> None:
    post = make_post(db_session, test_user, image_url="images/cat.png")
    post_id = post.id
    pipeline = NotificationPipeline(db_session)
    ledger = EngagementLedger(db_session, listeners=[pipeline.handle])
    ledger.like(post_id, other_user.id)
    ledger.add_comment(post_id, other_user.id, "nice")
    ledger.toggle_favorite(other_user.id, post_id)

    assert post_service.delete_post(db_session, identity_for(test_user), post_id, images) == post_id

    images.release.assert_called_once_with("images/cat.png")
    assert db_session.get(Post, post_id) is None
    assert _count(db_session, PostLike) == 0
    assert _count(db_session, Comment) == 0
    notification = db_session.execute(select(Notification)).scalars().one()
    db_session.refresh(notification)
    assert notification.post_id is None


def test_admin_may_delete_any_post(db_session, test_post, admin_user, images) -> None:
    post_service.delete_post(db_session, identity_for(admin_user), test_post.id, images)
    images.release.assert_not_called()
