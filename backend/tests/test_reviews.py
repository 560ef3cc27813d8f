"""리뷰 워크플로(생성/승인/담당자 지정)를 검증하는 자동화 테스트입니다."""

import pytest

from qbank.models.question import Question
from qbank.models.question_status import StatusHistory
from qbank.models.review import Review, ReviewAssignment, ReviewHistory
from qbank.schemas.review import ReviewCommentCreate, ReviewCreate
from qbank.services import question_service, review_service
from qbank.utils.errors import ConflictError, ForbiddenError, NotFoundError
from tests.conftest import actor_for

APPROVED = 3
REJECTED = 4
IN_PROGRESS = 2


def _open_review(db, seed_users, seed_question, **kwargs):
    editor = actor_for(db, seed_users["editor"])
    return review_service.create_review(
        db, seed_question.question_id, editor, ReviewCreate(question_id=seed_question.question_id, **kwargs)
    )


def test_create_review_records_history(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question, assigned_to=seed_users["reviewer"].user_id)

    assert review.status_name == "pending"
    assert review.priority == 2
    assert review.is_active
    history = db.query(ReviewHistory).filter(ReviewHistory.review_id == review.review_id).all()
    assert [row.comments for row in history] == ["Review created"]
    assignment = db.query(ReviewAssignment).filter(ReviewAssignment.review_id == review.review_id).one()
    assert assignment.user_id == seed_users["reviewer"].user_id


def test_second_active_review_conflicts(db, seed_users, seed_question):
    first = _open_review(db, seed_users, seed_question)
    with pytest.raises(ConflictError) as exc:
        _open_review(db, seed_users, seed_question)
    assert exc.value.status_code == 409
    assert exc.value.detail["review_id"] == first.review_id


def test_concurrent_create_is_rejected_by_unique_index(db, seed_users, seed_question, monkeypatch):
    _open_review(db, seed_users, seed_question)
    # 두 번째 요청이 사전 조회에서 활성 리뷰를 보지 못한 경우
    monkeypatch.setattr(review_service, "get_active_review", lambda db, question_id: None)

    with pytest.raises(ConflictError):
        _open_review(db, seed_users, seed_question)
    assert db.query(Review).filter(Review.question_id == seed_question.question_id).count() == 1


def test_approval_publishes_question(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])

    updated = review_service.update_review_status(db, review.review_id, APPROVED, reviewer, "좋습니다")

    assert updated.status_name == "approved"
    assert not updated.is_active
    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.status_name == "published"
    assert question.published_at is not None
    rows = db.query(StatusHistory).filter(StatusHistory.question_id == seed_question.question_id).all()
    assert len(rows) == 1
    assert rows[0].to_status_name == "published"
    assert rows[0].from_status_name == "draft"
    assert rows[0].changed_by == seed_users["reviewer"].user_id


def test_failed_publish_rolls_back_review(db, seed_users, seed_question, monkeypatch):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])

    def broken(*args, **kwargs):
        raise RuntimeError("publish failed")

    monkeypatch.setattr(review_service, "apply_status_change", broken)
    with pytest.raises(RuntimeError):
        review_service.update_review_status(db, review.review_id, APPROVED, reviewer)

    db.expire_all()
    stored = db.query(Review).filter(Review.review_id == review.review_id).one()
    assert stored.status_name == "pending"
    assert stored.is_active
    assert db.query(ReviewHistory).filter(ReviewHistory.review_id == review.review_id).count() == 1
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.status_name == "draft"


def test_rejection_closes_review_and_allows_new_one(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    review_service.update_review_status(db, review.review_id, REJECTED, reviewer, "수정 필요")

    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.status_name == "draft"

    again = _open_review(db, seed_users, seed_question)
    assert again.review_id != review.review_id
    assert again.is_active


def test_closed_review_can_be_reopened(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    review_service.update_review_status(db, review.review_id, APPROVED, reviewer)

    reopened = review_service.update_review_status(db, review.review_id, IN_PROGRESS, reviewer, "reopen")

    assert reopened.status_name == "in_progress"
    assert reopened.is_active
    history = (
        db.query(ReviewHistory)
        .filter(ReviewHistory.review_id == review.review_id)
        .order_by(ReviewHistory.history_id)
        .all()
    )
    assert [row.status_id for row in history] == [1, APPROVED, IN_PROGRESS]
    assert history[-1].comments == "reopen"
    with pytest.raises(ConflictError):
        _open_review(db, seed_users, seed_question)


def test_reopen_conflicts_with_other_active_review(db, seed_users, seed_question):
    first = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    review_service.update_review_status(db, first.review_id, REJECTED, reviewer)
    second = _open_review(db, seed_users, seed_question)

    with pytest.raises(ConflictError) as exc:
        review_service.update_review_status(db, first.review_id, IN_PROGRESS, reviewer)
    assert exc.value.detail["active_review_id"] == second.review_id

    db.expire_all()
    stored = db.query(Review).filter(Review.review_id == first.review_id).one()
    assert not stored.is_active
    assert stored.status_name == "rejected"
    assert db.query(ReviewHistory).filter(ReviewHistory.review_id == first.review_id).count() == 2


def test_concurrent_reopen_is_rejected_by_unique_index(db, seed_users, seed_question, monkeypatch):
    first = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    review_service.update_review_status(db, first.review_id, REJECTED, reviewer)
    _open_review(db, seed_users, seed_question)
    monkeypatch.setattr(review_service, "get_active_review", lambda db, question_id: None)

    with pytest.raises(ConflictError):
        review_service.update_review_status(db, first.review_id, 1, reviewer)
    db.expire_all()
    active = db.query(Review).filter(Review.question_id == seed_question.question_id, Review.is_active == True)  # noqa: E712
    assert active.count() == 1


def test_closed_review_status_change_is_logged(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    review_service.update_review_status(db, review.review_id, APPROVED, reviewer)

    updated = review_service.update_review_status(db, review.review_id, REJECTED, reviewer, "재검토")

    assert updated.status_name == "rejected"
    assert not updated.is_active
    assert len(updated.history) == 3


def test_approval_of_deleted_question_does_not_publish(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    editor = actor_for(db, seed_users["editor"])
    question_service.delete_question(db, seed_question.question_id, editor)
    reviewer = actor_for(db, seed_users["reviewer"])

    updated = review_service.update_review_status(db, review.review_id, APPROVED, reviewer)

    assert updated.status_name == "approved"
    assert not updated.is_active
    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.status_name == "draft"
    assert question.published_at is None
    assert db.query(StatusHistory).filter(StatusHistory.question_id == seed_question.question_id).count() == 0


def test_in_progress_keeps_review_open(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    updated = review_service.update_review_status(db, review.review_id, 2, reviewer)
    assert updated.status_name == "in_progress"
    assert updated.is_active
    assert len(updated.history) == 2


def test_editor_cannot_update_review_status(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    editor = actor_for(db, seed_users["editor"])
    with pytest.raises(ForbiddenError):
        review_service.update_review_status(db, review.review_id, APPROVED, editor)


def test_unknown_review_status_is_not_found(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    with pytest.raises(NotFoundError):
        review_service.update_review_status(db, review.review_id, 99, reviewer)


def test_reassignment_replaces_active_assignment(db, seed_users, seed_question):
    review = _open_review(db, seed_users, seed_question, assigned_to=seed_users["editor"].user_id)
    reviewer = actor_for(db, seed_users["reviewer"])

    updated = review_service.assign_review(db, review.review_id, seed_users["reviewer"].user_id, reviewer)

    assert updated.assigned_to == seed_users["reviewer"].user_id
    assignments = db.query(ReviewAssignment).filter(ReviewAssignment.review_id == review.review_id).all()
    active = [row for row in assignments if row.is_active]
    assert len(assignments) == 2
    assert [row.user_id for row in active] == [seed_users["reviewer"].user_id]
    last = (
        db.query(ReviewHistory)
        .filter(ReviewHistory.review_id == review.review_id)
        .order_by(ReviewHistory.history_id.desc())
        .first()
    )
    assert last.status_id is None
    assert last.comments == f"Assigned to user ID: {seed_users['reviewer'].user_id}"


def test_comments_and_listing(db, seed_users, seed_question, seed_company):
    review = _open_review(db, seed_users, seed_question)
    reviewer = actor_for(db, seed_users["reviewer"])
    comment = review_service.add_comment(db, review.review_id, reviewer, ReviewCommentCreate(comment_text="확인"))
    assert comment.user_id == seed_users["reviewer"].user_id

    page = review_service.list_reviews(db, reviewer, seed_company["company"].company_id, is_active=True)
    assert page["total"] == 1
    assert page["items"][0].review_id == review.review_id

    outsider = actor_for(db, seed_users["outsider"])
    with pytest.raises(ForbiddenError):
        review_service.get_review(db, review.review_id, outsider)
