"""문항 수정 전 버전 스냅샷 저장 규칙을 검증하는 자동화 테스트입니다."""

import pytest

from qbank.models.content_version import ContentVersion
from qbank.models.question import Question
from qbank.schemas.question import QuestionOptionIn, QuestionUpdate
from qbank.services import event_service, question_service, status_service, version_service
from qbank.utils.errors import NotFoundError, ValidationError
from tests.conftest import actor_for


def _version_numbers(db, question_id):
    rows = (
        db.query(ContentVersion.version_number)
        .filter(ContentVersion.question_id == question_id)
        .order_by(ContentVersion.version_number)
        .all()
    )
    return [row[0] for row in rows]


def test_versions_are_gap_free_from_one(db, seed_users, seed_question):
    editor = actor_for(db, seed_users["editor"])
    for i in range(3):
        question_service.update_question(
            db, seed_question.question_id, QuestionUpdate(question_text=f"rev {i}"), editor
        )
    assert _version_numbers(db, seed_question.question_id) == [1, 2, 3]
    listed = question_service.get_versions(db, seed_question.question_id, editor)
    assert [row.version_number for row in listed] == [3, 2, 1]


def test_snapshot_round_trips_pre_update_state(db, seed_users, seed_question):
    editor = actor_for(db, seed_users["editor"])
    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    before = version_service.question_snapshot(question)

    question_service.update_question(
        db,
        seed_question.question_id,
        QuestionUpdate(
            question_text="3 + 4 = ?",
            options=[QuestionOptionIn(option_text="7", is_correct=True)],
            change_summary="문항 교체",
        ),
        editor,
    )

    row = question_service.get_version(db, seed_question.question_id, 1, editor)
    assert row.change_summary == "문항 교체"
    assert version_service.parse_snapshot(row) == before
    assert before["question_text"] == "2 + 3 = ?"
    assert [option["option_text"] for option in before["options"]] == ["4", "5"]

    db.expire_all()
    current = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert current.question_text == "3 + 4 = ?"
    assert [option.option_text for option in current.options] == ["7"]


def test_failed_snapshot_aborts_update(db, seed_users, seed_question, monkeypatch):
    editor = actor_for(db, seed_users["editor"])

    def broken(*args, **kwargs):
        raise RuntimeError("snapshot store unavailable")

    monkeypatch.setattr(version_service, "snapshot_before_update", broken)
    with pytest.raises(RuntimeError):
        question_service.update_question(
            db, seed_question.question_id, QuestionUpdate(question_text="never"), editor
        )

    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.question_text == "2 + 3 = ?"


def test_failed_update_discards_snapshot(db, seed_users, seed_question, monkeypatch):
    editor = actor_for(db, seed_users["editor"])

    def broken(options):
        raise RuntimeError("bad options")

    monkeypatch.setattr(question_service, "_build_options", broken)
    with pytest.raises(RuntimeError):
        question_service.update_question(
            db,
            seed_question.question_id,
            QuestionUpdate(question_text="half", options=[QuestionOptionIn(option_text="x")]),
            editor,
        )

    db.expire_all()
    assert _version_numbers(db, seed_question.question_id) == []
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.question_text == "2 + 3 = ?"


def test_status_change_then_edit(db, reference, seed_users, seed_question):
    editor = actor_for(db, seed_users["editor"])
    question_id = seed_question.question_id

    result = status_service.transition_status(
        db, question_id, reference["statuses"]["pending_review"].status_id, editor, "검토 요청"
    )
    assert result.question.status_name == "pending_review"
    assert status_service.get_history(db, question_id, editor)["total"] == 1
    assert _version_numbers(db, question_id) == []

    question_service.update_question(db, question_id, QuestionUpdate(question_text="edited"), editor)
    assert _version_numbers(db, question_id) == [1]
    snapshot = version_service.parse_snapshot(version_service.get_version(db, question_id, 1))
    assert snapshot["question_text"] == "2 + 3 = ?"
    assert snapshot["status_name"] == "pending_review"


def test_status_is_not_patchable(db, seed_users, seed_question):
    editor = actor_for(db, seed_users["editor"])
    with pytest.raises(ValidationError):
        question_service.update_question(db, seed_question.question_id, QuestionUpdate(), editor)
    assert "status_id" not in QuestionUpdate.model_fields


def test_missing_version_is_not_found(db, seed_users, seed_question):
    editor = actor_for(db, seed_users["editor"])
    with pytest.raises(NotFoundError):
        question_service.get_version(db, seed_question.question_id, 1, editor)


def test_content_versioned_event(db, seed_users, seed_question):
    received = []
    event_service.subscribe(event_service.CONTENT_VERSIONED, lambda event, payload: received.append(payload))
    editor = actor_for(db, seed_users["editor"])
    question_service.update_question(db, seed_question.question_id, QuestionUpdate(explanation="더하기"), editor)
    assert received == [
        {
            "question_id": seed_question.question_id,
            "company_id": seed_question.company_id,
            "version_number": 1,
            "changed_by": seed_users["editor"].user_id,
        }
    ]


def test_soft_delete_skips_state_machine(db, seed_users, seed_question):
    owner = actor_for(db, seed_users["owner"])
    status_id = seed_question.status_id
    assert question_service.delete_question(db, seed_question.question_id, owner) is True

    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.is_active is False
    assert question.status_id == status_id
    with pytest.raises(NotFoundError):
        question_service.get_question(db, seed_question.question_id, owner)
