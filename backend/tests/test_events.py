"""커밋 이후 이벤트 훅 동작을 검증하는 자동화 테스트입니다."""

import logging

from qbank.models.question import Question
from qbank.services import event_service, status_service
from tests.conftest import actor_for


def test_failing_handler_does_not_roll_back(db, reference, seed_users, seed_question, caplog):
    delivered = []

    def broken(event, payload):
        raise RuntimeError("mail server down")

    event_service.subscribe(event_service.STATUS_CHANGED, broken)
    event_service.subscribe(event_service.STATUS_CHANGED, lambda event, payload: delivered.append(payload))
    editor = actor_for(db, seed_users["editor"])

    with caplog.at_level(logging.WARNING, logger="qbank.services.event_service"):
        status_service.transition_status(
            db, seed_question.question_id, reference["statuses"]["pending_review"].status_id, editor
        )

    assert "mail server down" in caplog.text
    assert len(delivered) == 1
    db.expire_all()
    question = db.query(Question).filter(Question.question_id == seed_question.question_id).one()
    assert question.status_name == "pending_review"


def test_payload_is_copied_per_handler():
    seen = []

    def mutate(event, payload):
        payload["question_id"] = -1

    event_service.subscribe(event_service.CONTENT_VERSIONED, mutate)
    event_service.subscribe(event_service.CONTENT_VERSIONED, lambda event, payload: seen.append(payload))
    event_service.emit(event_service.CONTENT_VERSIONED, {"question_id": 1})
    assert seen == [{"question_id": 1}]


def test_subscribe_is_idempotent_and_unsubscribe_stops_delivery():
    calls = []

    def handler(event, payload):
        calls.append(event)

    event_service.subscribe(event_service.ROLE_ASSIGNED, handler)
    event_service.subscribe(event_service.ROLE_ASSIGNED, handler)
    event_service.emit(event_service.ROLE_ASSIGNED, {})
    event_service.unsubscribe(event_service.ROLE_ASSIGNED, handler)
    event_service.emit(event_service.ROLE_ASSIGNED, {})
    assert calls == ["role:assigned"]
