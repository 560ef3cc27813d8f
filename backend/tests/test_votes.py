"""문항 투표(등록/변경/토글 취소/집계/이력)를 검증하는 자동화 테스트입니다."""

import pytest

from qbank.models.vote import Vote, VoteHistory
from qbank.services import vote_service
from qbank.utils.errors import ForbiddenError, NotFoundError
from tests.conftest import actor_for, auth_headers

UPVOTE = 1
DOWNVOTE = 2
FAVORITE = 3


def test_vote_types_are_seeded(db, seed_users, seed_company):
    editor = actor_for(db, seed_users["editor"])
    types = vote_service.get_vote_types(db, editor)
    assert [(t.name, t.score_impact) for t in types] == [
        ("upvote", 1),
        ("downvote", -1),
        ("favorite", 0),
        ("report", 0),
    ]


def test_cast_change_and_toggle_vote(db, seed_users, seed_question):
    qid = seed_question.question_id
    reviewer = actor_for(db, seed_users["reviewer"])

    added = vote_service.cast_vote(db, qid, UPVOTE, reviewer)
    assert added["action"] == "added"
    assert added["vote"].vote_type_name == "upvote"

    updated = vote_service.cast_vote(db, qid, DOWNVOTE, reviewer)
    assert updated["action"] == "updated"
    assert updated["vote"].vote_id == added["vote"].vote_id
    assert updated["vote"].vote_type_name == "downvote"

    removed = vote_service.cast_vote(db, qid, DOWNVOTE, reviewer)
    assert removed == {"action": "removed", "vote": None}
    assert db.query(Vote).filter(Vote.question_id == qid).count() == 0

    history = vote_service.get_vote_history(db, qid, reviewer)
    assert history["total"] == 3
    assert [row.action for row in history["items"]] == ["removed", "updated", "added"]
    assert history["items"][1].old_vote_type_id == UPVOTE
    assert history["items"][1].new_vote_type_id == DOWNVOTE


def test_summary_counts_score_and_own_vote(db, seed_users, seed_question):
    qid = seed_question.question_id
    editor = actor_for(db, seed_users["editor"])
    reviewer = actor_for(db, seed_users["reviewer"])
    owner = actor_for(db, seed_users["owner"])
    vote_service.cast_vote(db, qid, UPVOTE, editor)
    vote_service.cast_vote(db, qid, UPVOTE, reviewer)
    vote_service.cast_vote(db, qid, DOWNVOTE, owner)

    summary = vote_service.get_vote_summary(db, qid, reviewer)

    assert summary["total_score"] == 1
    by_name = {row["name"]: row for row in summary["types"]}
    assert by_name["upvote"]["count"] == 2
    assert by_name["upvote"]["users"] == ["editor@acme.test", "reviewer@acme.test"]
    assert by_name["downvote"]["count"] == 1
    assert by_name["favorite"]["count"] == 0
    assert summary["user_vote"].vote_type_id == UPVOTE

    page = vote_service.list_votes(db, qid, reviewer, vote_type_id=UPVOTE)
    assert page["total"] == 2


def test_unknown_vote_type_is_not_found(db, seed_users, seed_question):
    reviewer = actor_for(db, seed_users["reviewer"])
    with pytest.raises(NotFoundError):
        vote_service.cast_vote(db, seed_question.question_id, 99, reviewer)


def test_voting_requires_permission_and_tenant_access(db, seed_users, seed_question):
    qid = seed_question.question_id
    with pytest.raises(ForbiddenError):
        vote_service.cast_vote(db, qid, UPVOTE, actor_for(db, seed_users["hr"]))
    with pytest.raises(ForbiddenError):
        vote_service.get_vote_summary(db, qid, actor_for(db, seed_users["outsider"]))


def test_only_owner_or_admin_removes_vote(db, seed_users, seed_question):
    qid = seed_question.question_id
    editor = actor_for(db, seed_users["editor"])
    vote_id = vote_service.cast_vote(db, qid, FAVORITE, editor)["vote"].vote_id

    with pytest.raises(ForbiddenError):
        vote_service.remove_vote(db, vote_id, actor_for(db, seed_users["reviewer"]))

    assert vote_service.remove_vote(db, vote_id, actor_for(db, seed_users["admin"])) is True
    row = db.query(VoteHistory).filter(VoteHistory.question_id == qid).order_by(VoteHistory.history_id.desc()).first()
    assert row.action == "removed"
    assert row.user_id == seed_users["editor"].user_id
    assert row.changed_by == seed_users["admin"].user_id
    with pytest.raises(NotFoundError):
        vote_service.remove_vote(db, vote_id, editor)


def test_my_votes_are_company_scoped(db, seed_users, seed_company, seed_question):
    editor = actor_for(db, seed_users["editor"])
    vote_service.cast_vote(db, seed_question.question_id, UPVOTE, editor)

    page = vote_service.get_my_votes(db, editor, seed_company["company"].company_id)
    assert page["total"] == 1
    assert page["items"][0].question_id == seed_question.question_id
    reviewer = actor_for(db, seed_users["reviewer"])
    assert vote_service.get_my_votes(db, reviewer, seed_company["company"].company_id)["total"] == 0


def test_vote_endpoints(client, seed_users, seed_company, seed_question):
    qid = seed_question.question_id
    editor = auth_headers(client, "editor@acme.test")

    resp = client.post(f"/api/questions/{qid}/votes", json={"vote_type_id": UPVOTE}, headers=editor)
    assert resp.status_code == 201
    body = resp.json()
    assert body["action"] == "added"
    vote_id = body["vote"]["vote_id"]

    summary = client.get(f"/api/questions/{qid}/votes/summary", headers=editor).json()
    assert summary["total_score"] == 1
    assert summary["user_vote"]["vote_id"] == vote_id

    mine = client.get(
        "/api/votes/me", params={"company_id": seed_company["company"].company_id}, headers=editor
    ).json()
    assert [row["vote_id"] for row in mine["items"]] == [vote_id]

    assert client.delete(f"/api/votes/{vote_id}", headers=editor).status_code == 200
    history = client.get(f"/api/questions/{qid}/votes/history", headers=editor).json()
    assert [row["action"] for row in history["items"]] == ["removed", "added"]

    hr = auth_headers(client, "hr@acme.test")
    resp = client.post(f"/api/questions/{qid}/votes", json={"vote_type_id": UPVOTE}, headers=hr)
    assert resp.status_code == 403
