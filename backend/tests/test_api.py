"""HTTP API 계층(인증, 오류 본문, 주요 흐름)을 검증하는 자동화 테스트입니다."""

from tests.conftest import auth_headers


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_login_and_permissions(client, seed_users, seed_company):
    resp = client.post("/api/auth/login", json={"email": "Editor@Acme.test"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "editor@acme.test"

    headers = auth_headers(client, "editor@acme.test")
    me = client.get("/api/auth/me/permissions", headers=headers).json()
    assert me["roles"] == ["editor"]
    assert "question:create" in me["permissions"]
    assert "review:update" not in me["permissions"]

    admin = client.get("/api/auth/me/permissions", headers=auth_headers(client, "admin@qbank.test")).json()
    assert admin["is_system_admin"] is True
    assert "status:manage" in admin["permissions"]


def test_unknown_user_cannot_login(client, seed_users):
    resp = client.post("/api/auth/login", json={"email": "nobody@acme.test"})
    assert resp.status_code == 401


def test_requests_without_token_are_rejected(client, seed_users):
    resp = client.get("/api/companies")
    assert resp.status_code in (401, 403)


def test_company_flow(client, reference, seed_users):
    owner = auth_headers(client, "owner@acme.test")
    resp = client.post("/api/companies", json={"company_name": "Beta"}, headers=owner)
    assert resp.status_code == 201
    company_id = resp.json()["company_id"]

    resp = client.post(
        f"/api/companies/{company_id}/employees",
        json={"user_id": seed_users["editor"].user_id},
        headers=owner,
    )
    assert resp.status_code == 201
    employee_id = resp.json()["employee_id"]

    resp = client.post(
        f"/api/companies/{company_id}/employees/{employee_id}/roles",
        json={"role_id": reference["roles"]["editor"].role_id},
        headers=owner,
    )
    assert resp.status_code == 200
    assert resp.json()["role_name"] == "editor"

    editor = auth_headers(client, "editor@acme.test")
    access = client.get(f"/api/companies/{company_id}/access", headers=editor).json()
    assert access == {"allowed": True, "reason": "company_employee"}

    outsider = auth_headers(client, "outsider@other.test")
    resp = client.get(f"/api/companies/{company_id}", headers=outsider)
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN"

    resp = client.get("/api/companies/9999", headers=outsider)
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "NOT_FOUND"


def test_forbidden_transition_body(client, reference, seed_users, seed_question):
    editor = auth_headers(client, "editor@acme.test")
    qid = seed_question.question_id

    resp = client.post(
        f"/api/questions/{qid}/status",
        json={"to_status_id": reference["statuses"]["pending_review"].status_id, "comments": "검토 요청"},
        headers=editor,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["question"]["status_name"] == "pending_review"
    assert body["history"]["to_status_name"] == "pending_review"

    resp = client.post(
        f"/api/questions/{qid}/status",
        json={"to_status_id": reference["statuses"]["approved"].status_id},
        headers=editor,
    )
    assert resp.status_code == 403
    detail = resp.json()["detail"]
    assert detail["code"] == "FORBIDDEN_TRANSITION"
    assert detail["valid_transitions"] == ["draft"]

    transitions = client.get(f"/api/questions/{qid}/status/transitions", headers=editor).json()
    assert [row["name"] for row in transitions] == ["draft"]
    history = client.get(f"/api/questions/{qid}/status/history", headers=editor).json()
    assert history["total"] == 1


def test_versions_endpoints(client, seed_users, seed_question):
    editor = auth_headers(client, "editor@acme.test")
    qid = seed_question.question_id

    resp = client.put(
        f"/api/questions/{qid}",
        json={"question_text": "2 + 2 = ?", "change_summary": "숫자 변경"},
        headers=editor,
    )
    assert resp.status_code == 200
    assert resp.json()["question_text"] == "2 + 2 = ?"

    versions = client.get(f"/api/questions/{qid}/versions", headers=editor).json()
    assert [row["version_number"] for row in versions] == [1]

    detail = client.get(f"/api/questions/{qid}/versions/1", headers=editor).json()
    assert detail["snapshot"]["question_text"] == "2 + 3 = ?"
    assert detail["change_summary"] == "숫자 변경"

    assert client.get(f"/api/questions/{qid}/versions/2", headers=editor).status_code == 404
    assert client.put(f"/api/questions/{qid}", json={}, headers=editor).status_code == 400


def test_review_conflict_and_approval(client, reference, seed_users, seed_question):
    editor = auth_headers(client, "editor@acme.test")
    reviewer = auth_headers(client, "reviewer@acme.test")
    qid = seed_question.question_id

    resp = client.post("/api/reviews", json={"question_id": qid, "priority": 3}, headers=editor)
    assert resp.status_code == 201
    review_id = resp.json()["review_id"]

    resp = client.post("/api/reviews", json={"question_id": qid}, headers=editor)
    assert resp.status_code == 409
    assert resp.json()["detail"]["code"] == "CONFLICT"

    resp = client.put(f"/api/reviews/{review_id}/status", json={"status_id": 3}, headers=reviewer)
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    question = client.get(f"/api/questions/{qid}", headers=editor).json()
    assert question["status_name"] == "published"

    resp = client.put(
        f"/api/reviews/{review_id}/status", json={"status_id": 2, "comment": "다시 검토"}, headers=reviewer
    )
    assert resp.status_code == 200
    assert resp.json()["is_active"] is True

    resp = client.post("/api/reviews", json={"question_id": qid}, headers=editor)
    assert resp.status_code == 409


def test_question_listing_is_tenant_scoped(client, seed_users, seed_company, seed_question):
    company_id = seed_company["company"].company_id
    editor = auth_headers(client, "editor@acme.test")
    page = client.get("/api/questions", params={"company_id": company_id}, headers=editor).json()
    assert page["total"] == 1
    assert page["items"][0]["question_id"] == seed_question.question_id

    outsider = auth_headers(client, "outsider@other.test")
    resp = client.get("/api/questions", params={"company_id": company_id}, headers=outsider)
    assert resp.status_code == 403
