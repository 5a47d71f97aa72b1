"""API tests for company members."""

from conftest import company_headers, d, make_company, make_event, make_member, make_project, make_role, member_headers

from studio.domain.members import service as member_service
from studio.models import EventAssignment, Member
from studio.security_utils import hash_password


def _member_body(company, role, **overrides):
    body = {
        "name": "Iris Vale",
        "email": "Iris@Lumen.test",
        "roleId": role.id,
        "companyId": company.id,
        "phone": "+44 20 7946 0000",
        "skills": "portraits, lighting",
    }
    body.update(overrides)
    return body


def test_create_member_emails_credentials(client, db, sent_emails):
    company = make_company(db)
    role = make_role(db, company)

    response = client.post("/member/add", json=_member_body(company, role), headers=company_headers(company))

    assert response.status_code == 201
    member = response.json()["member"]
    assert member["email"] == "iris@lumen.test"
    assert member["role"] == "Photographer"
    assert member["skills"] == ["portraits", "lighting"]
    assert sent_emails[0]["to"] == "iris@lumen.test"


def test_create_member_rejects_duplicate_email(client, db):
    company = make_company(db)
    role = make_role(db, company)
    make_member(db, company, "Iris", email="iris@lumen.test")

    response = client.post("/member/add", json=_member_body(company, role), headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Email already exists"


def test_create_member_enforces_limit(client, db, monkeypatch):
    monkeypatch.setattr(member_service, "MAX_MEMBERS_PER_COMPANY", 1)
    company = make_company(db)
    role = make_role(db, company)
    make_member(db, company, "Existing")

    response = client.post("/member/add", json=_member_body(company, role), headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Member limit reached. Maximum 1 members per company."


def test_create_member_rejects_foreign_role(client, db):
    company = make_company(db)
    other = make_company(db, name="Other", email="other@studio.test")
    foreign_role = make_role(db, other)

    response = client.post("/member/add", json=_member_body(company, foreign_role), headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Role not found or doesn't belong to your company"


def test_plain_member_cannot_add_members(client, db):
    company = make_company(db)
    role = make_role(db, company)
    mia = make_member(db, company, "Mia")

    response = client.post("/member/add", json=_member_body(company, role), headers=member_headers(mia))

    assert response.status_code == 403


def test_member_login(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    mia.password_hash = hash_password("secret123")
    db.commit()

    ok = client.post("/member/login", json={"email": "MIA@lumen.test", "password": "secret123"})
    wrong = client.post("/member/login", json={"email": "mia@lumen.test", "password": "nope"})

    assert ok.status_code == 200
    assert ok.json()["user"]["company"]["name"] == company.name
    assert ok.json()["token"]
    assert wrong.status_code == 401
    assert wrong.json() == {"success": False, "message": "Invalid email or password"}


def test_inactive_member_cannot_log_in(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia", active=False)
    mia.password_hash = hash_password("secret123")
    db.commit()

    response = client.post("/member/login", json={"email": "mia@lumen.test", "password": "secret123"})

    assert response.status_code == 403


def test_toggle_status_and_admin(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    headers = company_headers(company)

    status = client.patch(f"/member/{mia.id}/toggle-status", headers=headers).json()
    admin = client.patch(f"/member/{mia.id}/toggle-admin", headers=headers).json()

    assert status["newStatus"] is False
    assert status["message"] == "Member deactivated successfully"
    assert admin["isAdmin"] is True


def test_ring_color_must_be_hex(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")

    bad = client.patch(f"/member/{mia.id}/ring-color", json={"ringColor": "blue"}, headers=member_headers(mia))
    good = client.patch(f"/member/{mia.id}/ring-color", json={"ringColor": "#00aaff"}, headers=member_headers(mia))

    assert bad.status_code == 400
    assert good.json()["member"]["ringColor"] == "#00aaff"


def test_member_cannot_update_someone_else(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    noah = make_member(db, company, "Noah")

    response = client.put(f"/member/update/{noah.id}", json={"bio": "hi"}, headers=member_headers(mia))

    assert response.status_code == 403


def test_members_by_company_month_view(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    june = make_project(db, company, "June shoot", d("2024-06-10"), d("2024-06-12"), 9, 17, members=[mia])
    make_event(db, june, "Day one", d("2024-06-10"), 9, 17, members=[mia])
    make_project(db, company, "August shoot", d("2024-08-01"), d("2024-08-01"), 9, 17, members=[mia])

    response = client.post(
        "/member/by-company",
        json={"companyId": company.id, "viewType": "month", "month": 6, "year": 2024},
        headers=company_headers(company),
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["dateRange"] == {"startDate": "2024-06-01", "endDate": "2024-06-30"}
    member = payload["members"][0]
    assert [p["name"] for p in member["projects"]] == ["June shoot"]
    assert [e["name"] for e in member["events"]] == ["Day one"]


def test_members_by_company_week_view(client, db):
    company = make_company(db)

    response = client.post(
        "/member/by-company",
        json={"companyId": company.id, "viewType": "week", "week": 1, "year": 2024},
        headers=company_headers(company),
    )

    assert response.json()["dateRange"] == {"startDate": "2024-01-01", "endDate": "2024-01-07"}


def test_members_by_company_requires_view_type(client, db):
    company = make_company(db)

    response = client.post(
        "/member/by-company", json={"companyId": company.id, "viewType": "day"}, headers=company_headers(company)
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Valid viewType (month or week) is required"


def test_upload_photo_replaces_previous(client, db, uploads):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    headers = member_headers(mia)

    first = client.post(
        "/member/upload-photo",
        data={"memberId": mia.id},
        files={"photo": ("me.png", b"\x89PNG", "image/png")},
        headers=headers,
    ).json()
    second = client.post(
        "/member/upload-photo",
        data={"memberId": mia.id},
        files={"photo": ("me2.jpg", b"\xff\xd8", "image/jpeg")},
        headers=headers,
    ).json()

    assert first["member"]["profilePhoto"].startswith("https://files.test/members/")
    assert len(uploads) == 1
    assert second["member"]["profilePhoto"].endswith(".jpg")


def test_upload_photo_rejects_documents(client, db, uploads):
    company = make_company(db)
    mia = make_member(db, company, "Mia")

    response = client.post(
        "/member/upload-photo",
        data={"memberId": mia.id},
        files={"photo": ("cv.pdf", b"%PDF", "application/pdf")},
        headers=member_headers(mia),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "File type application/pdf not allowed"


def test_delete_member_cleans_up_calendar(client, db, calendar):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    project = make_project(db, company, "June shoot", d("2024-06-10"), d("2024-06-10"), 9, 17, members=[mia])
    event = make_event(db, project, "Day one", d("2024-06-10"), 9, 17, members=[mia])
    event.assignments[0].google_event_id = "g-day-one"
    db.commit()
    member_id = mia.id

    response = client.delete(f"/member/delete/{member_id}", headers=company_headers(company))

    assert response.status_code == 200
    assert calendar.deleted == [(member_id, "g-day-one")]
    db.expire_all()
    assert db.query(Member).filter(Member.id == member_id).count() == 0
    assert db.query(EventAssignment).filter(EventAssignment.member_id == member_id).count() == 0
