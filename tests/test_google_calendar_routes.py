"""API tests for the Google Calendar connection routes."""

from conftest import company_headers, make_company, make_member, member_headers

from studio.routes import google_calendar as routes


def test_member_checks_own_connection(client, db, calendar):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    calendar.connected.add(mia.id)

    response = client.post("/google-calendar/check-auth", json={}, headers=member_headers(mia))

    assert response.json() == {"success": True, "isConnected": True, "memberId": mia.id}


def test_company_must_name_a_member(client, db):
    company = make_company(db)

    response = client.post("/google-calendar/check-auth", json={}, headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Member ID is required"


def test_member_cannot_manage_someone_else(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    noah = make_member(db, company, "Noah")

    response = client.post("/google-calendar/check-auth", json={"memberId": noah.id}, headers=member_headers(mia))

    assert response.status_code == 403


def test_admin_may_check_a_colleague(client, db):
    company = make_company(db)
    boss = make_member(db, company, "Boss", is_admin=True)
    noah = make_member(db, company, "Noah")

    response = client.post("/google-calendar/check-auth", json={"memberId": noah.id}, headers=member_headers(boss))

    assert response.json()["isConnected"] is False


def test_member_of_other_company_is_not_found(client, db):
    company = make_company(db)
    other = make_company(db, name="Other", email="other@studio.test")
    stranger = make_member(db, other, "Stranger")

    response = client.post(
        "/google-calendar/check-auth", json={"memberId": stranger.id}, headers=company_headers(company)
    )

    assert response.status_code == 404


def test_auth_url_requires_configuration(client, db, monkeypatch):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    monkeypatch.setattr(routes, "GOOGLE_CLIENT_ID", None)

    response = client.post("/google-calendar/auth", json={}, headers=member_headers(mia))

    assert response.status_code == 400
    assert response.json()["message"] == "Google Calendar not configured"


def test_auth_url_carries_member_state(client, db, monkeypatch):
    company = make_company(db)
    mia = make_member(db, company, "Mia")
    monkeypatch.setattr(routes, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(routes, "GOOGLE_CLIENT_SECRET", "client-secret")

    response = client.post("/google-calendar/auth", json={}, headers=member_headers(mia))

    assert response.json()["authUrl"].endswith(f"state={mia.id}")


def test_callback_without_code_redirects_with_error(client, db):
    response = client.get("/google-calendar/callback?error=access_denied", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].endswith("/settings?calendar=error&message=access_denied")
