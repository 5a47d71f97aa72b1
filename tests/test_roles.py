"""API tests for company roles."""

from conftest import company_headers, d, make_company, make_event, make_member, make_project, make_role, member_headers

from studio.models import Role


def test_list_roles_with_usage(client, db):
    company = make_company(db)
    photographer = make_role(db, company)
    make_role(db, company, name="Editor")
    make_member(db, company, "Mia", role=photographer)

    response = client.post("/role/company", json={"companyId": company.id}, headers=company_headers(company))

    assert response.status_code == 200
    roles = {r["name"]: r for r in response.json()["data"]}
    assert roles["Photographer"]["memberCount"] == 1
    assert roles["Editor"]["memberCount"] == 0


def test_create_role_rejects_duplicate_name(client, db):
    company = make_company(db)
    make_role(db, company)
    headers = company_headers(company)

    created = client.post("/role", json={"companyId": company.id, "name": " Lighting "}, headers=headers)
    duplicate = client.post("/role", json={"companyId": company.id, "name": "photographer"}, headers=headers)

    assert created.json()["data"]["name"] == "Lighting"
    assert duplicate.status_code == 400
    assert duplicate.json()["message"] == "A role with this name already exists"


def test_create_role_requires_name(client, db):
    company = make_company(db)

    response = client.post("/role", json={"companyId": company.id, "name": "  "}, headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Role name is required"


def test_plain_member_cannot_create_roles(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")

    response = client.post("/role", json={"companyId": company.id, "name": "Drone"}, headers=member_headers(mia))

    assert response.status_code == 403


def test_default_roles_skip_existing(client, db):
    company = make_company(db)
    make_role(db, company)

    response = client.post("/role/defaults", json={"companyId": company.id}, headers=company_headers(company))

    assert response.json()["message"] == "Created 3 default role(s)"
    assert db.query(Role).filter(Role.company_id == company.id).count() == 4


def test_update_role(client, db):
    company = make_company(db)
    role = make_role(db, company)
    make_role(db, company, name="Editor")
    headers = company_headers(company)

    renamed = client.put(f"/role/{role.id}", json={"name": "Lead Photographer"}, headers=headers)
    clash = client.put(f"/role/{role.id}", json={"name": "editor"}, headers=headers)

    assert renamed.json()["data"]["name"] == "Lead Photographer"
    assert clash.status_code == 400


def test_role_in_use_cannot_be_deleted(client, db):
    company = make_company(db)
    role = make_role(db, company)
    mia = make_member(db, company, "Mia", role=role)
    project = make_project(db, company, "Shoot", d("2024-06-01"), d("2024-06-01"), 9, 17, members=[mia])
    event = make_event(db, project, "Day one", d("2024-06-01"), 9, 17, members=[mia])
    event.assignments[0].role_id = role.id
    db.commit()
    headers = company_headers(company)

    usage = client.get(f"/role/{role.id}/usage", headers=headers).json()["data"]
    response = client.delete(f"/role/{role.id}", headers=headers)

    assert usage["canDelete"] is False
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete role. It is assigned to 1 member(s) and 1 assignment(s)"


def test_delete_unused_role(client, db):
    company = make_company(db)
    role = make_role(db, company)
    role_id = role.id

    response = client.delete(f"/role/{role_id}", headers=company_headers(company))

    assert response.status_code == 200
    db.expire_all()
    assert db.query(Role).filter(Role.id == role_id).count() == 0


def test_role_of_other_company_is_not_found(client, db):
    company = make_company(db)
    other = make_company(db, name="Other", email="other@studio.test")
    role = make_role(db, other)

    response = client.get(f"/role/{role.id}", headers=company_headers(company))

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Role not found"}
