"""API tests for service packages and company starting prices."""

from conftest import company_headers, make_company, make_member, member_headers

from studio.models import Package


def _package_body(company, **overrides):
    body = {
        "companyId": company.id,
        "name": "Full Day Wedding",
        "price": 2400,
        "duration": "10 hours",
        "status": "active",
        "isPopular": True,
        "features": ["Two photographers", "Online gallery"],
    }
    body.update(overrides)
    return body


def test_create_package(client, db):
    company = make_company(db)

    response = client.post("/package/add", json=_package_body(company), headers=company_headers(company))

    assert response.status_code == 201
    package = response.json()["package"]
    assert package["price"] == 2400.0
    assert package["features"] == ["Two photographers", "Online gallery"]
    assert package["isPopular"] is True


def test_create_package_requires_fields(client, db):
    company = make_company(db)

    response = client.post(
        "/package/add", json=_package_body(company, duration=None), headers=company_headers(company)
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "All required fields must be provided"}


def test_create_package_rejects_negative_price(client, db):
    company = make_company(db)

    response = client.post("/package/add", json=_package_body(company, price=-10), headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Price must be a positive number"


def test_plain_member_cannot_create_packages(client, db):
    company = make_company(db)
    mia = make_member(db, company, "Mia")

    response = client.post("/package/add", json=_package_body(company), headers=member_headers(mia))

    assert response.status_code == 403


def test_company_listing_includes_starting_price(client, db):
    company = make_company(db)
    headers = company_headers(company)
    client.post("/package/add", json=_package_body(company), headers=headers)

    set_price = client.post(f"/package/company/{company.id}/price", json={"price": 950}, headers=headers)
    listing = client.get(f"/package/company/{company.id}").json()

    assert set_price.json()["company"]["price"] == 950.0
    assert listing["companyPrice"] == 950.0
    assert [p["name"] for p in listing["packages"]] == ["Full Day Wedding"]


def test_company_price_is_required_and_removable(client, db):
    company = make_company(db)
    headers = company_headers(company)

    missing = client.put(f"/package/company/{company.id}/price", json={}, headers=headers)
    client.put(f"/package/company/{company.id}/price", json={"price": 500}, headers=headers)
    removed = client.delete(f"/package/company/{company.id}/price", headers=headers)

    assert missing.status_code == 400
    assert missing.json()["message"] == "Price is required"
    assert removed.json()["company"]["price"] is None


def test_update_package_only_touches_given_fields(client, db):
    company = make_company(db)
    headers = company_headers(company)
    package_id = client.post("/package/add", json=_package_body(company), headers=headers).json()["package"]["id"]

    response = client.put(f"/package/{package_id}", json={"price": 2600, "status": "inactive"}, headers=headers)

    package = response.json()["package"]
    assert package["price"] == 2600.0
    assert package["status"] == "inactive"
    assert package["name"] == "Full Day Wedding"
    assert package["features"] == ["Two photographers", "Online gallery"]


def test_other_company_cannot_delete_package(client, db):
    company = make_company(db)
    other = make_company(db, name="Other", email="other@studio.test")
    package_id = client.post(
        "/package/add", json=_package_body(company), headers=company_headers(company)
    ).json()["package"]["id"]

    response = client.delete(f"/package/{package_id}", headers=company_headers(other))

    assert response.status_code == 403
    assert db.query(Package).filter(Package.id == package_id).count() == 1


def test_delete_package(client, db):
    company = make_company(db)
    headers = company_headers(company)
    package_id = client.post("/package/add", json=_package_body(company), headers=headers).json()["package"]["id"]

    response = client.delete(f"/package/{package_id}", headers=headers)

    assert response.json()["packageId"] == package_id
    assert client.get(f"/package/{package_id}").json() == {"success": False, "message": "Package not found"}
