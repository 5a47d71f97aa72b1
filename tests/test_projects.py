"""API tests for projects, their schedule edits and team assignments."""

from conftest import company_headers, d, make_company, make_event, make_member, make_project, make_role, member_headers

from studio.models import Event, EventAssignment, Project, ProjectAssignment


def _seed(db):
    company = make_company(db)
    role = make_role(db, company)
    mia = make_member(db, company, "Mia", role=role)
    noah = make_member(db, company, "Noah", role=role)
    return company, role, mia, noah


def _create_body(company, members, **overrides):
    body = {
        "companyId": company.id,
        "name": "Autumn Campaign",
        "color": "#ff8800",
        "client": {"name": "Acme", "email": "hello@acme.test", "mobile": "+1 555 0100"},
        "events": [
            {
                "name": "Studio day",
                "date": "2024-09-10",
                "startHour": 9,
                "endHour": 13,
                "assignments": [{"memberId": m.id} for m in members],
            },
            {
                "name": "Location day",
                "date": "2024-09-12",
                "startHour": 14,
                "endHour": 18,
                "assignments": [{"memberId": members[0].id, "instructions": "Bring the drone"}],
            },
        ],
    }
    body.update(overrides)
    return body


def test_create_project_with_events(client, db, calendar, sent_emails):
    company, role, mia, noah = _seed(db)
    calendar.connected.add(mia.id)

    response = client.post("/project/add", json=_create_body(company, [mia, noah]), headers=company_headers(company))

    assert response.status_code == 201
    project = response.json()["project"]
    assert project["startDate"] == "2024-09-10"
    assert project["endDate"] == "2024-09-12"
    assert project["startHour"] == 9
    assert project["endHour"] == 18
    assert len(project["events"]) == 2
    assert {a["memberId"] for a in project["assignments"]} == {mia.id, noah.id}
    assert project["client"]["email"] == "hello@acme.test"

    # only the connected member gets calendar copies
    assert sorted(member_id for member_id, _ in calendar.synced) == [mia.id, mia.id]
    db.expire_all()
    stored = db.query(EventAssignment).filter(EventAssignment.member_id == mia.id).all()
    assert all(a.google_event_id for a in stored)

    assert len(sent_emails) == 3


def test_create_project_requires_events(client, db):
    company, *_ = _seed(db)

    response = client.post(
        "/project/add",
        json={"companyId": company.id, "name": "Empty", "color": "#000000", "events": []},
        headers=company_headers(company),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "At least one event is required"


def test_create_project_event_needs_assignments(client, db):
    company, role, mia, noah = _seed(db)
    body = _create_body(company, [mia])
    body["events"][0]["assignments"] = []

    response = client.post("/project/add", json=body, headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "Each event must have at least one assigned member"


def test_create_project_rejects_event_hours_out_of_order(client, db):
    company, role, mia, noah = _seed(db)
    body = _create_body(company, [mia])
    body["events"][0]["startHour"] = 13

    response = client.post("/project/add", json=body, headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "End time must be after start time"


def test_create_project_rejects_busy_member(client, db):
    company, role, mia, noah = _seed(db)
    other = make_project(db, company, "Booked", d("2024-09-10"), d("2024-09-10"), 8, 12, members=[mia])
    make_event(db, other, "Booked shoot", d("2024-09-10"), 8, 12, members=[mia])

    response = client.post("/project/add", json=_create_body(company, [mia]), headers=company_headers(company))

    assert response.status_code == 409
    payload = response.json()
    assert payload["message"] == "Schedule conflict detected"
    assert payload["conflicts"][0]["memberId"] == mia.id
    assert payload["conflicts"][0]["conflictingProjectName"] == "Booked"
    db.expire_all()
    assert db.query(Project).filter(Project.name == "Autumn Campaign").count() == 0


def test_create_project_rejects_member_of_another_company(client, db):
    company, role, mia, noah = _seed(db)
    other = make_company(db, name="Other", email="other@studio.test")
    outsider = make_member(db, other, "Outsider")

    response = client.post("/project/add", json=_create_body(company, [outsider]), headers=company_headers(company))

    assert response.status_code == 400
    assert "not found in this company" in response.json()["message"]


def test_schedule_edit_without_conflicts_commits(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-03"), 9, 17, members=[mia])

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "startDate": "2024-07-01",
            "endDate": "2024-07-02",
            "isScheduleUpdate": True,
        },
        headers=company_headers(company),
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Project updated successfully"
    db.expire_all()
    stored = db.get(Project, p1.id)
    assert (stored.start_date, stored.end_date) == (d("2024-07-01"), d("2024-07-02"))
    assert (stored.start_hour, stored.end_hour) == (9, 17)


def test_schedule_edit_with_conflict_is_rejected_without_changes(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-03"), 9, 17, members=[mia])
    p2 = make_project(db, company, "Summer Gala", d("2024-07-01"), d("2024-07-01"), 9, 17, members=[mia])

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "name": "Renamed",
            "startDate": "2024-07-01",
            "endDate": "2024-07-02",
            "startHour": 10,
            "endHour": 12,
            "isScheduleUpdate": True,
        },
        headers=company_headers(company),
    )

    assert response.status_code == 409
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "Your assigned team member ain't available on this new Schedule"
    assert payload["conflicts"] == [
        {
            "memberId": mia.id,
            "memberName": "Mia",
            "conflictingProjectId": p2.id,
            "conflictingProjectName": "Summer Gala",
            "conflictingProjectDates": {
                "startDate": "2024-07-01",
                "endDate": "2024-07-01",
                "startHour": 9,
                "endHour": 17,
            },
            "newDates": {"startDate": "2024-07-01", "endDate": "2024-07-02", "startHour": 10, "endHour": 12},
        }
    ]
    db.expire_all()
    stored = db.get(Project, p1.id)
    assert stored.name == "Spring Wedding"
    assert stored.start_date == d("2024-06-01")


def test_date_only_overlap_does_not_block_edit(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-03"), 9, 17, members=[mia])
    make_project(db, company, "Evening Gig", d("2024-07-01"), d("2024-07-01"), 18, 22, members=[mia])

    response = client.put(
        "/project/edit",
        json={"projectId": p1.id, "startDate": "2024-07-01", "endDate": "2024-07-02", "isScheduleUpdate": True},
        headers=company_headers(company),
    )

    assert response.status_code == 200


def test_edit_without_schedule_flag_skips_conflict_check(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-03"), 9, 17, members=[mia])
    make_project(db, company, "Summer Gala", d("2024-06-02"), d("2024-06-02"), 9, 17, members=[mia])

    response = client.put(
        "/project/edit", json={"projectId": p1.id, "description": "Updated"}, headers=company_headers(company)
    )

    assert response.status_code == 200
    assert response.json()["project"]["description"] == "Updated"


def test_edit_event_list_rejects_overlap_with_other_project_event(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    own = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])
    p2 = make_project(db, company, "Catalogue", None, None, None, None, members=[mia])
    make_event(db, p2, "Catalogue shoot", d("2024-06-05"), 10, 14, members=[mia])

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "isScheduleUpdate": True,
            "startDate": "2024-06-01",
            "endDate": "2024-06-01",
            "events": [
                {"id": own.id, "name": "Ceremony", "date": "2024-06-05", "startHour": 13, "endHour": 15},
            ],
        },
        headers=company_headers(company),
    )

    assert response.status_code == 409
    conflicts = response.json()["conflicts"]
    assert conflicts[0]["conflictingProjectName"] == "Catalogue"
    assert conflicts[0]["conflictingEventTimes"] == {"startHour": 10, "endHour": 14}


def test_edit_event_list_moves_own_event_without_self_conflict(client, db, calendar):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    own = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])
    removed = make_event(db, p1, "Rehearsal", d("2024-05-31"), 18, 20, members=[mia])
    calendar.connected.add(mia.id)

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "isScheduleUpdate": True,
            "events": [
                {"id": own.id, "name": "Ceremony", "date": "2024-06-01", "startHour": 10, "endHour": 13},
                {
                    "name": "Reception",
                    "date": "2024-06-01",
                    "startHour": 18,
                    "endHour": 23,
                    "assignments": [{"memberId": noah.id}],
                },
            ],
        },
        headers=company_headers(company),
    )

    assert response.status_code == 200
    project = response.json()["project"]
    assert sorted(e["name"] for e in project["events"]) == ["Ceremony", "Reception"]
    assert project["startHour"] == 10
    assert project["endHour"] == 23
    assert {a["memberId"] for a in project["assignments"]} == {mia.id, noah.id}
    assert removed.id not in {e["id"] for e in project["events"]}


def _wedding_day(db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", d("2024-06-01"), d("2024-06-01"), 9, 17, members=[mia])
    ceremony = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])
    reception = make_event(db, p1, "Reception", d("2024-06-01"), 14, 17, members=[mia])
    return company, mia, p1, ceremony, reception


def test_edit_event_list_rejects_overlap_between_own_events(client, db):
    company, mia, p1, ceremony, reception = _wedding_day(db)

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "isScheduleUpdate": True,
            "events": [
                {"id": ceremony.id, "name": "Ceremony", "date": "2024-06-01", "startHour": 14, "endHour": 16},
                {"id": reception.id, "name": "Reception", "date": "2024-06-01", "startHour": 14, "endHour": 17},
            ],
        },
        headers=company_headers(company),
    )

    assert response.status_code == 409
    payload = response.json()
    assert payload["message"] == "Your assigned team member ain't available on this new Schedule"
    assert len(payload["conflicts"]) == 1
    assert payload["conflicts"][0]["memberName"] == "Mia"
    assert payload["conflicts"][0]["conflictingEventName"] == "Ceremony"
    assert payload["conflicts"][0]["newEventTimes"] == {"date": "2024-06-01", "startHour": 14, "endHour": 17}
    db.expire_all()
    assert db.get(Event, ceremony.id).start_hour == 9


def test_edit_event_list_and_single_event_update_agree(client, db):
    company, mia, p1, ceremony, reception = _wedding_day(db)

    single = client.put(
        f"/event/update/{ceremony.id}", json={"startHour": 14, "endHour": 16}, headers=company_headers(company)
    )

    assert single.status_code == 409


def test_edit_event_list_swap_is_judged_on_new_schedule(client, db):
    company, mia, p1, ceremony, reception = _wedding_day(db)

    response = client.put(
        "/project/edit",
        json={
            "projectId": p1.id,
            "isScheduleUpdate": True,
            "events": [
                {"id": ceremony.id, "name": "Ceremony", "date": "2024-06-01", "startHour": 14, "endHour": 17},
                {"id": reception.id, "name": "Reception", "date": "2024-06-01", "startHour": 9, "endHour": 12},
            ],
        },
        headers=company_headers(company),
    )

    assert response.status_code == 200
    hours = {e["name"]: (e["startHour"], e["endHour"]) for e in response.json()["project"]["events"]}
    assert hours == {"Ceremony": (14, 17), "Reception": (9, 12)}


def test_create_project_rejects_overlapping_events_in_same_request(client, db):
    company, role, mia, noah = _seed(db)
    body = _create_body(company, [mia])
    body["events"][1].update({"name": "Second look", "date": "2024-09-10", "startHour": 10, "endHour": 12})

    response = client.post("/project/add", json=body, headers=company_headers(company))

    assert response.status_code == 409
    payload = response.json()
    assert payload["message"] == "Schedule conflict detected"
    assert payload["conflicts"][0]["memberId"] == mia.id
    assert payload["conflicts"][0]["conflictingEventName"] == "Studio day"
    assert payload["conflicts"][0]["conflictingEventId"] is None
    db.expire_all()
    assert db.query(Project).filter(Project.name == "Autumn Campaign").count() == 0


def test_create_project_allows_different_members_at_same_time(client, db):
    company, role, mia, noah = _seed(db)
    body = _create_body(company, [mia])
    body["events"][1].update(
        {"date": "2024-09-10", "startHour": 10, "endHour": 12, "assignments": [{"memberId": noah.id}]}
    )

    response = client.post("/project/add", json=body, headers=company_headers(company))

    assert response.status_code == 201


def test_check_name(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Spring Wedding", None, None, None, None, members=[mia])
    headers = company_headers(company)

    taken = client.post("/project/check-name", json={"companyId": company.id, "name": "spring wedding"}, headers=headers)
    own = client.post(
        "/project/check-name",
        json={"companyId": company.id, "name": "Spring Wedding", "excludeProjectId": p1.id},
        headers=headers,
    )

    assert taken.json() == {"success": True, "exists": True}
    assert own.json() == {"success": True, "exists": False}


def test_removing_last_project_member_is_rejected(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Solo", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])

    response = client.post(
        "/project/remove-member", json={"projectId": p1.id, "memberId": mia.id}, headers=company_headers(company)
    )

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Cannot remove the last member from a project. Projects must have at least one assigned member."
    )
    db.expire_all()
    assert db.query(ProjectAssignment).filter(ProjectAssignment.project_id == p1.id).count() == 1


def test_removing_last_event_member_is_rejected(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Duo", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia, noah])
    event = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])

    response = client.post(
        "/project/remove-member",
        json={"projectId": p1.id, "memberId": mia.id, "eventId": event.id},
        headers=company_headers(company),
    )

    assert response.status_code == 400
    assert "last member from an event" in response.json()["message"]


def test_remove_member_deletes_calendar_copies(client, db, calendar):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Duo", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia, noah])
    event = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia, noah])
    assignment = next(a for a in event.assignments if a.member_id == mia.id)
    assignment.google_event_id = "g-123"
    db.commit()

    response = client.post(
        "/project/remove-member", json={"projectId": p1.id, "memberId": mia.id}, headers=company_headers(company)
    )

    assert response.status_code == 200
    assert calendar.deleted == [(mia.id, "g-123")]


def test_add_member_to_event_checks_schedule(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    ceremony = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])
    p2 = make_project(db, company, "Portraits", d("2024-06-01"), d("2024-06-01"), 11, 13, members=[noah])
    make_event(db, p2, "Portrait session", d("2024-06-01"), 11, 13, members=[noah])
    headers = company_headers(company)

    busy = client.post(
        "/project/add-member",
        json={"projectId": p1.id, "memberId": noah.id, "eventId": ceremony.id},
        headers=headers,
    )
    duplicate = client.post(
        "/project/add-member",
        json={"projectId": p1.id, "memberId": mia.id, "eventId": ceremony.id},
        headers=headers,
    )

    assert busy.status_code == 409
    assert busy.json()["conflicts"][0]["memberId"] == noah.id
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "Member is already assigned to this event"


def test_add_member_to_event(client, db, sent_emails):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    ceremony = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])

    response = client.post(
        "/project/add-member",
        json={"projectId": p1.id, "memberId": noah.id, "eventId": ceremony.id, "roleId": role.id},
        headers=company_headers(company),
    )

    assert response.status_code == 201
    db.expire_all()
    assert db.query(ProjectAssignment).filter(ProjectAssignment.member_id == noah.id).count() == 1
    assert sent_emails[0]["to"] == noah.email


def test_member_cannot_edit_project(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])

    response = client.put("/project/edit", json={"projectId": p1.id, "description": "x"}, headers=member_headers(mia))

    assert response.status_code == 403


def test_sections_and_instructions(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    headers = company_headers(company)

    response = client.put(
        "/project/sections",
        json={"projectId": p1.id, "brief": "Golden hour", "checklist": [{"title": "Charge batteries"}]},
        headers=headers,
    )
    assert response.status_code == 200
    sections = client.get(f"/project/{p1.id}/sections", headers=headers).json()["sections"]
    assert sections["brief"] == "Golden hour"
    assert sections["checklist"] == [{"title": "Charge batteries", "completed": False, "description": None}]

    assignment_id = p1.assignments[0].id
    response = client.patch(
        f"/project/assignment/{assignment_id}/instructions", json={"instructions": "Arrive early"}, headers=headers
    )
    assert response.json()["instructions"] == "Arrive early"


def test_empty_sections_update_is_rejected(client, db):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", None, None, None, None, members=[mia])

    response = client.put("/project/sections", json={"projectId": p1.id}, headers=company_headers(company))

    assert response.status_code == 400
    assert response.json()["message"] == "At least one section must be provided"


def test_upload_and_delete_document(client, db, uploads):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", None, None, None, None, members=[mia])
    headers = company_headers(company)

    response = client.post(
        f"/project/{p1.id}/documents",
        files={"document": ("shotlist.pdf", b"%PDF-1.4", "application/pdf")},
        data={"title": "Shot list"},
        headers=headers,
    )

    assert response.status_code == 201
    document = response.json()["document"]
    assert document["title"] == "Shot list"
    assert document["key"].startswith(f"projects/{p1.id}/documents/")
    assert document["key"] in uploads

    response = client.request("DELETE", f"/project/{p1.id}/documents", json={"key": document["key"]}, headers=headers)
    assert response.status_code == 200
    assert uploads == {}


def test_delete_project_removes_calendar_copies(client, db, calendar):
    company, role, mia, noah = _seed(db)
    p1 = make_project(db, company, "Wedding", d("2024-06-01"), d("2024-06-01"), 9, 12, members=[mia])
    event = make_event(db, p1, "Ceremony", d("2024-06-01"), 9, 12, members=[mia])
    event.assignments[0].google_event_id = "g-1"
    db.commit()
    project_id, member_id = p1.id, mia.id

    response = client.request("DELETE", "/project/delete", json={"projectId": project_id}, headers=company_headers(company))

    assert response.status_code == 200
    assert calendar.deleted == [(member_id, "g-1")]
    db.expire_all()
    assert db.query(Project).filter(Project.id == project_id).count() == 0
