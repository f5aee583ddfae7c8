"""
Tests for candidates, agents, employers, packages, documents and the dashboard.
"""
import io
import os
from decimal import Decimal

from config import settings
from models import AgentDocument, Candidate, CandidateDocument, EmployerDocument, Package


def _candidate_body(**overrides):
    body = {
        "name": "Rahim Uddin",
        "passport_number": "A01234567",
        "phone": "01711111111",
        "package_amount": "100000",
    }
    body.update(overrides)
    return body


def _employer(client, auth, user):
    response = client.post(
        "/api/employers",
        json={"company_name": "Gulf Builders LLC", "country": "UAE"},
        headers=auth(user),
    )
    assert response.status_code == 201
    return response.json()


class TestCandidates:

    def test_create_sets_due_to_package_amount(self, client, users, auth):
        response = client.post(
            "/api/candidates",
            json=_candidate_body(agent_id=users["agent"].id),
            headers=auth(users["data_entry"]),
        )

        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["package_amount"]) == Decimal("100000.00")
        assert Decimal(body["total_paid"]) == Decimal("0.00")
        assert Decimal(body["due_amount"]) == Decimal("100000.00")
        assert body["agent_name"] == users["agent"].name

    def test_create_from_package_id(self, client, db, users, auth):
        package = Package(name="Standard", amount=Decimal("2500.00"))
        db.add(package)
        db.commit()

        body = _candidate_body(package_id=package.id)
        body.pop("package_amount")
        response = client.post("/api/candidates", json=body, headers=auth(users["admin"]))

        assert response.status_code == 201
        assert Decimal(response.json()["due_amount"]) == Decimal("2500.00")

    def test_duplicate_passport_is_409(self, client, users, auth):
        client.post("/api/candidates", json=_candidate_body(), headers=auth(users["admin"]))
        response = client.post("/api/candidates", json=_candidate_body(name="Other"), headers=auth(users["admin"]))
        assert response.status_code == 409

    def test_unknown_agent_rejected(self, client, users, auth):
        response = client.post(
            "/api/candidates",
            json=_candidate_body(agent_id=users["accountant"].id),
            headers=auth(users["admin"]),
        )
        assert response.status_code == 400

    def test_agent_lists_only_own_candidates(self, client, users, auth, make_candidate):
        mine = make_candidate(agent=users["agent"])
        make_candidate(agent=users["other_agent"])
        make_candidate()

        response = client.get("/api/candidates", headers=auth(users["agent"]))

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["data"][0]["id"] == mine.id

    def test_search_by_passport(self, client, users, auth, make_candidate):
        make_candidate(passport_number="ZX998877")
        make_candidate(passport_number="AB111111")

        response = client.get("/api/candidates?search=ZX99", headers=auth(users["admin"]))
        assert [c["passport_number"] for c in response.json()["data"]] == ["ZX998877"]

    def test_agent_cannot_open_other_agents_candidate(self, client, users, auth, make_candidate):
        candidate = make_candidate(agent=users["other_agent"])
        response = client.get(f"/api/candidates/{candidate.id}", headers=auth(users["agent"]))
        assert response.status_code == 403

    def test_package_change_recomputes_due(self, client, users, auth, make_candidate):
        candidate = make_candidate(package_amount="10000.00")
        client.post(
            "/api/payments",
            json={"candidate_id": candidate.id, "amount": "4000", "payment_type": "visa"},
            headers=auth(users["accountant"]),
        )

        response = client.put(
            f"/api/candidates/{candidate.id}",
            json={"package_amount": "12000"},
            headers=auth(users["admin"]),
        )

        assert response.status_code == 200
        assert Decimal(response.json()["total_paid"]) == Decimal("4000.00")
        assert Decimal(response.json()["due_amount"]) == Decimal("8000.00")

    def test_data_entry_cannot_change_package_amount(self, client, db, users, auth, make_candidate):
        candidate = make_candidate(package_amount="10000.00")

        response = client.put(
            f"/api/candidates/{candidate.id}",
            json={"package_amount": "1", "name": "Renamed"},
            headers=auth(users["data_entry"]),
        )

        assert response.status_code == 403
        db.expire_all()
        stored = db.get(Candidate, candidate.id)
        assert stored.package_amount == Decimal("10000.00")
        assert stored.name != "Renamed"

    def test_data_entry_can_edit_other_fields(self, client, users, auth, make_candidate):
        candidate = make_candidate(package_amount="10000.00")

        response = client.put(
            f"/api/candidates/{candidate.id}",
            json={"phone": "01900000000", "package_amount": "10000.00"},
            headers=auth(users["data_entry"]),
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "01900000000"

    def test_soft_delete_hides_candidate(self, client, db, users, auth, make_candidate):
        candidate = make_candidate()

        assert client.delete(f"/api/candidates/{candidate.id}", headers=auth(users["admin"])).status_code == 200
        assert client.get(f"/api/candidates/{candidate.id}", headers=auth(users["admin"])).status_code == 404
        db.expire_all()
        assert db.get(Candidate, candidate.id).is_deleted is True

    def test_assign_agent_only_when_unassigned(self, client, users, auth, make_candidate):
        candidate = make_candidate()

        first = client.put(
            f"/api/candidates/{candidate.id}/assign-agent",
            json={"agent_id": users["agent"].id},
            headers=auth(users["admin"]),
        )
        second = client.put(
            f"/api/candidates/{candidate.id}/assign-agent",
            json={"agent_id": users["other_agent"].id},
            headers=auth(users["admin"]),
        )

        assert first.status_code == 200
        assert first.json()["agent_id"] == users["agent"].id
        assert second.status_code == 400


class TestDocuments:

    def test_upload_list_and_delete(self, client, db, users, auth, make_candidate):
        candidate = make_candidate(agent=users["agent"])

        upload = client.post(
            f"/api/candidates/{candidate.id}/documents",
            files={"file": ("passport.pdf", io.BytesIO(b"%PDF-1.4 test"), "application/pdf")},
            data={"kind": "passport_copy"},
            headers=auth(users["agent"]),
        )
        assert upload.status_code == 201
        document = upload.json()
        assert document["document_url"].startswith("/uploads/")
        assert document["file_size"] == len(b"%PDF-1.4 test")

        db.expire_all()
        assert db.get(Candidate, candidate.id).passport_copy_url == document["document_url"]

        listed = client.get(f"/api/candidates/{candidate.id}/documents", headers=auth(users["agent"]))
        assert [d["id"] for d in listed.json()] == [document["id"]]

        deleted = client.delete(
            f"/api/candidates/{candidate.id}/documents/{document['id']}",
            headers=auth(users["admin"]),
        )
        assert deleted.status_code == 200
        db.expire_all()
        assert db.query(CandidateDocument).count() == 0
        assert db.get(Candidate, candidate.id).passport_copy_url is None

    def test_unknown_kind_rejected(self, client, users, auth, make_candidate):
        candidate = make_candidate()
        response = client.post(
            f"/api/candidates/{candidate.id}/documents",
            files={"file": ("x.txt", io.BytesIO(b"x"), "text/plain")},
            data={"kind": "selfie"},
            headers=auth(users["admin"]),
        )
        assert response.status_code == 400


class TestPackages:

    def test_listing_is_public(self, client, db):
        db.add_all([Package(name="Premium", amount=Decimal("5000")), Package(name="Basic", amount=Decimal("1000"))])
        db.commit()

        response = client.get("/api/packages")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Basic", "Premium"]

    def test_super_admin_creates_and_duplicates_conflict(self, client, users, auth):
        body = {"name": "Gold", "amount": "7500"}
        assert client.post("/api/packages", json=body, headers=auth(users["super_admin"])).status_code == 201
        assert client.post("/api/packages", json=body, headers=auth(users["super_admin"])).status_code == 409

    def test_amount_must_be_positive(self, client, users, auth):
        response = client.post("/api/packages", json={"name": "Free", "amount": "0"}, headers=auth(users["super_admin"]))
        assert response.status_code == 422

    def test_admin_cannot_manage_packages(self, client, users, auth):
        response = client.post("/api/packages", json={"name": "Gold", "amount": "7500"}, headers=auth(users["admin"]))
        assert response.status_code == 403

    def test_deleted_name_can_be_reused(self, client, users, auth):
        created = client.post("/api/packages", json={"name": "Gold", "amount": "7500"}, headers=auth(users["super_admin"]))
        package_id = created.json()["id"]
        client.delete(f"/api/packages/{package_id}", headers=auth(users["super_admin"]))

        again = client.post("/api/packages", json={"name": "Gold", "amount": "8000"}, headers=auth(users["super_admin"]))

        assert again.status_code == 201
        assert Decimal(again.json()["amount"]) == Decimal("8000.00")


class TestAgents:

    def test_list_with_candidate_counts(self, client, users, auth, make_candidate):
        make_candidate(agent=users["agent"])
        make_candidate(agent=users["agent"])

        response = client.get("/api/agents", headers=auth(users["data_entry"]))

        counts = {a["id"]: a["candidate_count"] for a in response.json()["data"]}
        assert counts[users["agent"].id] == 2
        assert counts[users["other_agent"].id] == 0

    def test_agent_sees_only_own_profile(self, client, users, auth):
        own = client.get(f"/api/agents/{users['agent'].id}", headers=auth(users["agent"]))
        other = client.get(f"/api/agents/{users['other_agent'].id}", headers=auth(users["agent"]))

        assert own.status_code == 200
        assert other.status_code == 403

    def test_update_profile(self, client, users, auth):
        response = client.put(
            f"/api/agents/{users['agent'].id}",
            json={"name": "Renamed Agent", "commission_rate": "5.5"},
            headers=auth(users["admin"]),
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed Agent"
        assert Decimal(response.json()["commission_rate"]) == Decimal("5.50")

    def test_agent_documents(self, client, db, users, auth):
        agent = users["agent"]

        upload = client.post(
            f"/api/agents/{agent.id}/documents",
            files={"file": ("licence.pdf", io.BytesIO(b"licence"), "application/pdf")},
            headers=auth(agent),
        )
        assert upload.status_code == 201
        document = upload.json()
        assert document["agent_id"] == agent.id
        assert document["uploaded_by"] == agent.id

        listed = client.get(f"/api/agents/{agent.id}/documents", headers=auth(users["admin"]))
        assert [d["id"] for d in listed.json()] == [document["id"]]

        other = client.get(f"/api/agents/{agent.id}/documents", headers=auth(users["other_agent"]))
        assert other.status_code == 403

        deleted = client.delete(f"/api/agents/{agent.id}/documents/{document['id']}", headers=auth(users["admin"]))
        assert deleted.status_code == 200
        db.expire_all()
        assert db.query(AgentDocument).count() == 0

    def test_agent_cannot_upload_to_another_agent(self, client, users, auth):
        response = client.post(
            f"/api/agents/{users['other_agent'].id}/documents",
            files={"file": ("x.pdf", io.BytesIO(b"x"), "application/pdf")},
            headers=auth(users["agent"]),
        )
        assert response.status_code == 403

    def test_data_entry_cannot_upload_agent_documents(self, client, users, auth):
        response = client.post(
            f"/api/agents/{users['agent'].id}/documents",
            files={"file": ("x.pdf", io.BytesIO(b"x"), "application/pdf")},
            headers=auth(users["data_entry"]),
        )
        assert response.status_code == 403


class TestEmployers:

    def test_create_connect_and_disconnect(self, client, users, auth, make_candidate):
        candidate = make_candidate()
        employer = client.post(
            "/api/employers",
            json={"company_name": "Gulf Builders LLC", "country": "UAE"},
            headers=auth(users["admin"]),
        ).json()

        link = client.post(
            f"/api/employers/{employer['id']}/candidates",
            json={"candidate_id": candidate.id, "position": "Mason", "status": "selected"},
            headers=auth(users["admin"]),
        )
        assert link.status_code == 201
        assert link.json()["status"] == "selected"

        placements = client.get(f"/api/candidates/{candidate.id}/employers", headers=auth(users["accountant"]))
        assert [p["employer_id"] for p in placements.json()] == [employer["id"]]

        removed = client.delete(
            f"/api/employers/{employer['id']}/candidates/{candidate.id}",
            headers=auth(users["admin"]),
        )
        assert removed.status_code == 200

    def test_accountant_cannot_create(self, client, users, auth):
        response = client.post("/api/employers", json={"company_name": "X"}, headers=auth(users["accountant"]))
        assert response.status_code == 403

    def test_connect_list_and_disconnect_agent(self, client, users, auth):
        employer = _employer(client, auth, users["admin"])
        agent = users["agent"]

        link = client.post(
            f"/api/employers/{employer['id']}/agents",
            json={"agent_id": agent.id},
            headers=auth(users["admin"]),
        )
        assert link.status_code == 201
        assert link.json()["status"] == "active"
        assert link.json()["company_name"] == "Gulf Builders LLC"

        own = client.get(f"/api/employers/agent/{agent.id}", headers=auth(agent))
        assert own.status_code == 200
        assert [e["employer_id"] for e in own.json()] == [employer["id"]]

        linked_agents = client.get(f"/api/employers/{employer['id']}/agents", headers=auth(users["data_entry"]))
        assert [a["agent_name"] for a in linked_agents.json()] == [agent.name]

        # Connecting again only changes the status of the existing link.
        client.post(
            f"/api/employers/{employer['id']}/agents",
            json={"agent_id": agent.id, "status": "inactive"},
            headers=auth(users["admin"]),
        )
        relinked = client.get(f"/api/employers/agent/{agent.id}", headers=auth(users["admin"])).json()
        assert [e["status"] for e in relinked] == ["inactive"]

        removed = client.delete(f"/api/employers/{employer['id']}/agents/{agent.id}", headers=auth(users["admin"]))
        assert removed.status_code == 200
        assert client.get(f"/api/employers/agent/{agent.id}", headers=auth(agent)).json() == []

        again = client.delete(f"/api/employers/{employer['id']}/agents/{agent.id}", headers=auth(users["admin"]))
        assert again.status_code == 404

    def test_agent_cannot_list_another_agents_employers(self, client, users, auth):
        response = client.get(f"/api/employers/agent/{users['other_agent'].id}", headers=auth(users["agent"]))
        assert response.status_code == 403

    def test_connecting_a_non_agent_is_404(self, client, users, auth):
        employer = _employer(client, auth, users["admin"])
        response = client.post(
            f"/api/employers/{employer['id']}/agents",
            json={"agent_id": users["accountant"].id},
            headers=auth(users["admin"]),
        )
        assert response.status_code == 404

    def test_accountant_cannot_connect_agent(self, client, users, auth):
        employer = _employer(client, auth, users["admin"])
        response = client.post(
            f"/api/employers/{employer['id']}/agents",
            json={"agent_id": users["agent"].id},
            headers=auth(users["accountant"]),
        )
        assert response.status_code == 403

    def test_employer_documents_reach_their_targets(self, client, db, users, auth, make_candidate):
        admin = users["admin"]
        agent = users["agent"]
        candidate = make_candidate(agent=agent)
        employer = _employer(client, auth, admin)
        client.post(f"/api/employers/{employer['id']}/agents", json={"agent_id": agent.id}, headers=auth(admin))
        client.post(
            f"/api/employers/{employer['id']}/candidates",
            json={"candidate_id": candidate.id},
            headers=auth(admin),
        )

        def share(name, target_type, target_id=None):
            data = {"target_type": target_type, "description": name}
            if target_id is not None:
                data["target_id"] = str(target_id)
            response = client.post(
                f"/api/employers/{employer['id']}/documents",
                files={"file": (name, io.BytesIO(b"contract"), "application/pdf")},
                data=data,
                headers=auth(admin),
            )
            assert response.status_code == 201
            return response.json()

        share("agent.pdf", "agent", agent.id)
        share("other-agent.pdf", "agent", users["other_agent"].id)
        everyone = share("all.pdf", "all", candidate.id)
        share("candidate.pdf", "candidate", candidate.id)
        assert everyone["target_id"] is None
        assert everyone["company_name"] == "Gulf Builders LLC"

        for_agent = client.get(f"/api/employers/documents/agent/{agent.id}", headers=auth(agent))
        assert {d["document_name"] for d in for_agent.json()} == {"agent.pdf", "all.pdf"}

        # other_agent is not linked to the employer, so "all" documents do not reach them.
        for_other = client.get(
            f"/api/employers/documents/agent/{users['other_agent'].id}",
            headers=auth(users["other_agent"]),
        )
        assert {d["document_name"] for d in for_other.json()} == {"other-agent.pdf"}

        for_candidate = client.get(f"/api/employers/documents/candidate/{candidate.id}", headers=auth(agent))
        assert {d["document_name"] for d in for_candidate.json()} == {"candidate.pdf", "all.pdf"}

        stored = os.path.join(settings.UPLOAD_DIR, os.path.basename(everyone["document_url"]))
        assert os.path.exists(stored)
        deleted = client.delete(f"/api/employers/documents/{everyone['id']}", headers=auth(admin))
        assert deleted.status_code == 200
        assert not os.path.exists(stored)
        db.expire_all()
        assert db.query(EmployerDocument).count() == 3

    def test_agent_cannot_read_documents_for_other_agents_candidate(self, client, users, auth, make_candidate):
        candidate = make_candidate(agent=users["other_agent"])
        response = client.get(f"/api/employers/documents/candidate/{candidate.id}", headers=auth(users["agent"]))
        assert response.status_code == 403

    def test_targeted_document_needs_target_id(self, client, users, auth):
        employer = _employer(client, auth, users["admin"])
        response = client.post(
            f"/api/employers/{employer['id']}/documents",
            files={"file": ("x.pdf", io.BytesIO(b"x"), "application/pdf")},
            data={"target_type": "candidate"},
            headers=auth(users["admin"]),
        )
        assert response.status_code == 400


class TestDashboard:

    def _pay(self, client, auth, user, candidate, amount):
        client.post(
            "/api/payments",
            json={"candidate_id": candidate.id, "amount": amount, "payment_type": "visa"},
            headers=auth(user),
        )

    def test_agent_gets_own_totals(self, client, users, auth, make_candidate):
        mine = make_candidate(agent=users["agent"], package_amount="1000.00")
        theirs = make_candidate(agent=users["other_agent"], package_amount="9000.00")
        self._pay(client, auth, users["admin"], mine, "300")
        self._pay(client, auth, users["admin"], theirs, "500")

        body = client.get("/api/dashboard/stats", headers=auth(users["agent"])).json()

        assert body["total_candidates"] == 1
        assert Decimal(body["total_collection"]) == Decimal("300.00")
        assert Decimal(body["total_due"]) == Decimal("700.00")
        assert "agent_wise_report" not in body

    def test_admin_gets_global_totals_and_agent_report(self, client, users, auth, make_candidate):
        mine = make_candidate(agent=users["agent"], package_amount="1000.00")
        make_candidate(package_amount="2000.00")
        self._pay(client, auth, users["admin"], mine, "300")

        body = client.get("/api/dashboard/stats", headers=auth(users["accountant"])).json()

        assert body["total_candidates"] == 2
        assert Decimal(body["total_collection"]) == Decimal("300.00")
        assert Decimal(body["total_due"]) == Decimal("2700.00")
        assert body["total_agents"] == 2
        report = {row["id"]: row for row in body["agent_wise_report"]}
        assert Decimal(report[users["agent"].id]["collection"]) == Decimal("300.00")
        assert report[users["other_agent"].id]["candidate_count"] == 0

    def test_data_entry_has_no_dashboard(self, client, users, auth):
        assert client.get("/api/dashboard/stats", headers=auth(users["data_entry"])).status_code == 403
