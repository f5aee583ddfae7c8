"""
Tests for the SSLCommerz flow.

Tests cover:
1. Initiation (pending row first, gateway form payload, gateway errors)
2. Callback state transitions and redirects
3. Idempotency of success callbacks and IPNs
4. Optional server-side validation of val_id
"""
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from config import settings
from models import Candidate, Payment, PaymentMethod, SSLTransaction, SSLTransactionStatus
from services import gateway_service


def _init(client, auth, user, candidate, amount="5000"):
    response = client.post(
        "/api/sslcommerz/init",
        json={"candidate_id": candidate.id, "amount": amount, "payment_type": "service"},
        headers=auth(user),
    )
    return response


def _transaction(db, tran_id):
    db.expire_all()
    return db.query(SSLTransaction).filter(SSLTransaction.tran_id == tran_id).one()


def _gateway_payments(db, tran_id):
    db.expire_all()
    return db.query(Payment).filter(Payment.transaction_id == tran_id).all()


def _location(response):
    parsed = urlparse(response.headers["location"])
    return parsed.path, parse_qs(parsed.query)


class TestInitiation:
    """POST /api/sslcommerz/init"""

    def test_returns_gateway_url_and_persists_pending(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["agent"], phone="01812345678")

        response = _init(client, auth, users["agent"], candidate)

        assert response.status_code == 200
        body = response.json()
        assert body["url"] == "https://sandbox.sslcommerz.com/pay/abc"
        assert body["tran_id"].startswith("SSLC_")

        transaction = _transaction(db, body["tran_id"])
        assert transaction.status == SSLTransactionStatus.PENDING
        assert transaction.amount == Decimal("5000.00")
        assert transaction.candidate_id == candidate.id

    def test_sends_form_payload_with_callback_urls(self, client, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["agent"])

        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        url, data, timeout = gateway.calls[0]
        assert url == settings.ssl_api_url
        assert timeout == settings.SSL_TIMEOUT_SECONDS
        assert data["tran_id"] == tran_id
        assert data["currency"] == "BDT"
        assert data["total_amount"] == "5000.00"
        assert data["success_url"] == "http://testserver/api/sslcommerz/success"
        assert data["fail_url"] == "http://testserver/api/sslcommerz/fail"
        assert data["cancel_url"] == "http://testserver/api/sslcommerz/cancel"
        assert data["ipn_url"] == "http://testserver/api/sslcommerz/ipn"
        assert data["product_name"] == "service"
        assert data["cus_name"] == candidate.name
        assert data["cus_email"] == "customer@example.com"

    def test_gateway_refusal_surfaces_reason_and_leaves_pending(self, client, db, users, auth, make_candidate, gateway):
        gateway.response = {"status": "FAILED", "failedreason": "Store Credential Error Or Store is De-active"}
        candidate = make_candidate()

        response = _init(client, auth, users["admin"], candidate)

        assert response.status_code == 502
        assert response.json()["detail"] == "Store Credential Error Or Store is De-active"
        db.expire_all()
        rows = db.query(SSLTransaction).filter(SSLTransaction.candidate_id == candidate.id).all()
        assert [r.status for r in rows] == [SSLTransactionStatus.PENDING]

    def test_network_error_is_generic_failure(self, client, users, auth, make_candidate, gateway):
        gateway.response = requests.ConnectionError("connection refused")
        candidate = make_candidate()

        response = _init(client, auth, users["admin"], candidate)

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to initialize payment"

    def test_agent_cannot_initiate_for_other_agents_candidate(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["other_agent"])

        response = _init(client, auth, users["agent"], candidate)

        assert response.status_code == 403
        assert gateway.calls == []
        db.expire_all()
        assert db.query(SSLTransaction).count() == 0

    def test_data_entry_cannot_initiate(self, client, users, auth, make_candidate, gateway):
        response = _init(client, auth, users["data_entry"], make_candidate())
        assert response.status_code == 403


class TestCallbacks:
    """POST /api/sslcommerz/success|fail|cancel"""

    def test_success_credits_candidate_and_redirects(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["agent"], package_amount="20000.00")
        tran_id = _init(client, auth, users["agent"], candidate).json()["tran_id"]

        response = client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert response.status_code == 303
        path, query = _location(response)
        assert path == f"/payment/success/{tran_id}"
        assert query["candidate_id"] == [str(candidate.id)]

        assert _transaction(db, tran_id).status == SSLTransactionStatus.SUCCESS
        payments = _gateway_payments(db, tran_id)
        assert len(payments) == 1
        assert payments[0].payment_method == PaymentMethod.SSLCOMMERZ
        assert payments[0].notes == "SSLCommerz Online Payment"
        assert payments[0].amount == Decimal("5000.00")

        candidate = db.get(Candidate, candidate.id)
        assert candidate.total_paid == Decimal("5000.00")
        assert candidate.due_amount == Decimal("15000.00")

    def test_duplicate_success_does_not_credit_twice(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate(package_amount="20000.00")
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        first = client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)
        second = client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert first.status_code == second.status_code == 303
        assert first.headers["location"] == second.headers["location"]
        assert len(_gateway_payments(db, tran_id)) == 1
        assert db.get(Candidate, candidate.id).total_paid == Decimal("5000.00")

    def test_cancel_writes_no_payment(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        response = client.post("/api/sslcommerz/cancel", data={"tran_id": tran_id}, follow_redirects=False)

        assert response.status_code == 303
        path, query = _location(response)
        assert path == "/payment/cancel"
        assert query["candidate_id"] == [str(candidate.id)]
        assert _transaction(db, tran_id).status == SSLTransactionStatus.CANCELLED
        assert _gateway_payments(db, tran_id) == []
        assert db.get(Candidate, candidate.id).total_paid == Decimal("0.00")

    def test_fail_redirects_with_message(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        response = client.post("/api/sslcommerz/fail", data={"tran_id": tran_id}, follow_redirects=False)

        path, query = _location(response)
        assert path == "/payment/fail"
        assert query["msg"] == ["Payment Failed"]
        assert _transaction(db, tran_id).status == SSLTransactionStatus.FAILED
        assert _gateway_payments(db, tran_id) == []

    def test_unknown_tran_id_redirects_without_error(self, client, db, gateway):
        response = client.post("/api/sslcommerz/success", data={"tran_id": "SSLC_UNKNOWN"}, follow_redirects=False)

        assert response.status_code == 303
        path, query = _location(response)
        assert path == "/payment/fail"
        assert query["msg"] == ["Transaction Not Found"]
        assert query["tran_id"] == ["SSLC_UNKNOWN"]
        db.expire_all()
        assert db.query(Payment).count() == 0

    def test_server_error_redirect_keeps_candidate_id(
        self, client, db, users, auth, make_candidate, gateway, monkeypatch
    ):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        def broken_credit(*args, **kwargs):
            raise RuntimeError("ledger unavailable")

        monkeypatch.setattr(gateway_service.ledger_service, "credit_gateway_payment", broken_credit)

        response = client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert response.status_code == 303
        path, query = _location(response)
        assert path == "/payment/fail"
        assert query["msg"] == ["Server Error"]
        assert query["tran_id"] == [tran_id]
        assert query["candidate_id"] == [str(candidate.id)]
        assert _transaction(db, tran_id).status == SSLTransactionStatus.PENDING
        assert _gateway_payments(db, tran_id) == []

    def test_missing_tran_id_redirects_without_error(self, client, gateway):
        response = client.post("/api/sslcommerz/fail", data={}, follow_redirects=False)
        assert response.status_code == 303
        assert _location(response)[0] == "/payment/fail"

    def test_late_success_after_failure_is_credited(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        client.post("/api/sslcommerz/fail", data={"tran_id": tran_id}, follow_redirects=False)
        response = client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert _location(response)[0] == f"/payment/success/{tran_id}"
        assert _transaction(db, tran_id).status == SSLTransactionStatus.SUCCESS
        assert len(_gateway_payments(db, tran_id)) == 1

    def test_failure_after_success_is_ignored(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)
        response = client.post("/api/sslcommerz/fail", data={"tran_id": tran_id}, follow_redirects=False)

        assert _location(response)[0] == f"/payment/success/{tran_id}"
        assert _transaction(db, tran_id).status == SSLTransactionStatus.SUCCESS
        assert len(_gateway_payments(db, tran_id)) == 1


class TestIPN:
    """POST /api/sslcommerz/ipn"""

    def test_valid_ipn_credits_once(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate(package_amount="8000.00")
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        response = client.post("/api/sslcommerz/ipn", data={"tran_id": tran_id, "status": "VALID", "val_id": "V1"})
        assert response.status_code == 200
        assert response.text == "OK"

        client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert _transaction(db, tran_id).status == SSLTransactionStatus.SUCCESS
        assert len(_gateway_payments(db, tran_id)) == 1
        assert db.get(Candidate, candidate.id).due_amount == Decimal("3000.00")

    def test_unrecognised_status_is_only_acknowledged(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        response = client.post("/api/sslcommerz/ipn", data={"tran_id": tran_id, "status": "UNATTEMPTED"})

        assert response.status_code == 200
        assert _transaction(db, tran_id).status == SSLTransactionStatus.PENDING

    def test_ipn_for_unknown_tran_id_is_acknowledged(self, client, gateway):
        response = client.post("/api/sslcommerz/ipn", data={"tran_id": "SSLC_NOPE", "status": "VALID"})
        assert response.status_code == 200


class TestStateMachine:
    """gateway_service.process_callback called directly."""

    def _pending(self, db, candidate, tran_id="SSLC_TEST", amount="1000.00"):
        transaction = SSLTransaction(
            candidate_id=candidate.id,
            amount=Decimal(amount),
            payment_type="visa",
            tran_id=tran_id,
            status=SSLTransactionStatus.PENDING,
        )
        db.add(transaction)
        db.commit()
        return transaction

    def test_second_success_reports_not_applied(self, db, make_candidate):
        candidate = make_candidate()
        self._pending(db, candidate)

        first = gateway_service.process_callback(db, "SSLC_TEST", SSLTransactionStatus.SUCCESS)
        second = gateway_service.process_callback(db, "SSLC_TEST", SSLTransactionStatus.SUCCESS)

        assert first.applied and first.credited
        assert not second.applied and not second.credited
        assert second.status == SSLTransactionStatus.SUCCESS

    def test_existing_ledger_row_blocks_second_credit(self, db, make_candidate):
        candidate = make_candidate()
        self._pending(db, candidate)
        # A concurrent delivery already inserted the payment for this tran_id.
        db.add(Payment(
            candidate_id=candidate.id,
            amount=Decimal("1000.00"),
            payment_type="visa",
            payment_method=PaymentMethod.SSLCOMMERZ,
            transaction_id="SSLC_TEST",
        ))
        db.commit()

        result = gateway_service.process_callback(db, "SSLC_TEST", SSLTransactionStatus.SUCCESS)

        assert result.credited is False
        db.expire_all()
        assert db.query(Payment).filter(Payment.transaction_id == "SSLC_TEST").count() == 1
        assert db.get(Candidate, candidate.id).total_paid == Decimal("0.00")

    def test_unknown_tran_id_not_found(self, db):
        result = gateway_service.process_callback(db, "SSLC_MISSING", SSLTransactionStatus.SUCCESS)
        assert result.found is False

    def test_transition_table(self):
        success_sources = gateway_service.TRANSITIONS[SSLTransactionStatus.SUCCESS]
        assert SSLTransactionStatus.SUCCESS not in success_sources
        for target in (SSLTransactionStatus.FAILED, SSLTransactionStatus.CANCELLED):
            assert gateway_service.TRANSITIONS[target] == {SSLTransactionStatus.PENDING}


class TestValidation:
    """SSL_VALIDATE_PAYMENTS=true checks val_id with the gateway before crediting."""

    @pytest.fixture(autouse=True)
    def _enable_validation(self, monkeypatch):
        monkeypatch.setattr(settings, "SSL_VALIDATE_PAYMENTS", True)

    def test_confirmed_payment_is_credited(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]
        gateway.validation = {"status": "VALID", "tran_id": tran_id, "amount": "5000.00"}

        response = client.post(
            "/api/sslcommerz/success", data={"tran_id": tran_id, "val_id": "VAL123"}, follow_redirects=False
        )

        assert _location(response)[0] == f"/payment/success/{tran_id}"
        assert len(_gateway_payments(db, tran_id)) == 1
        assert _transaction(db, tran_id).val_id == "VAL123"

    def test_amount_mismatch_marks_failed(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]
        gateway.validation = {"status": "VALID", "tran_id": tran_id, "amount": "10.00"}

        response = client.post(
            "/api/sslcommerz/success", data={"tran_id": tran_id, "val_id": "VAL123"}, follow_redirects=False
        )

        assert _location(response)[0] == "/payment/fail"
        assert _transaction(db, tran_id).status == SSLTransactionStatus.FAILED
        assert _gateway_payments(db, tran_id) == []

    def test_missing_val_id_marks_failed(self, client, db, users, auth, make_candidate, gateway):
        candidate = make_candidate()
        tran_id = _init(client, auth, users["admin"], candidate).json()["tran_id"]

        client.post("/api/sslcommerz/success", data={"tran_id": tran_id}, follow_redirects=False)

        assert _transaction(db, tran_id).status == SSLTransactionStatus.FAILED


class TestTransactionLookup:

    def test_status_lookup(self, client, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["agent"])
        tran_id = _init(client, auth, users["agent"], candidate).json()["tran_id"]

        response = client.get(f"/api/sslcommerz/transactions/{tran_id}", headers=auth(users["agent"]))

        assert response.status_code == 200
        assert response.json()["status"] == "pending"

    def test_other_agent_cannot_look_up(self, client, users, auth, make_candidate, gateway):
        candidate = make_candidate(agent=users["agent"])
        tran_id = _init(client, auth, users["agent"], candidate).json()["tran_id"]

        response = client.get(f"/api/sslcommerz/transactions/{tran_id}", headers=auth(users["other_agent"]))
        assert response.status_code == 403
