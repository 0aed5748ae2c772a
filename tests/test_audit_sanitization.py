from freelancehub.models.audit import AuditLog
from freelancehub.utils.audit import actor_label, audit_trail, log_audit, parse_actor_label


def test_audit_log_masks_sensitive_fields(db_session):
    payload = {
        "url": "https://cv.example.com/files/abc123.pdf?token=secret",
        "account_number": "FR7612345678901234567890185",
        "email": "sensitive@example.com",
        "nested": [{"payment_details": {"iban": "FR76..."}}],
        "amount": "10.00",
    }

    log_audit(
        db_session,
        actor="test",
        action="MASK_TEST",
        entity="WalletTransaction",
        entity_id=1,
        data=payload,
    )
    db_session.commit()

    entry = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "MASK_TEST")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert entry is not None
    assert entry.data_json["url"] == "https://cv.example.com/files/***"
    assert entry.data_json["account_number"] == "***0185"
    assert entry.data_json["email"] == "***@example.com"
    assert entry.data_json["nested"][0]["payment_details"] == "***"
    assert entry.data_json["amount"] == "10.00"


def test_actor_label():
    assert actor_label(7) == "user:7"
    assert actor_label(None) == "system"


def test_parse_actor_label():
    assert parse_actor_label("user:42") == 42
    assert parse_actor_label("system") is None
    assert parse_actor_label("user:") is None
    assert parse_actor_label("apikey:3") is None


def test_audit_rows_carry_contract_project_and_actor_references(db_session, make_user):
    user = make_user("actor")

    log_audit(db_session, actor=actor_label(user.id), action="A", entity="Contract", entity_id=11, data={"project_id": 5})
    log_audit(db_session, actor="system", action="B", entity="Milestone", entity_id=3, data={"contract_id": 11})
    log_audit(db_session, actor="system", action="C", entity="Project", entity_id=5)
    log_audit(db_session, actor="system", action="D", entity="Proposal", entity_id=8, data={"project_id": 6})
    db_session.commit()

    rows = {row.action: row for row in db_session.query(AuditLog).all()}
    assert (rows["A"].contract_id, rows["A"].project_id, rows["A"].actor_user_id) == (11, 5, user.id)
    assert rows["A"].actor_user.id == user.id
    assert (rows["B"].contract_id, rows["B"].project_id, rows["B"].actor_user_id) == (11, None, None)
    assert (rows["C"].contract_id, rows["C"].project_id) == (None, 5)

    assert [row.action for row in audit_trail(db_session, contract_id=11)] == ["A", "B"]
    assert [row.action for row in audit_trail(db_session, project_id=5)] == ["A", "C"]
    assert audit_trail(db_session) == []
