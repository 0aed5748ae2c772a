"""Wallet ledger: deposits, withdrawals and history."""
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from freelancehub.models import (
    AuditLog,
    User,
    WalletTransaction,
    WalletTransactionStatus,
    WalletTransactionType,
)
from freelancehub.services import wallet
from freelancehub.utils.errors import Conflict, InsufficientFunds, InvalidArgument


def test_deposit_credits_balance(db_session, make_user):
    user = make_user("payer")

    tx = wallet.deposit(db_session, user.id, "125.50", payment_method="card", actor=f"user:{user.id}")

    assert tx.type == WalletTransactionType.DEPOSIT
    assert tx.status == WalletTransactionStatus.COMPLETED
    assert tx.amount == Decimal("125.50")
    assert wallet.get_balance(db_session, user.id) == Decimal("125.50")


def test_deposit_is_idempotent(db_session, make_user):
    user = make_user("payer")

    first = wallet.deposit(db_session, user.id, "50", idempotency_key="dep-1", actor="test")
    again = wallet.deposit(db_session, user.id, "50", idempotency_key="dep-1", actor="test")

    assert again.id == first.id
    assert wallet.get_balance(db_session, user.id) == Decimal("50.00")
    count = db_session.scalar(select(func.count(WalletTransaction.id)).where(WalletTransaction.user_id == user.id))
    assert count == 1


def test_idempotency_key_cannot_cross_accounts(db_session, make_user):
    alice = make_user("alice")
    bob = make_user("bob")
    wallet.deposit(db_session, alice.id, "10", idempotency_key="shared", actor="test")

    with pytest.raises(Conflict) as exc:
        wallet.deposit(db_session, bob.id, "10", idempotency_key="shared", actor="test")
    assert exc.value.code == "IDEMPOTENCY_KEY_REUSED"
    assert wallet.get_balance(db_session, bob.id) == Decimal("0.00")


@pytest.mark.parametrize("amount", ["0", "-5", "abc"])
def test_deposit_rejects_bad_amounts(db_session, make_user, amount):
    user = make_user("payer")

    with pytest.raises(InvalidArgument):
        wallet.deposit(db_session, user.id, amount, actor="test")


def test_withdraw_debits_and_records_pending(db_session, make_user):
    user = make_user("earner", balance="80.00")

    tx = wallet.withdraw(
        db_session,
        user.id,
        "30.00",
        method="bank_transfer",
        payment_details={"account_number": "FR76 1234 5678 9012"},
        actor=f"user:{user.id}",
    )

    assert tx.type == WalletTransactionType.WITHDRAWAL
    assert tx.status == WalletTransactionStatus.PENDING
    assert wallet.get_balance(db_session, user.id) == Decimal("50.00")
    audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "WALLET_WITHDRAWAL_REQUESTED")).one()
    assert audit.data_json["payment_details"] == "***"


def test_overdraw_is_refused_without_side_effects(db_session, make_user):
    user = make_user("earner", balance="20.00")

    with pytest.raises(InsufficientFunds) as exc:
        wallet.withdraw(db_session, user.id, "20.01", method="paypal", actor="test")

    assert exc.value.status_code == 400
    assert exc.value.detail["error"]["details"] == {"balance": "20.00", "requested": "20.01"}
    assert wallet.get_balance(db_session, user.id) == Decimal("20.00")
    assert wallet.history(db_session, user.id) == []


def test_withdraw_exact_balance(db_session, make_user):
    user = make_user("earner", balance="20.00")

    wallet.withdraw(db_session, user.id, "20.00", method="paypal", actor="test")

    assert wallet.get_balance(db_session, user.id) == Decimal("0.00")


def test_history_is_newest_first(db_session, make_user):
    user = make_user("payer")
    wallet.deposit(db_session, user.id, "10", actor="test")
    wallet.deposit(db_session, user.id, "20", actor="test")
    wallet.withdraw(db_session, user.id, "5", method="paypal", actor="test")

    balance, recent = wallet.get_wallet(db_session, user.id, recent=2)

    assert balance == Decimal("25.00")
    assert [tx.type for tx in recent] == [WalletTransactionType.WITHDRAWAL, WalletTransactionType.DEPOSIT]
    assert [tx.amount for tx in wallet.history(db_session, user.id, offset=2)] == [Decimal("10.00")]


def test_concurrent_withdrawals_cannot_overdraw(db_session, session_factory, make_user):
    user = make_user("earner", balance="100.00")

    teller_a = session_factory()
    teller_b = session_factory()
    try:
        # Both sessions saw 100.00 before either debit ran.
        assert teller_a.get(User, user.id).balance == Decimal("100.00")
        assert teller_b.get(User, user.id).balance == Decimal("100.00")

        wallet.withdraw(teller_a, user.id, "80.00", method="paypal", actor="test")
        with pytest.raises(InsufficientFunds):
            wallet.withdraw(teller_b, user.id, "80.00", method="paypal", actor="test")
    finally:
        teller_a.close()
        teller_b.close()

    db_session.expire_all()
    assert wallet.get_balance(db_session, user.id) == Decimal("20.00")
    pending = db_session.scalars(
        select(WalletTransaction).where(
            WalletTransaction.user_id == user.id,
            WalletTransaction.type == WalletTransactionType.WITHDRAWAL,
            WalletTransaction.status == WalletTransactionStatus.PENDING,
        )
    ).all()
    assert [tx.amount for tx in pending] == [Decimal("80.00")]


def test_withdraw_is_idempotent(db_session, make_user):
    user = make_user("earner", balance="100.00")

    first = wallet.withdraw(db_session, user.id, "30", method="paypal", idempotency_key="wd-1", actor="test")
    again = wallet.withdraw(db_session, user.id, "30", method="paypal", idempotency_key=" wd-1 ", actor="test")

    assert again.id == first.id
    assert wallet.get_balance(db_session, user.id) == Decimal("70.00")


def test_deposit_key_cannot_replay_as_withdrawal(db_session, make_user):
    user = make_user("earner", balance="100.00")
    wallet.deposit(db_session, user.id, "10", idempotency_key="k-1", actor="test")

    with pytest.raises(Conflict) as exc:
        wallet.withdraw(db_session, user.id, "10", method="paypal", idempotency_key="k-1", actor="test")
    assert exc.value.code == "IDEMPOTENCY_KEY_REUSED"
    assert wallet.get_balance(db_session, user.id) == Decimal("110.00")


def test_oversized_idempotency_key_is_refused(db_session, make_user):
    user = make_user("payer")

    with pytest.raises(InvalidArgument) as exc:
        wallet.deposit(db_session, user.id, "10", idempotency_key="k" * 129, actor="test")
    assert exc.value.code == "IDEMPOTENCY_KEY_TOO_LONG"
