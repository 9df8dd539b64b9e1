from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from sqlmodel import Session

from ..core.errors import InsufficientFundsError
from ..models import AccountModel, TransactionKind
from ..services import LedgerService


def _run_concurrently(engine, settings, locks, operation, count: int) -> list:
    def call(_):
        with Session(engine) as session:
            service = LedgerService(session, settings=settings, locks=locks)
            try:
                return operation(service)
            except InsufficientFundsError as exc:
                return exc

    with ThreadPoolExecutor(max_workers=8) as pool:
        return list(pool.map(call, range(count)))


def test_concurrent_deposits_are_not_lost(engine, settings, locks, user_id) -> None:
    results = _run_concurrently(
        engine,
        settings,
        locks,
        lambda service: service.deposit(user_id, "checking", 1),
        count=40,
    )

    assert len(results) == 40
    with Session(engine) as session:
        service = LedgerService(session, settings=settings, locks=locks)
        assert service.get_balances(user_id).checking == Decimal("40.00")
        records = service.list_transactions(user_id)
    assert len(records) == 40
    assert {record.kind for record in records} == {TransactionKind.DEPOSIT}
    # every caller saw a distinct serialized state
    assert sorted(result.checking for result in results) == [
        Decimal(n) for n in range(1, 41)
    ]


def test_concurrent_withdrawals_never_overdraw(engine, settings, locks, user_id) -> None:
    with Session(engine) as session:
        account = session.get(AccountModel, user_id)
        account.checking_cents = 1000
        session.add(account)
        session.commit()

    results = _run_concurrently(
        engine,
        settings,
        locks,
        lambda service: service.withdraw(user_id, "checking", 1),
        count=25,
    )

    failures = [result for result in results if isinstance(result, InsufficientFundsError)]
    assert len(failures) == 15
    with Session(engine) as session:
        service = LedgerService(session, settings=settings, locks=locks)
        assert service.get_balances(user_id).checking == Decimal("0.00")
        assert len(service.list_transactions(user_id)) == 10


def test_concurrent_mixed_operations_preserve_total(engine, settings, locks, user_id) -> None:
    with Session(engine) as session:
        account = session.get(AccountModel, user_id)
        account.checking_cents = 10000
        account.savings_cents = 10000
        session.add(account)
        session.commit()

    def operation(service: LedgerService):
        service.transfer(user_id, "checking", "savings", "1.25")
        return service.transfer(user_id, "savings", "checking", "1.25")

    _run_concurrently(engine, settings, locks, operation, count=20)

    with Session(engine) as session:
        service = LedgerService(session, settings=settings, locks=locks)
        balances = service.get_balances(user_id)
        assert balances.checking + balances.savings == Decimal("200.00")
        assert balances.checking == Decimal("100.00")
        assert len(service.list_transactions(user_id)) == 40
