import threading
import uuid

import pytest

from ..core.errors import BusyError
from ..core.locks import UserLocks


def test_hold_times_out_while_another_thread_holds_the_lock() -> None:
    locks = UserLocks()
    user_id = uuid.uuid4()
    acquired = threading.Event()
    release = threading.Event()

    def holder() -> None:
        with locks.hold(user_id, timeout=1):
            acquired.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    try:
        assert acquired.wait(5)
        with pytest.raises(BusyError):
            with locks.hold(user_id, timeout=0.05):
                pass
    finally:
        release.set()
        thread.join()

    with locks.hold(user_id, timeout=0.05):
        pass


def test_different_users_do_not_share_a_lock() -> None:
    locks = UserLocks()
    with locks.hold(uuid.uuid4(), timeout=0.05):
        with locks.hold(uuid.uuid4(), timeout=0.05):
            assert len(locks) == 2


def test_released_entries_are_reclaimed() -> None:
    locks = UserLocks()
    with locks.hold(uuid.uuid4(), timeout=0.05):
        assert len(locks) == 1
    assert len(locks) == 0
