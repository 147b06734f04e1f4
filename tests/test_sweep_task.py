from unittest.mock import MagicMock

from app.services.lock_service import LockService
from app.tasks.expire import SWEEP_LOCK_NAME, run_sweep


def test_run_sweep_skips_when_lock_is_held(db):
    lock = MagicMock()
    lock.acquire.return_value = False

    result = run_sweep(db, lock)

    assert result == {"skipped": True}
    lock.release.assert_not_called()


def test_run_sweep_releases_expired_and_the_lock(db, cart_service, make_item, clock, stock_of):
    item = make_item(quantity=5)
    cart_service.add_reservation("u1", item.id, 3)
    clock.advance(hours=25)
    lock = MagicMock()
    lock.acquire.return_value = True

    result = run_sweep(db, lock, clock=clock)

    assert result["skipped"] is False
    assert result["lines_released"] == 1
    assert stock_of(item.id) == 5
    owner = lock.acquire.call_args.args[1]
    lock.release.assert_called_once_with(SWEEP_LOCK_NAME, owner)


def test_lock_acquire_uses_set_nx_with_ttl():
    client = MagicMock()
    client.set.return_value = True

    assert LockService(client=client).acquire("cart-sweep", "worker-1", ttl=600) is True
    client.set.assert_called_once_with(name="lock:cart-sweep", value="worker-1", nx=True, ex=600)


def test_lock_acquire_fails_when_taken():
    client = MagicMock()
    client.set.return_value = None

    assert LockService(client=client).acquire("cart-sweep", "worker-2", ttl=600) is False


def test_lock_release_only_by_owner():
    client = MagicMock()
    client.eval.return_value = 0

    assert LockService(client=client).release("cart-sweep", "intruder") is False
    _, numkeys, key, owner = client.eval.call_args.args
    assert (numkeys, key, owner) == (1, "lock:cart-sweep", "intruder")
