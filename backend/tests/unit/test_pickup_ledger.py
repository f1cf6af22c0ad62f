"""
Unit Tests for the in-memory pickup ledger
"""
import threading

from app.services.pickup_ledger import PickupLedger


class TestPickupLedger:

    def test_unknown_order_is_not_confirmed(self):
        ledger = PickupLedger()
        assert ledger.is_confirmed("1001") is False

    def test_mark_confirmed(self):
        ledger = PickupLedger()
        ledger.mark_confirmed("1001")

        assert ledger.is_confirmed("1001") is True
        assert ledger.is_confirmed("1002") is False
        assert len(ledger) == 1

    def test_ids_are_compared_as_strings(self):
        ledger = PickupLedger()
        ledger.mark_confirmed(1001)
        assert ledger.is_confirmed("1001") is True


class TestPickupLedgerHold:

    def test_hold_acquires_free_lock(self):
        ledger = PickupLedger()
        with ledger.hold("1001", timeout=0) as acquired:
            assert acquired is True

    def test_lock_is_released_after_hold(self):
        ledger = PickupLedger()
        with ledger.hold("1001", timeout=0):
            pass
        with ledger.hold("1001", timeout=0) as acquired:
            assert acquired is True

    def test_second_holder_times_out_while_first_holds(self):
        ledger = PickupLedger()
        results = []

        with ledger.hold("1001", timeout=0):
            def contender():
                with ledger.hold("1001", timeout=0.05) as acquired:
                    results.append(acquired)

            thread = threading.Thread(target=contender)
            thread.start()
            thread.join()

        assert results == [False]

    def test_different_orders_do_not_block_each_other(self):
        ledger = PickupLedger()
        with ledger.hold("1001", timeout=0):
            with ledger.hold("1002", timeout=0) as acquired:
                assert acquired is True

    def test_waiter_proceeds_once_released(self):
        ledger = PickupLedger()
        holding = threading.Event()
        released = threading.Event()
        results = []

        def first():
            with ledger.hold("1001"):
                holding.set()
                released.wait(timeout=5)
                ledger.mark_confirmed("1001")

        def second():
            with ledger.hold("1001", timeout=5) as acquired:
                results.append((acquired, ledger.is_confirmed("1001")))

        t1 = threading.Thread(target=first)
        t1.start()
        assert holding.wait(timeout=5)
        t2 = threading.Thread(target=second)
        t2.start()
        released.set()
        t1.join()
        t2.join()

        assert results == [(True, True)]
