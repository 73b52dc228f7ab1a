"""Unit tests for the single-slot hand-off."""

from __future__ import annotations

import threading

from webtour.concurrency import HandoffSlot


def test_put_then_claim() -> None:
    slot: HandoffSlot[str] = HandoffSlot()
    assert slot.put("value") is True
    assert slot.wait(0) is True
    assert slot.claim() == "value"
    assert slot.closed is True


def test_second_put_is_absorbed() -> None:
    slot: HandoffSlot[int] = HandoffSlot()
    assert slot.put(1) is True
    assert slot.put(2) is False
    assert slot.claim() == 1


def test_claim_on_empty_slot_closes_it() -> None:
    slot: HandoffSlot[int] = HandoffSlot()
    assert slot.claim() is None
    assert slot.closed is True

    # A late producer never blocks and its value is never delivered.
    assert slot.put(42) is False
    assert slot.claim() is None


def test_value_is_read_at_most_once() -> None:
    slot: HandoffSlot[str] = HandoffSlot()
    slot.put("once")
    assert slot.claim() == "once"
    assert slot.claim() is None


def test_wait_times_out_when_nothing_happens() -> None:
    slot: HandoffSlot[int] = HandoffSlot()
    assert slot.wait(0.01) is False


def test_interrupt_wakes_waiter_without_value() -> None:
    slot: HandoffSlot[int] = HandoffSlot()
    woke = threading.Event()

    def consumer() -> None:
        slot.wait(2.0)
        woke.set()

    thread = threading.Thread(target=consumer)
    thread.start()
    slot.interrupt()
    thread.join(2.0)

    assert woke.is_set()
    assert slot.claim() is None


def test_put_from_producer_thread_wakes_consumer() -> None:
    slot: HandoffSlot[str] = HandoffSlot()
    producer = threading.Thread(target=slot.put, args=("from-thread",))
    producer.start()

    assert slot.wait(2.0) is True
    producer.join(2.0)
    assert slot.claim() == "from-thread"
