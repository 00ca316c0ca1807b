from __future__ import annotations

import threading

import numpy as np

from pose_core.frame_slot import LatestFrameSlot


def img(value: int) -> np.ndarray:
    return np.full((2, 2, 3), value, dtype=np.uint8)


def test_take_on_empty_slot_returns_none():
    slot = LatestFrameSlot()
    assert slot.take() is None
    assert slot.take(timeout=0.01) is None


def test_only_latest_frame_is_delivered():
    slot = LatestFrameSlot()
    for v in (1, 2, 3):
        slot.put(img(v), t_host=float(v))

    item = slot.take()

    assert int(item.image[0, 0, 0]) == 3
    assert item.frame_idx == 2
    assert item.t_host == 3.0
    assert slot.take() is None
    st = slot.get_status()
    assert st["received"] == 3
    assert st["delivered"] == 1
    assert st["dropped"] == 2


def test_waiting_consumer_is_woken_by_put():
    slot = LatestFrameSlot()
    got = []

    t = threading.Thread(target=lambda: got.append(slot.take(timeout=5.0)))
    t.start()
    slot.put(img(7))
    t.join(timeout=5.0)

    assert not t.is_alive()
    assert got and int(got[0].image[0, 0, 0]) == 7


def test_close_wakes_consumer_and_ignores_later_frames():
    slot = LatestFrameSlot()
    got = []

    t = threading.Thread(target=lambda: got.append(slot.take(timeout=5.0)))
    t.start()
    slot.close()
    t.join(timeout=5.0)

    assert got == [None]
    slot.put(img(1))
    assert slot.take() is None
    assert slot.closed
