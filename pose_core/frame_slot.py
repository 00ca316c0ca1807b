from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass(frozen=True)
class SlotFrame:
    """槽中保存的一帧及其元数据。"""

    image: np.ndarray
    t_host: float
    frame_idx: int = 0


class LatestFrameSlot:
    """只保留最新一帧的单槽信箱（keep-latest-only）。

    生产者 put() 会覆盖尚未被取走的旧帧；消费者 take() 取走最新帧并清空槽。
    处理慢于采集时，中间帧被丢弃而不是排队，流水线内部不会产生积压。
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._latest: Optional[SlotFrame] = None
        self._next_idx = 0
        self._delivered = 0
        self._dropped = 0
        self._closed = False

    def put(self, image: np.ndarray, t_host: Optional[float] = None) -> None:
        with self._cond:
            if self._closed:
                return
            if self._latest is not None:
                self._dropped += 1
            self._latest = SlotFrame(
                image=image,
                t_host=time.time() if t_host is None else float(t_host),
                frame_idx=self._next_idx,
            )
            self._next_idx += 1
            self._cond.notify()

    def take(self, timeout: Optional[float] = None) -> Optional[SlotFrame]:
        """取走最新帧。

        输入: timeout 为等待秒数；None 表示不等待，槽为空时立即返回。
        输出: SlotFrame；超时、槽为空或已关闭时返回 None。
        """
        with self._cond:
            if self._latest is None and timeout is not None and not self._closed:
                self._cond.wait_for(lambda: self._latest is not None or self._closed, timeout)
            frame = self._latest
            self._latest = None
            if frame is not None:
                self._delivered += 1
            return frame

    def close(self) -> None:
        """关闭槽并唤醒等待中的消费者。之后的 put() 被忽略。"""
        with self._cond:
            self._closed = True
            self._latest = None
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def get_status(self) -> dict:
        with self._cond:
            return {
                "has_frame": self._latest is not None,
                "frame_idx": self._latest.frame_idx if self._latest else None,
                "received": self._next_idx,
                "delivered": self._delivered,
                "dropped": self._dropped,
                "closed": self._closed,
            }
