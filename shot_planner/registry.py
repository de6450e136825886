from __future__ import annotations

import threading
from typing import Iterator, List, Optional

import numpy as np

from shot_planner.shot import AimRequest, SearchOptions

NO_TARGET_ERR = "Target no longer exists."


class AimRequestRegistry:
    """
    Owned store of aim requests addressed by stable integer handles.

    Removed slots are reused by later requests, lowest index first.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._slots: List[Optional[AimRequest]] = []
        self._free: List[int] = []

    def new(
        self,
        target_left: np.ndarray,
        target_right: np.ndarray,
        car_index: int,
        options: Optional[SearchOptions] = None,
    ) -> int:
        request = AimRequest(
            target_left=target_left,
            target_right=target_right,
            car_index=int(car_index),
            options=options or SearchOptions(),
        )
        with self._lock:
            if self._free:
                self._free.sort()
                handle = self._free.pop(0)
                self._slots[handle] = request
            else:
                self._slots.append(request)
                handle = len(self._slots) - 1
        return handle

    def get(self, handle: int) -> AimRequest:
        with self._lock:
            if handle < 0 or handle >= len(self._slots) or self._slots[handle] is None:
                raise IndexError(NO_TARGET_ERR)
            return self._slots[handle]  # type: ignore[return-value]

    def confirm(self, handle: int) -> None:
        self.get(handle).confirm()

    def remove(self, handle: int) -> None:
        with self._lock:
            self.get(handle)
            self._slots[handle] = None
            self._free.append(handle)

    def retain_confirmed(self) -> List[int]:
        """Drop every unconfirmed request; returns the freed handles."""
        freed = []
        with self._lock:
            for handle, request in enumerate(self._slots):
                if request is not None and not request.is_confirmed:
                    self._slots[handle] = None
                    self._free.append(handle)
                    freed.append(handle)
        return freed

    def handles(self) -> List[int]:
        with self._lock:
            return [i for i, r in enumerate(self._slots) if r is not None]

    def __len__(self) -> int:
        return len(self.handles())

    def __iter__(self) -> Iterator[int]:
        return iter(self.handles())

    def __contains__(self, handle: object) -> bool:
        with self._lock:
            return isinstance(handle, int) and 0 <= handle < len(self._slots) and self._slots[handle] is not None
