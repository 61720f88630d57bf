"""Process session.

A session is the processor's only handle on flowfiles during one trigger:
- pull work with `get()` (None when the queue is empty)
- read/write content and put attributes (each returns a new FlowFile)
- `transfer()` the final FlowFile to a declared relationship

The host commits the session after `on_trigger` returns, or rolls it back
if the processor raised. Sessions are not shared between threads.
"""

from __future__ import annotations
from collections import deque
from typing import Deque, Dict, FrozenSet, Iterable, List, Mapping, Optional
import logging

from .context import FlowFile, Relationship
from ..errors import RoutingError, SessionError

log = logging.getLogger("concat_text.session")


class FlowFileQueue:
    """FIFO of flowfiles waiting for a processor."""

    def __init__(self, flowfiles: Iterable[FlowFile] = ()):
        self._q: Deque[FlowFile] = deque(flowfiles)

    def poll(self) -> Optional[FlowFile]:
        # deque.popleft is atomic, so concurrent sessions may share one queue
        try:
            return self._q.popleft()
        except IndexError:
            return None

    def requeue(self, flowfiles: Iterable[FlowFile]) -> None:
        self._q.extendleft(reversed(list(flowfiles)))

    def __len__(self) -> int:
        return len(self._q)


class ProcessSession:
    def __init__(self, queue: FlowFileQueue, relationships: FrozenSet[Relationship]):
        self._queue = queue
        self._relationships = {r.name: r for r in relationships}
        # uuid -> FlowFile as pulled, and uuid -> latest version
        self._originals: Dict[str, FlowFile] = {}
        self._current: Dict[str, FlowFile] = {}
        self._transfers: Dict[str, List[FlowFile]] = {}

    def get(self) -> Optional[FlowFile]:
        ff = self._queue.poll()
        if ff is None:
            return None
        self._originals[ff.uuid] = ff
        self._current[ff.uuid] = ff
        return ff

    def _check_owned(self, flowfile: FlowFile) -> None:
        if flowfile.uuid not in self._current:
            raise SessionError(f"flowfile {flowfile.uuid} does not belong to this session")

    def read(self, flowfile: FlowFile) -> bytes:
        self._check_owned(flowfile)
        return self._current[flowfile.uuid].content

    def write(self, flowfile: FlowFile, data: bytes) -> FlowFile:
        self._check_owned(flowfile)
        updated = self._current[flowfile.uuid].with_content(data)
        self._current[flowfile.uuid] = updated
        return updated

    def put_attribute(self, flowfile: FlowFile, key: str, value: str) -> FlowFile:
        return self.put_all_attributes(flowfile, {key: value})

    def put_all_attributes(self, flowfile: FlowFile, attributes: Mapping[str, str]) -> FlowFile:
        self._check_owned(flowfile)
        updated = self._current[flowfile.uuid].with_attributes(attributes)
        self._current[flowfile.uuid] = updated
        return updated

    def transfer(self, flowfile: FlowFile, relationship: Relationship) -> None:
        self._check_owned(flowfile)
        if relationship.name not in self._relationships:
            raise RoutingError(
                f"Unknown relationship: {relationship.name}. "
                f"Declared: {sorted(self._relationships)}"
            )
        final = self._current.pop(flowfile.uuid)
        self._transfers.setdefault(relationship.name, []).append(final)
        log.debug(f"transfer uuid={final.uuid} relationship={relationship.name}")

    def commit(self) -> Dict[str, List[FlowFile]]:
        if self._current:
            pending = ", ".join(sorted(self._current))
            raise SessionError(f"session committed with untransferred flowfiles: {pending}")
        out = self._transfers
        self._transfers = {}
        self._originals.clear()
        return out

    def rollback(self) -> List[FlowFile]:
        """Discard all changes and return the flowfiles as originally pulled."""
        originals = list(self._originals.values())
        self._originals.clear()
        self._current.clear()
        self._transfers = {}
        return originals
