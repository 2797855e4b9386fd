"""Request coordination in front of the rendering service.

Keeps a map from generation key (canonical code + closed flag) to the
in-flight task or the finished result:

- a finished result is served from a bounded LRU cache;
- concurrent callers for the same key share one in-flight task;
- a caller may tag its request with a ``target`` (e.g. one preview slot in
  the UI). A newer request for the same target supersedes the older one: the
  older task is cancelled once neither an untagged caller nor another target
  still waits on it, and a result that arrives for a superseded ticket is
  discarded (``None``).

Failures are never cached. Bookkeeping for a target is dropped as soon as
its newest request has finished.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import OrderedDict
from typing import Optional

from furnispec.core.spec.ast_nodes import ValidatedSpecification
from furnispec.gateway.generation import GenerationGateway, GenerationResult, generation_key

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 256


class GenerationCoordinator:
    def __init__(self, gateway: GenerationGateway, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        if cache_size < 1:
            raise ValueError("cache_size must be at least 1")
        self.gateway = gateway
        self.cache_size = cache_size
        self._results: OrderedDict[str, GenerationResult] = OrderedDict()
        self._inflight: dict[str, asyncio.Task] = {}
        self._untagged: dict[str, int] = {}      # key -> untagged callers waiting
        self._tickets = itertools.count(1)
        self._latest: dict[str, int] = {}        # target -> newest ticket
        self._target_keys: dict[str, str] = {}   # target -> key of newest request

    def cached(self, spec: ValidatedSpecification, closed: bool) -> Optional[GenerationResult]:
        return self._results.get(generation_key(spec, closed))

    def in_flight(self, spec: ValidatedSpecification, closed: bool) -> bool:
        return generation_key(spec, closed) in self._inflight

    def tracked_targets(self) -> int:
        """Number of targets with a request still pending."""
        return len(self._latest)

    async def generate(
        self,
        spec: ValidatedSpecification,
        closed: bool = False,
        target: Optional[str] = None,
    ) -> Optional[GenerationResult]:
        """Return artifacts for ``spec``, or None if superseded for ``target``.

        Raises:
            GatewayError: if the rendering service failed.
        """
        key = generation_key(spec, closed)

        ticket = None
        if target is not None:
            ticket = next(self._tickets)
            previous = self._target_keys.get(target)
            self._latest[target] = ticket
            self._target_keys[target] = key
            if previous is not None and previous != key:
                self._cancel_if_unwanted(previous)

        try:
            if key in self._results:
                logger.debug(f"Cache hit for {key}")
                self._results.move_to_end(key)
                return self._results[key]

            task = self._inflight.get(key)
            if task is None or task.done():
                task = asyncio.ensure_future(self._run(key, spec, closed))
                self._inflight[key] = task
            else:
                logger.debug(f"Joining in-flight request for {key}")

            if target is None:
                self._untagged[key] = self._untagged.get(key, 0) + 1
            try:
                result = await asyncio.shield(task)
            except asyncio.CancelledError:
                if task.cancelled():
                    logger.debug(f"Request for {key} was superseded")
                    return None
                raise
            finally:
                if target is None:
                    self._release_untagged(key)

            if target is not None and self._latest.get(target) != ticket:
                logger.debug(f"Discarding stale result for {key} (target {target})")
                return None
            return result
        finally:
            if target is not None and self._latest.get(target) == ticket:
                del self._latest[target]
                del self._target_keys[target]

    async def _run(self, key: str, spec: ValidatedSpecification, closed: bool) -> GenerationResult:
        try:
            result = await self.gateway.generate(spec, closed)
            self._store(key, result)
            return result
        finally:
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

    def _store(self, key: str, result: GenerationResult) -> None:
        self._results[key] = result
        self._results.move_to_end(key)
        while len(self._results) > self.cache_size:
            evicted, _ = self._results.popitem(last=False)
            logger.debug(f"Evicted {evicted} from the generation cache")

    def _release_untagged(self, key: str) -> None:
        remaining = self._untagged[key] - 1
        if remaining:
            self._untagged[key] = remaining
        else:
            del self._untagged[key]

    def _cancel_if_unwanted(self, key: str) -> None:
        if self._untagged.get(key) or key in self._target_keys.values():
            return
        task = self._inflight.pop(key, None)
        if task is not None and not task.done():
            logger.debug(f"Cancelling superseded request for {key}")
            task.cancel()
