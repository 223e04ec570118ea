"""
testmirror/pipeline.py
======================

Composes the generator stages into one computation per compilation
snapshot::

    Compilation
      └─ VersionChainResolver ── None ──▶ nothing to generate
           └─ SymbolGraphCollector ──▶ candidate names (sorted)
                └─ fan-out: NameRewriter ─▶ SourceEmitter  (per candidate)
                     └─ SourceOutput  (hint name → source text)

Each candidate is processed independently, so the fan-out may run on a
thread pool; ``Executor.map`` keeps results in candidate order, so the
emission order is deterministic either way.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple

from analyzer_shims.cancellation import CancellationToken, throw_if_canceled
from analyzer_shims.symbols import Compilation
from testmirror.codegen import GeneratedSource, emit_source
from testmirror.collector import collect_candidates
from testmirror.config import DEFAULT_CONFIG, GeneratorConfig
from testmirror.errors import DuplicateHintNameError, InternalError
from testmirror.rewriter import rewrite_name
from testmirror.version_chain import VersionChain, VersionChainResolver

__all__ = [
    "SourceOutput",
    "GenerationCache",
    "MirrorPipeline",
    "generate_sources",
]

logger = logging.getLogger(__name__)

GeneratedSources = Tuple[GeneratedSource, ...]


# ═══════════════════════════════════════════════════════════════════════════
# SOURCE OUTPUT
# ═══════════════════════════════════════════════════════════════════════════

class SourceOutput:
    """
    The host's source-addition point: an ordered hint name → text mapping.

    Hint names are unique within one output.
    """

    def __init__(self) -> None:
        self._sources: Dict[str, str] = {}

    def add_source(self, hint_name: str, source_text: str) -> None:
        if hint_name in self._sources:
            raise DuplicateHintNameError(hint_name)
        self._sources[hint_name] = source_text

    def add_all(self, sources: Iterable[GeneratedSource]) -> None:
        """Add every source, or none of them if any hint name collides."""
        staged: Dict[str, str] = {}
        for source in sources:
            if source.hint_name in self._sources or source.hint_name in staged:
                raise DuplicateHintNameError(source.hint_name)
            staged[source.hint_name] = source.source_text
        self._sources.update(staged)

    def get(self, hint_name: str) -> Optional[str]:
        return self._sources.get(hint_name)

    @property
    def hint_names(self) -> List[str]:
        return list(self._sources)

    def items(self) -> List[Tuple[str, str]]:
        return list(self._sources.items())

    def __contains__(self, hint_name: object) -> bool:
        return hint_name in self._sources

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self.items())

    def __len__(self) -> int:
        return len(self._sources)


# ═══════════════════════════════════════════════════════════════════════════
# GENERATION CACHE
# ═══════════════════════════════════════════════════════════════════════════

class GenerationCache:
    """
    Opt-in memoization of whole pipeline runs, keyed by the compilation
    fingerprint and the generator config.  Bounded LRU, thread-safe.
    """

    def __init__(self, max_entries: int = DEFAULT_CONFIG.cache_size) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[Hashable, GeneratedSources]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Optional[GeneratedSources]:
        with self._lock:
            value = self._entries.get(key)
            if value is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return value

    def put(self, key: Hashable, value: GeneratedSources) -> None:
        if self.max_entries == 0:
            return
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ═══════════════════════════════════════════════════════════════════════════
# PIPELINE
# ═══════════════════════════════════════════════════════════════════════════

class MirrorPipeline:
    """
    Generates mirrored test classes for one compilation snapshot at a time.

    Usage::

        pipeline = MirrorPipeline(GeneratorConfig(max_workers=4))
        for source in pipeline.run(compilation, cancellation=token):
            host.add_source(source.hint_name, source.source_text)

    Without a cache the pipeline holds no state between runs, so one
    instance may serve concurrent snapshots.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        cache: Optional[GenerationCache] = None,
    ) -> None:
        self.config = (config or DEFAULT_CONFIG).ensure_valid()
        self.cache = cache
        self._resolver = VersionChainResolver(self.config)

    def run(
        self,
        compilation: Compilation,
        cancellation: Optional[CancellationToken] = None,
    ) -> GeneratedSources:
        """Return the generated sources for *compilation*, in candidate order."""
        chain = self._resolver.resolve(compilation.assembly_name, cancellation)
        if chain is None:
            return ()

        cache_key = None
        if self.cache is not None:
            cache_key = (compilation.fingerprint(), self.config)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit for %s", chain.current_assembly_name)
                return cached

        candidates = sorted(collect_candidates(compilation, chain, self.config, cancellation))
        sources = self._fan_out(candidates, chain, cancellation)

        if self.cache is not None:
            self.cache.put(cache_key, sources)
        logger.info(
            "Generated %d mirrored test class(es) for %s",
            len(sources), chain.current_assembly_name,
        )
        return sources

    def execute(
        self,
        compilation: Compilation,
        output: SourceOutput,
        cancellation: Optional[CancellationToken] = None,
    ) -> SourceOutput:
        """Run and deliver the sources to *output*; nothing is delivered on failure."""
        output.add_all(self.run(compilation, cancellation))
        return output

    def _fan_out(
        self,
        candidates: Sequence[str],
        chain: VersionChain,
        cancellation: Optional[CancellationToken],
    ) -> GeneratedSources:
        emit_one = partial(self._emit_one, chain=chain, cancellation=cancellation)
        workers = self.config.max_workers
        if workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="testmirror") as executor:
                return tuple(executor.map(emit_one, candidates))
        return tuple(emit_one(candidate) for candidate in candidates)

    def _emit_one(
        self,
        candidate: str,
        chain: Optional[VersionChain],
        cancellation: Optional[CancellationToken],
    ) -> GeneratedSource:
        throw_if_canceled(cancellation)
        if chain is None:
            raise InternalError("Not reachable: candidate without a version chain")
        spec = rewrite_name(candidate, chain, self.config)
        return emit_source(spec, self.config)


def generate_sources(
    compilation: Compilation,
    config: Optional[GeneratorConfig] = None,
    cancellation: Optional[CancellationToken] = None,
) -> GeneratedSources:
    """One-shot helper: run a fresh pipeline over *compilation*."""
    return MirrorPipeline(config).run(compilation, cancellation)
