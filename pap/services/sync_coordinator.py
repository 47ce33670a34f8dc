"""Sync coordinator: the only writer of the local cache and the remote store.

Each collection (claims, claimants) moves through::

    IDLE -> LOADING -> AUTHORITATIVE <-> MUTATING

Startup reads the local cache first (provisional), then waits a bounded
time for the remote store. A reachable remote with data always wins and
the cache is rewritten to mirror it. An unreachable remote with an empty
cache falls back to the bundled seed data and puts the session in demo
mode, where nothing is written anywhere until a reload reaches the
remote store.

Mutations are applied in memory, written through to the cache, and a
full-collection ``replace_all`` is scheduled in the background. There is
no retry queue: the next mutation re-sends the whole collection.

Stored documents that fail validation (written by another client, or by
an older schema) are never dropped. They are kept as raw dicts beside the
decoded items and written back unchanged with every cache or remote write.

All public methods must be called from the event loop thread.
"""

import asyncio
import copy
import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Type, Union
from urllib.parse import quote

from pydantic import BaseModel, TypeAdapter, ValidationError

from pap.clients.remote_store import CLAIMANTS, CLAIMS, RemoteFetch, RemoteStoreClient
from pap.domain import queries, seed, statistics
from pap.engines import heuristic_analyzer
from pap.logging_config import get_logger
from pap.schemas.analysis import ClaimAnalysis
from pap.schemas.claim import AnalysisParameter, Claim, ClaimDraft
from pap.schemas.claimant import (
    DEFAULT_AFFILIATION,
    DEFAULT_BIO,
    Claimant,
    ClaimantBackground,
)
from pap.stores.local_cache import LocalCacheStore
from pap.utils.staleness import RequestTokens

logger = get_logger(__name__)

_SESSION = "session"
_claims_adapter = TypeAdapter(List[Claim])


class SyncError(Exception):
    pass


class SyncNotReadyError(SyncError):
    """A mutation arrived before the collection finished loading."""


class ClaimNotFoundError(SyncError, LookupError):
    pass


class ClaimantNotFoundError(SyncError, LookupError):
    pass


class ImportValidationError(SyncError, ValueError):
    """Import payload rejected; nothing was changed."""


class CollectionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    AUTHORITATIVE = "authoritative"
    MUTATING = "mutating"


class DataSource(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"
    SEED = "seed"


@dataclass
class _Collection:
    name: str
    model: Type[BaseModel]
    items: list = field(default_factory=list)
    undecoded: List[Dict[str, Any]] = field(default_factory=list)
    state: CollectionState = CollectionState.IDLE
    source: Optional[DataSource] = None
    provisional: bool = False
    demo: bool = False
    generation: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def _dump(entity: BaseModel) -> Dict[str, Any]:
    return entity.model_dump(mode="json", by_alias=True, exclude_none=True)


def _documents(coll: _Collection) -> List[Dict[str, Any]]:
    """Decoded items plus the undecoded documents whose id is not shadowed."""
    docs = [_dump(e) for e in coll.items]
    ids = {d["id"] for d in docs}
    docs.extend(copy.deepcopy(raw) for raw in coll.undecoded if raw.get("id") not in ids)
    return docs


class SyncCoordinator:
    def __init__(
        self,
        local_cache: LocalCacheStore,
        remote_store: RemoteStoreClient,
        remote_fetch_timeout: float = 8.0,
    ):
        self.cache = local_cache
        self.remote = remote_store
        self.remote_fetch_timeout = remote_fetch_timeout
        self._claims = _Collection(CLAIMS, Claim)
        self._claimants = _Collection(CLAIMANTS, Claimant)
        self._tokens = RequestTokens()
        self._pending: Set[asyncio.Task] = set()

    # ══════════════════════════════════════════════════════════════════
    # LIFECYCLE
    # ══════════════════════════════════════════════════════════════════

    async def start(self) -> None:
        """Initialise the remote client and run the startup protocol."""
        await self.remote.init()
        await self._load_all()

    async def reload(self) -> None:
        """Run the startup protocol again; the way out of demo mode."""
        await self._load_all()

    async def dispose(self) -> None:
        await self.flush()
        self._tokens.release_all()
        await self.remote.dispose()

    async def flush(self) -> None:
        """Wait for every scheduled remote write to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ══════════════════════════════════════════════════════════════════
    # STARTUP PROTOCOL
    # ══════════════════════════════════════════════════════════════════

    async def _load_all(self) -> None:
        token = self._tokens.issue(_SESSION)
        wants_push = await asyncio.gather(
            self._load(self._claims, token),
            self._load(self._claimants, token),
        )
        if not self._tokens.is_current(token, _SESSION):
            return
        # Decided only once both collections are loaded: a seeded sibling
        # means demo mode, and demo mode writes nothing
        for coll, push in zip((self._claims, self._claimants), wants_push):
            if push and not self.demo_mode:
                self._schedule_push(coll)
        logger.info("sync_started", **self.status())

    async def _load(self, coll: _Collection, token: int) -> bool:
        """Load one collection; returns whether the remote store should be seeded from it."""
        coll.state = CollectionState.LOADING
        push = False

        cached, cached_raw = self._decode(coll, self.cache.load(coll.name), origin="local cache")
        if cached:
            coll.items = cached
            coll.undecoded = cached_raw
            coll.source = DataSource.LOCAL
            coll.provisional = True

        try:
            fetch = await asyncio.wait_for(
                self.remote.fetch_all_with_status(coll.name),
                timeout=self.remote_fetch_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("remote_fetch_timeout", collection=coll.name, timeout=self.remote_fetch_timeout)
            fetch = RemoteFetch()

        if not self._tokens.is_current(token, _SESSION):
            logger.info("stale_load_discarded", collection=coll.name)
            return False

        if fetch.reachable:
            remote_items, remote_raw = self._decode(coll, fetch.items, origin="remote store")
            coll.demo = False
            if remote_items or remote_raw:
                coll.items = remote_items
                coll.undecoded = remote_raw
                coll.source = DataSource.REMOTE
                self.cache.save(coll.name, _documents(coll))
            elif cached:
                # Empty remote store: seed it from this device
                coll.source = DataSource.LOCAL
                push = True
            else:
                coll.items = []
                coll.undecoded = cached_raw
                coll.source = DataSource.REMOTE
        elif cached:
            coll.demo = False
        else:
            coll.items = self._seed(coll)
            coll.undecoded = []
            coll.source = DataSource.SEED
            coll.demo = True
            logger.warning("demo_mode_entered", collection=coll.name, items=len(coll.items))

        coll.provisional = False
        coll.state = CollectionState.AUTHORITATIVE
        logger.info(
            "collection_loaded",
            collection=coll.name,
            source=coll.source.value,
            items=len(coll.items),
            remote_reachable=fetch.reachable,
            undecoded=len(coll.undecoded),
        )
        return push

    @staticmethod
    def _seed(coll: _Collection) -> list:
        return seed.seed_claims() if coll.name == CLAIMS else seed.seed_claimants()

    @staticmethod
    def _decode(
        coll: _Collection, raw: Sequence[Dict[str, Any]], origin: str
    ) -> Tuple[list, List[Dict[str, Any]]]:
        """Split stored documents into validated models and untouched raw dicts."""
        items, undecoded = [], []
        for entry in raw:
            try:
                items.append(coll.model.model_validate(entry))
            except ValidationError as exc:
                undecoded.append(entry)
                logger.warning(
                    "invalid_entity_preserved",
                    collection=coll.name,
                    origin=origin,
                    entity_id=entry.get("id"),
                    errors=exc.error_count(),
                )
        return items, undecoded

    # ══════════════════════════════════════════════════════════════════
    # READS
    # ══════════════════════════════════════════════════════════════════

    @property
    def demo_mode(self) -> bool:
        return self._claims.demo or self._claimants.demo

    @property
    def ready(self) -> bool:
        return all(
            c.state in (CollectionState.AUTHORITATIVE, CollectionState.MUTATING)
            for c in (self._claims, self._claimants)
        )

    def list_claims(self, query: str = "", category: Optional[str] = None) -> List[Claim]:
        claims = queries.filter_claims(
            self._claims.items, self._claimants.items, query, category or queries.ALL_CATEGORIES
        )
        return [c.model_copy(deep=True) for c in claims]

    def get_claim(self, claim_id: str) -> Claim:
        return self._find_claim(claim_id).model_copy(deep=True)

    def list_claimants(self) -> List[Claimant]:
        """Claimants with totals and accuracy recomputed from the claims."""
        return [statistics.with_derived_stats(c, self._claims.items) for c in self._claimants.items]

    def get_claimant(self, claimant_id: str) -> Claimant:
        return statistics.with_derived_stats(self._find_claimant(claimant_id), self._claims.items)

    def claimant_claims(self, claimant_id: str) -> List[Claim]:
        self._find_claimant(claimant_id)
        return [c.model_copy(deep=True) for c in queries.claims_for(self._claims.items, claimant_id)]

    def dashboard(self) -> Dict[str, Any]:
        claims = self._claims.items
        return {
            "total_claims": len(claims),
            "total_claimants": len(self._claimants.items),
            "overall_accuracy": statistics.overall_accuracy(claims),
            "by_category": statistics.category_counts(claims),
            "by_status": statistics.status_counts(claims),
            "topics": [{"topic": t, "count": n} for t, n in statistics.topic_counts(claims)],
            "demo_mode": self.demo_mode,
        }

    def status(self) -> Dict[str, Any]:
        return {
            "demo_mode": self.demo_mode,
            "remote_configured": self.remote.is_configured(),
            "pending_writes": len(self._pending),
            "collections": {
                c.name: {
                    "state": c.state.value,
                    "source": c.source.value if c.source else None,
                    "provisional": c.provisional,
                    "demo": c.demo,
                    "items": len(c.items),
                    "undecoded": len(c.undecoded),
                }
                for c in (self._claims, self._claimants)
            },
        }

    # ══════════════════════════════════════════════════════════════════
    # MUTATIONS
    # ══════════════════════════════════════════════════════════════════

    def create_claim(self, draft: ClaimDraft) -> Claim:
        """Record a new claim, creating its claimant on first mention.

        The claimant is matched case-insensitively by name.
        """
        self._require_ready(self._claims, self._claimants)
        if not draft.claimant_name:
            raise ValueError("claimant name is required")

        vagueness_index = draft.vagueness_index or heuristic_analyzer.vagueness(draft.text)

        claimant = queries.find_claimant_by_name(self._claimants.items, draft.claimant_name)
        if claimant is None:
            claimant = Claimant(
                id=f"cl-{uuid.uuid4().hex[:12]}",
                name=draft.claimant_name,
                bio=DEFAULT_BIO,
                affiliation=DEFAULT_AFFILIATION,
                photo_url=(
                    "https://ui-avatars.com/api/?name="
                    f"{quote(draft.claimant_name, safe='')}&background=random"
                ),
                tags=[draft.category.value],
                accuracy_rate=0,
                vagueness_score=vagueness_index,
                total_claims=1,
            )
            with self._mutating(self._claimants):
                self._claimants.items.append(claimant)
            logger.info("claimant_created", claimant_id=claimant.id)

        claim = Claim(
            id=f"new-{uuid.uuid4().hex[:12]}",
            claimant_id=claimant.id,
            text=draft.text,
            date_made=date.today(),
            target_date=draft.target_date,
            category=draft.category,
            status=draft.status,
            sources=draft.sources,
            vagueness_index=vagueness_index,
            analysis_params=draft.analysis_params or [],
            verification_vectors=draft.verification_vectors or [],
            web_evidence_links=draft.web_evidence_links,
            topic_group=draft.topic_group or None,
            history=[],
        )
        with self._mutating(self._claims):
            self._claims.items.insert(0, claim)
        logger.info("claim_created", claim_id=claim.id, claimant_id=claimant.id)
        return claim.model_copy(deep=True)

    def update_claim(self, claim_id: str, draft: ClaimDraft) -> Claim:
        """Edit a claim, recording exactly one snapshot of its previous state.

        ``date_made`` and ``claimant_id`` never change on edit. Optional
        fields the caller did not send keep their current values.
        """
        self._require_ready(self._claims)
        current = self._find_claim(claim_id)

        changes: Dict[str, Any] = {
            "text": draft.text,
            "category": draft.category,
            "status": draft.status,
            "target_date": draft.target_date,
            "sources": draft.sources,
            "topic_group": draft.topic_group or None,
            "history": [*current.history, current.snapshot(datetime.now(timezone.utc))],
        }
        if draft.vagueness_index is not None:
            changes["vagueness_index"] = draft.vagueness_index
        if draft.analysis_params is not None:
            changes["analysis_params"] = draft.analysis_params
        if draft.verification_vectors is not None:
            changes["verification_vectors"] = draft.verification_vectors
        if draft.web_evidence_links is not None:
            changes["web_evidence_links"] = draft.web_evidence_links

        # Fields left out of the request keep their current values
        for name in ("category", "status", "target_date", "sources", "topic_group"):
            if name not in draft.model_fields_set:
                changes.pop(name)

        updated = Claim.model_validate({**current.model_dump(), **changes})
        with self._mutating(self._claims):
            self._replace(self._claims, updated)
        logger.info("claim_updated", claim_id=claim_id, revisions=len(updated.history))
        return updated.model_copy(deep=True)

    def apply_analysis(self, claim_id: str, analysis: ClaimAnalysis) -> Claim:
        """Merge a (re-)analysis into a claim without touching its history.

        Machine-generated checklist items are replaced; human-added ones
        are kept after them.
        """
        self._require_ready(self._claims)
        current = self._find_claim(claim_id)

        human = [p for p in current.analysis_params if p.human_added]
        machine = [p for p in analysis.analysis_params if not p.human_added]
        updated = current.model_copy(
            update={
                "vagueness_index": analysis.vagueness_score,
                "analysis_params": machine + human,
                "verification_vectors": list(analysis.verification_vectors),
                "web_evidence_links": list(analysis.web_evidence) or None,
            },
            deep=True,
        )
        with self._mutating(self._claims):
            self._replace(self._claims, updated)
        logger.info("analysis_applied", claim_id=claim_id, source=analysis.source.value)
        return updated.model_copy(deep=True)

    def add_human_param(self, claim_id: str, label: str) -> Claim:
        label = (label or "").strip()
        if not label:
            raise ValueError("checklist label must not be empty")
        self._require_ready(self._claims)
        current = self._find_claim(claim_id)

        param = AnalysisParameter(label=label, fulfilled=False, human_added=True)
        updated = current.model_copy(
            update={"analysis_params": [*current.analysis_params, param]}, deep=True
        )
        with self._mutating(self._claims):
            self._replace(self._claims, updated)
        return updated.model_copy(deep=True)

    def delete_claim(self, claim_id: str) -> None:
        self._require_ready(self._claims)
        self._find_claim(claim_id)
        with self._mutating(self._claims):
            self._claims.items = [c for c in self._claims.items if c.id != claim_id]
        logger.info("claim_deleted", claim_id=claim_id)

    def apply_background(self, claimant_id: str, background: ClaimantBackground) -> Claimant:
        """Fill placeholder profile fields from a background lookup.

        A bio or affiliation the user already wrote is left alone; tags
        are merged without duplicates.
        """
        self._require_ready(self._claimants)
        current = self._find_claimant(claimant_id)

        changes: Dict[str, Any] = {}
        if background.summary and current.bio.strip() in ("", DEFAULT_BIO):
            changes["bio"] = background.summary.strip()
        if background.affiliation and current.affiliation.strip() in ("", DEFAULT_AFFILIATION):
            changes["affiliation"] = background.affiliation.strip()
        known = {t.casefold() for t in current.tags}
        extra = [t for t in background.known_for if t.strip() and t.casefold() not in known]
        if extra:
            changes["tags"] = [*current.tags, *extra]

        if not changes:
            return statistics.with_derived_stats(current, self._claims.items)

        updated = current.model_copy(update=changes, deep=True)
        with self._mutating(self._claimants):
            self._replace(self._claimants, updated)
        logger.info("claimant_enriched", claimant_id=claimant_id, fields=sorted(changes))
        return statistics.with_derived_stats(updated, self._claims.items)

    # ── bulk export / import ─────────────────────────────────────────

    def export_claims(self) -> str:
        """The whole Claim collection as a JSON array."""
        return json.dumps([_dump(c) for c in self._claims.items], ensure_ascii=False, indent=2)

    def import_claims(self, payload: Union[str, list]) -> int:
        """Replace the Claim collection with an exported JSON array.

        Raises:
            ImportValidationError: If the payload is not a JSON array of
                valid claims. The current collection is left untouched.
        """
        self._require_ready(self._claims)
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except ValueError as exc:
                raise ImportValidationError(f"Import is not valid JSON: {exc}") from exc
        if not isinstance(payload, list):
            raise ImportValidationError(
                f"Import must be a JSON array of claims, got {type(payload).__name__}"
            )
        try:
            claims = _claims_adapter.validate_python(payload)
        except ValidationError as exc:
            raise ImportValidationError(
                f"Import contains {exc.error_count()} invalid field(s)"
            ) from exc
        ids = [c.id for c in claims]
        if len(ids) != len(set(ids)):
            raise ImportValidationError("Import contains duplicate claim ids")

        with self._mutating(self._claims):
            self._claims.items = claims
        logger.info("claims_imported", count=len(claims))
        return len(claims)

    # ══════════════════════════════════════════════════════════════════
    # INTERNAL
    # ══════════════════════════════════════════════════════════════════

    def _require_ready(self, *colls: _Collection) -> None:
        for coll in colls:
            if coll.state != CollectionState.AUTHORITATIVE:
                raise SyncNotReadyError(f"{coll.name} collection is {coll.state.value}")

    def _find_claim(self, claim_id: str) -> Claim:
        if not claim_id:
            raise ValueError("claim id must not be empty")
        for claim in self._claims.items:
            if claim.id == claim_id:
                return claim
        raise ClaimNotFoundError(claim_id)

    def _find_claimant(self, claimant_id: str) -> Claimant:
        if not claimant_id:
            raise ValueError("claimant id must not be empty")
        for claimant in self._claimants.items:
            if claimant.id == claimant_id:
                return claimant
        raise ClaimantNotFoundError(claimant_id)

    @staticmethod
    def _replace(coll: _Collection, entity: BaseModel) -> None:
        coll.items = [entity if e.id == entity.id else e for e in coll.items]

    def _mutating(self, coll: _Collection) -> "_Mutation":
        return _Mutation(self, coll)

    def _persist(self, coll: _Collection) -> None:
        """Write-through to the cache and schedule the remote write."""
        if self.demo_mode:
            logger.info("demo_mode_write_suppressed", collection=coll.name)
            return
        if not self.cache.save(coll.name, _documents(coll)):
            logger.warning("local_cache_write_failed", collection=coll.name)
        self._schedule_push(coll)

    def _schedule_push(self, coll: _Collection) -> None:
        coll.generation += 1
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("remote_write_skipped_no_loop", collection=coll.name)
            return
        task = loop.create_task(self._push(coll, coll.generation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _push(self, coll: _Collection, generation: int) -> None:
        async with coll.lock:
            # A newer mutation has its own push queued with fresher state
            if generation != coll.generation or self.demo_mode:
                return
            payload = _documents(coll)
            try:
                ok = await self.remote.replace_all(coll.name, payload)
            except Exception:
                logger.exception("remote_write_crashed", collection=coll.name)
                return
        if ok:
            logger.debug("remote_write_ok", collection=coll.name, items=len(payload))
        elif self.remote.is_configured():
            logger.warning("remote_write_failed", collection=coll.name, items=len(payload))


class _Mutation:
    """Context manager marking a collection MUTATING and persisting on success."""

    def __init__(self, coordinator: SyncCoordinator, coll: _Collection):
        self.coordinator = coordinator
        self.coll = coll

    def __enter__(self) -> _Collection:
        self.coll.state = CollectionState.MUTATING
        return self.coll

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.coll.state = CollectionState.AUTHORITATIVE
        if exc_type is None:
            self.coordinator._persist(self.coll)
        return False
