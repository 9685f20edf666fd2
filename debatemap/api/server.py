"""
Debate Map: Store API Server
============================

HTTP driver over a single DebateStore. Every request is one store
operation; the server adds no rules of its own.

Endpoints:
- GET  /health
- GET  /api/v1/snapshot               -> snapshot document
- PUT  /api/v1/snapshot               -> replace state (collapse_all query flag)
- GET  /api/v1/view                   -> rendered DebateGraphView
- POST /api/v1/theses|arguments|counters|evidence|agreements|summaries
- PATCH/DELETE /api/v1/nodes/{id}
- PUT  /api/v1/nodes/{id}/parent|target
- PUT/POST /api/v1/nodes/{id}/links/{t2|refs}
- POST /api/v1/participants, PATCH /api/v1/participants/{id}
- PUT  /api/v1/collapse, POST /api/v1/nodes/{id}/toggle-collapsed
- POST /api/v1/edges/{id}/expand
- GET  /api/v1/eligible-targets?kind=&participant_id=
- GET  /api/v1/nodes/{id}/eligible-parents|eligible-t2-peers
- GET  /api/v1/ui, PUT /api/v1/ui/selection|search|filters|edge-focus|
       time-cursor|link-highlight, POST /api/v1/ui/clear-pane
- GET  /api/v1/audit

Error mapping:
- NotFoundError                         -> 404
- CycleError, DuplicateSummaryError     -> 409
- ConstraintError                       -> 422
- UnsupportedSnapshotError              -> 400

Usage:
    uvicorn debatemap.api.server:app --reload
"""
import os
from contextlib import asynccontextmanager, contextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import DebateMapConfig
from ..contracts.base import EdgeKind, FilterMode, StatementKind, StrengthType
from ..contracts.errors import (
    CycleError, DebateMapError, DuplicateSummaryError, NotFoundError,
    UnsupportedSnapshotError,
)
from ..core.store import DebateStore
from ..core.ui_state import LinkHighlight
from ..observability import ObservabilityEngine
from ..storage.snapshot import decode_snapshot
from .mapper import map_participant, map_relation, map_statement, map_ui, map_view
from debateview.mapper import GraphViewMapper


# =============================================================================
# REQUEST MODELS
# =============================================================================

class StatementIn(BaseModel):
    participant_id: str
    title: str
    body: Optional[str] = None
    first_mention: Optional[str] = None


class ArgumentIn(StatementIn):
    parent_id: Optional[str] = None
    strength_type: Optional[str] = None


class TargetedIn(StatementIn):
    target_id: str
    strength_type: Optional[str] = None


class SummaryIn(StatementIn):
    thesis_id: str


class NodePatch(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None
    first_mention: Optional[str] = None
    strength_type: Optional[str] = None
    participant_id: Optional[str] = None
    collapsed: Optional[bool] = None
    self_collapsed: Optional[bool] = None


class ParentIn(BaseModel):
    parent_id: str


class TargetIn(BaseModel):
    edge_kind: str
    target_id: str


class LinksIn(BaseModel):
    target_ids: List[str]


class ParticipantIn(BaseModel):
    name: Optional[str] = None


class CollapseIn(BaseModel):
    collapsed: bool


class SelectionIn(BaseModel):
    node_id: Optional[str] = None
    reparent_target_id: Optional[str] = None
    eligible_attach_targets: Optional[List[str]] = None


class SearchIn(BaseModel):
    query: str = ""
    mode: Optional[str] = None


class FiltersIn(BaseModel):
    participants: List[str] = []
    kinds: List[str] = []
    strengths: List[str] = []
    mode: Optional[str] = None


class EdgeFocusIn(BaseModel):
    active_edge_id: Optional[str] = None
    hover_edge_id: Optional[str] = None


class TimeCursorIn(BaseModel):
    cursor: Optional[str] = None


class LinkHighlightIn(BaseModel):
    source_id: Optional[str] = None
    target_id: Optional[str] = None


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

def _status_for(exc: DebateMapError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, (CycleError, DuplicateSummaryError)):
        return 409
    if isinstance(exc, UnsupportedSnapshotError):
        return 400
    return 422


def create_app(config: Optional[DebateMapConfig] = None) -> FastAPI:
    """Build the application around one store."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or DebateMapConfig.from_env()
        observability = ObservabilityEngine(cfg.observability)
        store = DebateStore(cfg.store, observability)

        if cfg.snapshot_path and os.path.exists(cfg.snapshot_path):
            print(f"[*] Loading snapshot from: {cfg.snapshot_path}")
            with open(cfg.snapshot_path, 'rb') as f:
                store.load_snapshot(f.read(), collapse_all=True)

        app.state.config = cfg
        app.state.observability = observability
        app.state.store = store
        print("[*] Debate map store initialized.")

        yield

        print("[*] Shutting down debate map store.")
        app.state.store = None

    app = FastAPI(
        title="Debate Map API",
        version="1.0.0",
        description="Driver API for the debate map graph store",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(DebateMapError)
    async def debate_map_error(request: Request, exc: DebateMapError):
        return JSONResponse(
            status_code=_status_for(exc),
            content={"error": exc.code.name, "detail": exc.message},
        )

    _register_routes(app)
    return app


def _store(request: Request) -> DebateStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Store not initialized")
    return store


def _created(store: DebateStore, node_id: str) -> Dict[str, Any]:
    return {"id": node_id, "node": map_statement(store.node(node_id))}


# =============================================================================
# ENDPOINTS
# =============================================================================

def _register_routes(app: FastAPI) -> None:

    @app.get("/health")
    async def health_check(request: Request):
        store = _store(request)
        return {"status": "online", "nodes": len(store.nodes), "edges": len(store.edges)}

    # ---- snapshot ----------------------------------------------------------

    @app.get("/api/v1/snapshot")
    async def get_snapshot(request: Request):
        return _store(request).get_snapshot()

    @app.put("/api/v1/snapshot")
    async def put_snapshot(request: Request, collapse_all: bool = False):
        raw = await request.body()
        document = decode_snapshot(raw)
        store = _store(request)
        store.load_snapshot(document, collapse_all=collapse_all)
        return {"nodes": len(store.nodes), "edges": len(store.edges)}

    # ---- view --------------------------------------------------------------

    @app.get("/api/v1/view")
    async def get_view(request: Request):
        store = _store(request)
        mapper = GraphViewMapper(request.app.state.config.layout)
        return map_view(mapper.build_for_store(store))

    @app.get("/api/v1/nodes")
    async def list_nodes(request: Request):
        store = _store(request)
        return {
            "nodes": [map_statement(n) for n in store.nodes],
            "edges": [map_relation(e) for e in store.edges],
            "participants": [
                map_participant(p, store.participant_color(p.id)) for p in store.participants
            ],
        }

    # ---- statement creation ------------------------------------------------

    @app.post("/api/v1/theses", status_code=201)
    async def add_thesis(request: Request, payload: StatementIn):
        store = _store(request)
        node_id = store.add_thesis(payload.participant_id, payload.title, payload.body,
                                   payload.first_mention)
        return _created(store, node_id)

    @app.post("/api/v1/arguments", status_code=201)
    async def add_argument(request: Request, payload: ArgumentIn):
        store = _store(request)
        node_id = store.add_argument(payload.participant_id, payload.title, payload.body,
                                     payload.parent_id, payload.strength_type,
                                     payload.first_mention)
        return _created(store, node_id)

    @app.post("/api/v1/counters", status_code=201)
    async def add_counter(request: Request, payload: TargetedIn):
        store = _store(request)
        node_id = store.add_counter(payload.participant_id, payload.target_id, payload.title,
                                    payload.body, payload.strength_type, payload.first_mention)
        return _created(store, node_id)

    @app.post("/api/v1/evidence", status_code=201)
    async def add_evidence(request: Request, payload: TargetedIn):
        store = _store(request)
        node_id = store.add_evidence(payload.participant_id, payload.target_id, payload.title,
                                     payload.body, payload.strength_type, payload.first_mention)
        return _created(store, node_id)

    @app.post("/api/v1/agreements", status_code=201)
    async def add_agreement(request: Request, payload: TargetedIn):
        store = _store(request)
        node_id = store.add_agreement(payload.participant_id, payload.target_id, payload.title,
                                      payload.body, payload.first_mention)
        return _created(store, node_id)

    @app.post("/api/v1/summaries", status_code=201)
    async def add_summary(request: Request, payload: SummaryIn):
        store = _store(request)
        node_id = store.add_argument_summary(payload.participant_id, payload.thesis_id,
                                             payload.title, payload.body, payload.first_mention)
        return _created(store, node_id)

    # ---- statement changes -------------------------------------------------

    @app.patch("/api/v1/nodes/{node_id}")
    async def patch_node(request: Request, node_id: str, payload: NodePatch):
        store = _store(request)
        updated = store.update_node(node_id, payload.model_dump(exclude_unset=True))
        return map_statement(updated)

    @app.delete("/api/v1/nodes/{node_id}", status_code=204)
    async def delete_node(request: Request, node_id: str):
        _store(request).delete_node(node_id)

    @app.put("/api/v1/nodes/{node_id}/parent")
    async def set_parent(request: Request, node_id: str, payload: ParentIn):
        store = _store(request)
        store.set_supports_parent(node_id, payload.parent_id)
        return map_statement(store.node(node_id))

    @app.put("/api/v1/nodes/{node_id}/target")
    async def set_target(request: Request, node_id: str, payload: TargetIn):
        store = _store(request)
        store.set_edge_target(node_id, payload.edge_kind, payload.target_id)
        return map_statement(store.node(node_id))

    @app.get("/api/v1/nodes/{node_id}/eligible-parents")
    async def eligible_parents(request: Request, node_id: str):
        return {"ids": _store(request).eligible_parents(node_id)}

    @app.put("/api/v1/nodes/{node_id}/links/{link_kind}")
    async def set_links(request: Request, node_id: str, link_kind: str, payload: LinksIn):
        store = _store(request)
        if _link_kind(link_kind) == EdgeKind.T2_LINK:
            created = store.set_t2_links(node_id, payload.target_ids)
        else:
            created = store.set_ref_links(node_id, payload.target_ids)
        return {"created": created}

    @app.post("/api/v1/nodes/{node_id}/links/{link_kind}")
    async def add_links(request: Request, node_id: str, link_kind: str, payload: LinksIn):
        store = _store(request)
        if _link_kind(link_kind) == EdgeKind.T2_LINK:
            created = store.add_t2_links(node_id, payload.target_ids)
        else:
            created = store.add_ref_links(node_id, payload.target_ids)
        return {"created": created}

    @app.put("/api/v1/collapse")
    async def collapse_all(request: Request, payload: CollapseIn):
        _store(request).set_all_collapsed(payload.collapsed)
        return {"collapsed": payload.collapsed}

    @app.post("/api/v1/nodes/{node_id}/toggle-collapsed")
    async def toggle_collapsed(request: Request, node_id: str):
        return {"id": node_id, "collapsed": _store(request).toggle_collapsed(node_id)}

    @app.post("/api/v1/edges/{edge_id}/expand")
    async def expand_from_edge(request: Request, edge_id: str):
        return {"expanded": _store(request).expand_from_edge(edge_id)}

    @app.get("/api/v1/nodes/{node_id}/eligible-t2-peers")
    async def eligible_t2_peers(request: Request, node_id: str):
        return {"ids": _store(request).eligible_t2_peers(node_id)}

    @app.get("/api/v1/eligible-targets")
    async def eligible_targets(request: Request, kind: str, participant_id: str):
        store = _store(request)
        with _bad_value():
            ids = store.eligible_targets_for_new(kind, participant_id)
        return {"ids": ids}

    # ---- participants ------------------------------------------------------

    @app.post("/api/v1/participants", status_code=201)
    async def add_participant(request: Request, payload: Optional[ParticipantIn] = Body(default=None)):
        store = _store(request)
        participant_id = store.add_participant(payload.name if payload else None)
        return {"id": participant_id}

    @app.patch("/api/v1/participants/{participant_id}")
    async def rename_participant(request: Request, participant_id: str, payload: ParticipantIn):
        if payload.name is None:
            raise HTTPException(status_code=422, detail="name is required")
        _store(request).update_participant(participant_id, payload.name)
        return {"id": participant_id, "name": payload.name}

    # ---- UI overlay --------------------------------------------------------

    @app.get("/api/v1/ui")
    async def get_ui(request: Request):
        return map_ui(_store(request).ui)

    @app.put("/api/v1/ui/selection")
    async def set_selection(request: Request, payload: SelectionIn):
        store = _store(request)
        fields = payload.model_dump(exclude_unset=True)
        for node_id in [fields.get("node_id"), fields.get("reparent_target_id"),
                        *(fields.get("eligible_attach_targets") or [])]:
            if node_id:
                store.node(node_id)
        if "node_id" in fields:
            store.ui.set_selected_node_id(payload.node_id)
        if "reparent_target_id" in fields:
            store.ui.set_reparent_target_id(payload.reparent_target_id)
        if "eligible_attach_targets" in fields:
            store.ui.set_eligible_attach_targets(payload.eligible_attach_targets or [])
        return map_ui(store.ui)

    @app.put("/api/v1/ui/search")
    async def set_search(request: Request, payload: SearchIn):
        ui = _store(request).ui
        with _bad_value():
            mode = FilterMode(payload.mode) if payload.mode else None
        ui.set_search(payload.query, mode)
        return map_ui(ui)

    @app.put("/api/v1/ui/filters")
    async def set_filters(request: Request, payload: FiltersIn):
        store = _store(request)
        for participant_id in payload.participants:
            store.graph.participants.require(participant_id)
        with _bad_value():
            kinds = [StatementKind(k) for k in payload.kinds]
            strengths = [StrengthType(s) for s in payload.strengths]
            mode = FilterMode(payload.mode) if payload.mode else None
        ui = store.ui
        ui.clear_filters()
        for participant_id in payload.participants:
            ui.set_participant_filter(participant_id, True)
        for kind in kinds:
            ui.set_kind_filter(kind, True)
        for strength in strengths:
            ui.set_strength_filter(strength, True)
        if mode is not None:
            ui.set_filter_mode(mode)
        return map_ui(ui)

    @app.put("/api/v1/ui/edge-focus")
    async def set_edge_focus(request: Request, payload: EdgeFocusIn):
        store = _store(request)
        fields = payload.model_dump(exclude_unset=True)
        for edge_id in (payload.active_edge_id, payload.hover_edge_id):
            if edge_id:
                store.edge(edge_id)
        if "active_edge_id" in fields:
            store.ui.set_active_edge_id(payload.active_edge_id)
        if "hover_edge_id" in fields:
            store.ui.set_hover_edge_id(payload.hover_edge_id)
        return map_ui(store.ui)

    @app.put("/api/v1/ui/time-cursor")
    async def set_time_cursor(request: Request, payload: TimeCursorIn):
        ui = _store(request).ui
        with _bad_value():
            ui.set_time_cursor(payload.cursor)
        return map_ui(ui)

    @app.put("/api/v1/ui/link-highlight")
    async def set_link_highlight(request: Request, payload: LinkHighlightIn):
        store = _store(request)
        if payload.source_id and payload.target_id:
            store.node(payload.source_id)
            store.node(payload.target_id)
            store.ui.set_link_highlight(LinkHighlight(payload.source_id, payload.target_id))
        elif payload.source_id or payload.target_id:
            raise HTTPException(status_code=422,
                                detail="source_id and target_id go together")
        else:
            store.ui.set_link_highlight(None)
        return map_ui(store.ui)

    @app.post("/api/v1/ui/clear-pane")
    async def clear_pane(request: Request):
        ui = _store(request).ui
        ui.clear_pane()
        return map_ui(ui)

    # ---- audit -------------------------------------------------------------

    @app.get("/api/v1/audit")
    async def audit_report(request: Request):
        return request.app.state.observability.generate_audit_report()


@contextmanager
def _bad_value():
    """Unknown enum values and malformed cursors become a 422."""
    try:
        yield
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _link_kind(value: str) -> EdgeKind:
    if value in ("t2", EdgeKind.T2_LINK.value):
        return EdgeKind.T2_LINK
    if value in ("refs", EdgeKind.REFERS_TO.value):
        return EdgeKind.REFERS_TO
    raise HTTPException(status_code=404, detail=f"Unknown link kind {value!r}")


app = create_app()
