from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import Settings, load_settings
from .errors import StoreError, StoreUnavailable, TransactionAborted
from .models import (
    CsvImportIn,
    CsvImportOut,
    HistoryRecord,
    LookupResult,
    RootIn,
    RootsJson,
    Segment,
    TextIn,
    TranslationOut,
    WordRoot,
)
from .service import RootService
from .store import HistoryStore, WordRootStore

log = logging.getLogger(__name__)

EXPORT_FILENAME = "词根导出.csv"


def create_app(
    store: Optional[WordRootStore] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API around one store.

    If no store is given, one is opened at ``settings.db_path`` on startup.
    """
    settings = settings or load_settings()

    def _attach(app: FastAPI, s: WordRootStore) -> None:
        app.state.store = s
        app.state.service = RootService(s, HistoryStore(s.db, limit=settings.history_limit))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "store", None) is None:
            _attach(app, WordRootStore.open(settings.db_path))
        yield

    app = FastAPI(title="rootify", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = None
    if store is not None:
        _attach(app, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(StoreUnavailable)
    async def _store_unavailable(request: Request, exc: StoreUnavailable):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(TransactionAborted)
    async def _import_aborted(request: Request, exc: TransactionAborted):
        return JSONResponse(status_code=409, content={"detail": str(exc), "key": exc.key})

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError):
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    _register_routes(app)
    return app


def get_service(request: Request) -> RootService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise StoreUnavailable()
    return service


def get_store(request: Request) -> WordRootStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise StoreUnavailable()
    return store


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health(request: Request):
        settings: Settings = request.app.state.settings
        store: Optional[WordRootStore] = request.app.state.store
        ready = store is not None and store.db.ready
        return {
            "ok": True,
            "data_dir": str(settings.data_dir),
            "db_path": str(store.db.db_path) if store is not None else str(settings.db_path),
            "db_ready": ready,
            "roots": store.count() if ready else None,
        }

    @app.get("/roots")
    def list_roots(store: WordRootStore = Depends(get_store)) -> Dict[str, str]:
        return dict(store.get_all())

    @app.get("/roots/export")
    def export_roots(store: WordRootStore = Depends(get_store)):
        content = store.export()
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(EXPORT_FILENAME)}"},
        )

    @app.get("/roots/{chinese:path}", response_model=WordRoot)
    def get_root(chinese: str, store: WordRootStore = Depends(get_store)):
        root = store.get(chinese)
        if root is None:
            raise HTTPException(404, detail=f"root not found: {chinese}")
        return root

    @app.post("/roots")
    def add_root(entry: RootIn, store: WordRootStore = Depends(get_store)):
        store.add(entry.chinese, entry.english)
        return {"ok": True, "chinese": entry.chinese}

    @app.delete("/roots/{chinese:path}")
    def delete_root(chinese: str, store: WordRootStore = Depends(get_store)):
        store.delete(chinese)
        return {"ok": True, "chinese": chinese}

    @app.delete("/roots")
    def clear_roots(store: WordRootStore = Depends(get_store)):
        store.clear_all()
        return {"ok": True}

    @app.post("/roots/import")
    def import_roots(roots: RootsJson, store: WordRootStore = Depends(get_store)):
        cleaned: Dict[str, str] = {}
        for chinese, english in roots.items():
            c, e = chinese.strip(), english.strip()
            if not c or not e:
                raise HTTPException(400, detail=f"empty root or gloss: {chinese!r}")
            cleaned[c] = e
        n = store.import_roots(cleaned)
        return {"ok": True, "imported": n}

    @app.post("/roots/import_csv", response_model=CsvImportOut)
    def import_csv(body: CsvImportIn, service: RootService = Depends(get_service)):
        return service.import_csv(body.content, dry_run=body.dry_run)

    @app.post("/segment", response_model=List[Segment])
    def segment(body: TextIn, service: RootService = Depends(get_service)):
        return service.segment_text(body.text)

    @app.post("/translate", response_model=TranslationOut)
    def translate(body: TextIn, service: RootService = Depends(get_service)):
        return service.translate_and_record(body.text, save_history=body.save_history)

    @app.post("/complete")
    def complete(body: TextIn, service: RootService = Depends(get_service)):
        return {"complete": service.is_translation_complete(body.text)}

    @app.get("/lookup/in_text", response_model=LookupResult)
    def lookup_in_text(
        text: str = Query(...),
        offset: int = Query(..., description="0-based character index in provided text"),
        service: RootService = Depends(get_service),
    ):
        try:
            return service.lookup_in_text(text, offset)
        except ValueError as e:
            raise HTTPException(400, detail=str(e))

    @app.get("/history", response_model=List[HistoryRecord])
    def get_history(
        limit: Optional[int] = Query(None, ge=1, le=1000),
        service: RootService = Depends(get_service),
    ):
        return service.history.recent(limit)

    @app.delete("/history")
    def clear_history(service: RootService = Depends(get_service)):
        service.history.clear()
        return {"ok": True}


app = create_app()
