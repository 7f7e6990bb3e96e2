"""HTTP API exposing the album and listing crawls."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware

from .config import (
    DEFAULT_CONCURRENCY,
    DEFAULT_ENTITY_LIMIT,
    DEFAULT_PHOTO_LIMIT,
    ServerSettings,
)
from .crawler import crawl_album, crawl_listing
from .errors import InputError
from .fetch import PageFetcher
from .utils import leading_int, validate_source_link

_TRUE_VALUES = {"1", "t", "true", "y", "yes", "on"}
_FALSE_VALUES = {"0", "f", "false", "n", "no", "off"}


def parse_int(raw: Optional[str], default: int) -> int:
    """Lenient integer query parameter: the leading digits count, anything else falls back to ``default``."""
    return leading_int(raw, default)


def parse_bool(raw: Optional[str], default: bool) -> bool:
    """Lenient boolean query parameter: unrecognised values fall back to ``default``."""
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def resolve_rendered(
    rendered: Optional[str],
    no_render: Optional[str],
    no_render_underscore: Optional[str],
) -> bool:
    """Rendering is on unless ``rendered=false`` or ``no-render``/``no_render`` is true."""
    use_rendered = parse_bool(rendered, True)
    if parse_bool(no_render, False) or parse_bool(no_render_underscore, False):
        use_rendered = False
    return use_rendered


def get_fetcher(request: Request) -> PageFetcher:
    return request.app.state.fetcher


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


DOCS_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>Zonerama scraper API</title>
  <style>
    body { font-family: -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; margin: 2rem; line-height: 1.5; }
    code, pre { background: #f6f8fa; padding: 2px 6px; border-radius: 4px; }
    .endpoint { border-left: 4px solid #28a745; padding-left: 10px; margin: 1.5rem 0; }
  </style>
</head>
<body>
  <h1>Zonerama scraper API</h1>
  <p>Scrapes album and photo metadata from zonerama.com.</p>
  <div class="endpoint">
    <h2>GET /listing</h2>
    <p>Crawl a profile (or album) link and return its newest albums.</p>
    <ul>
      <li><strong>link</strong> (required): profile or album URL.</li>
      <li><strong>entity_limit</strong>: albums to fetch, default <code>5</code>, <code>0</code> = no limit.</li>
      <li><strong>photo_limit</strong>: photos per album, default <code>10</code>, <code>0</code> = no limit.</li>
      <li><strong>concurrency</strong>: parallel album fetches, default <code>8</code>.</li>
      <li><strong>rendered</strong>: <code>true|false</code>, default <code>true</code>.</li>
      <li><strong>debug</strong>: <code>true</code> saves fetched HTML under <a href="/debug/">/debug/</a>.</li>
    </ul>
  </div>
  <div class="endpoint">
    <h2>GET /album</h2>
    <p>Scrape one album (the link must contain <code>/Album/</code>).</p>
    <ul>
      <li><strong>link</strong> (required), <strong>photo_limit</strong>, <strong>debug</strong> as above.</li>
      <li><strong>rendered</strong>: default <code>true</code>; <code>no-render=true</code> or <code>no_render=true</code> disables it.</li>
    </ul>
  </div>
  <pre>{
  "input_link": "...",
  "entities": [
    {"id": "...", "title": "...", "url": "...", "date": "...", "photo_count": 42, "view_count": 7,
     "items": [{"id": "...", "page_link": "...", "primary_image_link": "..."}]}
  ]
}</pre>
</body>
</html>
"""


def create_app(
    settings: Optional[ServerSettings] = None,
    fetcher: Optional[PageFetcher] = None,
) -> FastAPI:
    """Build the API. A fetcher passed in is used as-is and not closed on shutdown."""
    settings = settings or ServerSettings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if fetcher is not None:
            app.state.fetcher = fetcher
            yield
            return
        async with PageFetcher(navigation_timeout=settings.navigation_timeout) as owned:
            app.state.fetcher = owned
            yield

    app = FastAPI(title="Zonerama scraper", lifespan=lifespan)
    app.state.settings = settings
    app.state.fetcher = fetcher
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # CORSMiddleware only answers requests carrying an Origin header.
    @app.middleware("http")
    async def allow_any_origin(request: Request, call_next):
        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

    settings.debug_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/debug", StaticFiles(directory=settings.debug_dir), name="debug")

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def docs_page() -> str:
        return DOCS_HTML

    @app.get("/album")
    async def album(
        link: Optional[str] = None,
        photo_limit: Optional[str] = None,
        debug: Optional[str] = None,
        rendered: Optional[str] = None,
        no_render: Optional[str] = Query(None, alias="no-render"),
        no_render_underscore: Optional[str] = Query(None, alias="no_render"),
        page_fetcher: PageFetcher = Depends(get_fetcher),
    ):
        try:
            link = validate_source_link(link, settings.allowed_host, required_path="/Album/")
        except InputError as exc:
            return _error(str(exc))
        config = settings.crawl_config(
            photo_limit=parse_int(photo_limit, DEFAULT_PHOTO_LIMIT),
            debug=parse_bool(debug, False),
            rendered=resolve_rendered(rendered, no_render, no_render_underscore),
        )
        result = await crawl_album(link, config, page_fetcher)
        return JSONResponse(content=result.to_dict())

    @app.get("/listing")
    async def listing(
        link: Optional[str] = None,
        entity_limit: Optional[str] = None,
        photo_limit: Optional[str] = None,
        concurrency: Optional[str] = None,
        debug: Optional[str] = None,
        rendered: Optional[str] = None,
        no_render: Optional[str] = Query(None, alias="no-render"),
        no_render_underscore: Optional[str] = Query(None, alias="no_render"),
        page_fetcher: PageFetcher = Depends(get_fetcher),
    ):
        try:
            link = validate_source_link(link, settings.allowed_host)
        except InputError as exc:
            return _error(str(exc))
        config = settings.crawl_config(
            entity_limit=parse_int(entity_limit, DEFAULT_ENTITY_LIMIT),
            photo_limit=parse_int(photo_limit, DEFAULT_PHOTO_LIMIT),
            concurrency=parse_int(concurrency, DEFAULT_CONCURRENCY),
            debug=parse_bool(debug, False),
            rendered=resolve_rendered(rendered, no_render, no_render_underscore),
        )
        result = await crawl_listing(link, config, page_fetcher)
        return JSONResponse(content=result.to_dict())

    return app
