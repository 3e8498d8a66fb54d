from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from bundler.errors import InvalidBundleOption
from bundler.options import BundleOption
from bundler.templating import AssetHelpers

router = APIRouter(tags=["pages"])

TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

BUNDLE_DIRS = {"scripts": "js", "styles": "css"}


def _helpers(request: Request) -> AssetHelpers:
    return request.app.state.bundler


def _parse_option(value: Optional[str], default: BundleOption) -> BundleOption:
    try:
        return BundleOption.parse(value, default=default)
    except InvalidBundleOption as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _base_context(request: Request, option: BundleOption) -> dict:
    helpers = _helpers(request)
    return {
        "request": request,
        "option": option,
        "app_version": request.app.state.settings.app_version,
        "js": helpers.js,
        "css": helpers.css,
        "link": helpers.link,
        "img": helpers.img,
        "js_bundle": helpers.js_bundle,
        "css_bundle": helpers.css_bundle,
        "bundle_path": helpers.bundle_path,
        "js_bool": helpers.js_bool,
        "pick": helpers.pick,
    }


@router.get("/", response_class=HTMLResponse, name="pages.index")
def index(request: Request, option: Optional[str] = None):
    settings = request.app.state.settings
    context = _base_context(request, _parse_option(option, settings.default_option))
    return templates.TemplateResponse(request, "index.html", context)


@router.get("/bundles/{kind}/{name}", response_class=HTMLResponse, name="pages.bundle")
def bundle_fragment(request: Request, kind: str, name: str, option: Optional[str] = None):
    """Markup one manifest renders to, e.g. ``/bundles/scripts/app``."""

    ext = BUNDLE_DIRS.get(kind)
    if ext is None:
        raise HTTPException(status_code=404, detail="unknown bundle kind")
    helpers = _helpers(request)
    chosen = _parse_option(option, helpers.default_option)
    manifest = f"~/{kind}/{name}.{ext}.bundle"
    if kind == "scripts":
        markup = helpers.js_bundle(manifest, chosen)
    else:
        markup = helpers.css_bundle(manifest, chosen)
    return HTMLResponse(str(markup))
