from __future__ import annotations

from jinja2 import Environment

from bundler.hosting import UnhostedEnvironment
from bundler.mode import StaticModeOracle
from bundler.options import BundleOption
from bundler.settings import BundlerSettings
from bundler.templating import AssetHelpers, build_engine

JAN_TOKEN = "6ebe00"


def _helpers(static_root, **overrides) -> AssetHelpers:
    settings = BundlerSettings(STATIC_ROOT=str(static_root), BUNDLER_CACHE_MODE="on", **overrides)
    return build_engine(settings)


def test_build_engine_wires_filesystem_hosting(static_root):
    helpers = _helpers(static_root)
    assert helpers.default_option is BundleOption.MINIFIED
    assert helpers.caching_enabled is True
    assert str(helpers.js("~/scripts/app.js")) == (
        f'<script src="/static/scripts/app.min.js?{JAN_TOKEN}" type="text/javascript"></script>'
    )


def test_build_engine_without_static_root_is_unhosted():
    helpers = build_engine(BundlerSettings(BUNDLER_CACHE_MODE="off"))
    assert isinstance(helpers.rewriter.hosting, UnhostedEnvironment)
    assert str(helpers.js("~/scripts/app.js")) == '<script src="/static/scripts/app.js" type="text/javascript"></script>'


def test_build_engine_accepts_injected_strategies(static_root):
    oracle = StaticModeOracle(False)
    helpers = build_engine(BundlerSettings(STATIC_ROOT=str(static_root)), oracle=oracle)
    assert helpers.rewriter.oracle is oracle
    assert helpers.resolver.oracle is oracle
    assert helpers.rewriter.cache is not helpers.resolver.cache


def test_default_option_from_settings(static_root):
    helpers = _helpers(static_root, BUNDLER_DEFAULT_OPTION="normal")
    assert 'src="/static/scripts/app.js?' in helpers.js("~/scripts/app.js")


def test_css_link_img_helpers(static_root):
    helpers = _helpers(static_root)
    assert str(helpers.css("~/styles/site.css", media="print")) == (
        f'<link href="/static/styles/site.min.css?{JAN_TOKEN}" media="print" rel="stylesheet" />'
    )
    assert str(helpers.link("icon", "~/images/logo.png", {"type": "image/png"})) == (
        f'<link href="/static/images/logo.png?{JAN_TOKEN}" rel="icon" type="image/png" />'
    )
    assert str(helpers.img("~/images/logo.png", "Logo", link="/")) == (
        f'<a href="/"><img alt="Logo" src="/static/images/logo.png?{JAN_TOKEN}" /></a>'
    )
    assert helpers.img("", "x") == ""
    assert helpers.link("icon", None) == ""


def test_string_options_accepted(static_root):
    helpers = _helpers(static_root)
    markup = str(helpers.js_bundle("~/scripts/site.js.bundle", "combined"))
    assert markup == '<script src="/static/scripts/site.js" type="text/javascript"></script>'
    assert helpers.bundle_path("~/scripts/site.js.bundle") == "/static/scripts/site.js"


def test_js_bool_and_pick():
    assert AssetHelpers.js_bool(True) == "true"
    assert AssetHelpers.js_bool(0) == "false"
    assert AssetHelpers.pick(True, "a", "b") == "a"
    assert AssetHelpers.pick("", "a", "b") == "b"


def test_install_registers_jinja_globals(static_root):
    helpers = _helpers(static_root)
    env = helpers.install(Environment(autoescape=True))
    template = env.from_string(
        "{{ js_bundle('~/scripts/site.js.bundle', BundleOption.NORMAL) }}"
        "{{ css_bundle('~/styles/site.css.bundle', 'minified_and_combined', media='all') }}"
        "<script>var dbg = {{ true | js_bool }};</script>"
    )
    html = template.render()
    assert html.count("<script src=") == 2
    assert '<link href="/static/styles/site.min.css?' in html
    assert 'media="all"' in html
    assert "var dbg = true;" in html
    # markup is not double-escaped under autoescape
    assert "&lt;script" not in html
