from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

from markupsafe import Markup, escape


class TagEmitter(Protocol):
    def emit(self, kind: str, url: str, attrs: Optional[Mapping[str, Any]] = None) -> Markup:
        ...

def _attr_name(key: str) -> str:
    # class_ -> class, data_role -> data-role
    return key.rstrip("_").replace("_", "-")

def merge_attributes(base: Dict[str, Any], extra: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Add ``extra`` onto ``base`` without replacing anything already set."""

    merged = dict(base)
    for key, value in (extra or {}).items():
        merged.setdefault(_attr_name(str(key)), value)
    return merged

def render_attributes(attrs: Mapping[str, Any]) -> str:
    parts = []
    for key in sorted(attrs):
        value = attrs[key]
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {escape(key)}")
        else:
            parts.append(f' {escape(key)}="{escape(value)}"')
    return "".join(parts)

def script_tag(src: Optional[str], attrs: Optional[Mapping[str, Any]] = None) -> Markup:
    if not src:
        return Markup("")
    merged = merge_attributes({"type": "text/javascript", "src": src}, attrs)
    return Markup(f"<script{render_attributes(merged)}></script>")

def link_tag(rel: str, href: Optional[str], attrs: Optional[Mapping[str, Any]] = None) -> Markup:
    if not href:
        return Markup("")
    merged = merge_attributes({"rel": rel, "href": href}, attrs)
    return Markup(f"<link{render_attributes(merged)} />")

def img_tag(
    src: Optional[str],
    alt: str = "",
    link: Optional[str] = None,
    attrs: Optional[Mapping[str, Any]] = None,
) -> Markup:
    if not src:
        return Markup("")
    merged = merge_attributes({"src": src, "alt": alt}, attrs)
    if link:
        return Markup(f'<a href="{escape(link)}"><img{render_attributes(merged)} /></a>')
    return Markup(f"<img{render_attributes(merged)} />")

class HtmlTagEmitter:
    def emit(self, kind: str, url: str, attrs: Optional[Mapping[str, Any]] = None) -> Markup:
        extra = dict(attrs or {})
        if kind == "script":
            return script_tag(url, extra)
        if kind == "link":
            rel = extra.pop("rel", "stylesheet")
            return link_tag(rel, url, extra)
        if kind == "img":
            alt = extra.pop("alt", "")
            link = extra.pop("link", None)
            return img_tag(url, alt, link, extra)
        raise ValueError(f"unsupported tag kind: {kind!r}")
