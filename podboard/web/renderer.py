"""HTML rendering of a registry snapshot."""

from typing import Iterable, Optional
from urllib.parse import urlparse

from podboard.pods.registry import PodSnapshot

# Allowed URL schemes for clickable links
SAFE_URL_SCHEMES = {"http", "https"}

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
    <head>
        <meta charset="utf-8" />
        <title>Pods</title>
        <style type="text/css">
            * {{
                font-family: Go Mono, Terminal, Consolas, Lucida Console;
            }}
            body {{
                display: flex;
                flex-wrap: wrap;
                margin: 1em auto;
                max-width: 1200px;
                color: #444;
                font-size: 18px;
                line-height: 1.6;
            }}
        </style>
    </head>
    <body>
{pods}
    </body>
</html>"""


def sanitize_url(url: Optional[str], fallback: str = "#") -> str:
    """Validate a URL for safe embedding in HTML.

    Only http and https links are kept; anything else (javascript:, data:)
    is replaced by ``fallback``.
    """
    if not url:
        return fallback

    try:
        parsed = urlparse(url)
    except ValueError:
        return fallback

    if parsed.scheme.lower() in SAFE_URL_SCHEMES:
        return url
    return fallback


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    if not text:
        return ""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def render_pod_html(pod: PodSnapshot) -> str:
    episodes_html = "".join(
        f'\n                <li><a href="{escape_html(sanitize_url(ep.url))}" target="_blank">{escape_html(ep.title)}</a></li>'
        for ep in pod.episodes
    )
    return f'''
        <div style="width: 600px">
            <h3><strong>{escape_html(pod.name)}</strong></h3>
            <i>{escape_html(pod.last_update_formatted)}</i><br />
            <ul>{episodes_html}
            </ul>
        </div>'''


def render_index_html(pods: Iterable[PodSnapshot]) -> str:
    """Render the index page listing every pod and its episodes.

    Args:
        pods: Snapshots in display order. Pods without episodes render an
            empty list.

    Returns:
        HTML document.
    """
    return _PAGE_TEMPLATE.format(pods="".join(render_pod_html(pod) for pod in pods))
