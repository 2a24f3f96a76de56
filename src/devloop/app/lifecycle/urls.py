"""Advisory check that env URLs match the active push target."""

from __future__ import annotations

from typing import Sequence

from devloop.domain.envinfo import LocalURL, URLKind
from devloop.utils.log import Console


def warn_if_urls_invalid(urls: Sequence[LocalURL], push_target_is_local_engine: bool, console: Console) -> str | None:
    """Warn when URLs exist only for the platform that is not active; returns the warning shown."""

    local_engine_urls = [url for url in urls if url.kind == URLKind.LOCAL_ENGINE]
    cluster_urls = [url for url in urls if url.kind != URLKind.LOCAL_ENGINE]
    url_output = "URLs" if len(urls) > 1 else "a URL"

    message = None
    if push_target_is_local_engine and not local_engine_urls and cluster_urls:
        message = f"Found {url_output} defined for cluster, but no valid URLs for local engine."
    elif not push_target_is_local_engine and not cluster_urls and local_engine_urls:
        message = f"Found {url_output} defined for local engine, but no valid URLs for cluster."
    if message:
        console.warning(message)
    return message


__all__ = ["warn_if_urls_invalid"]
