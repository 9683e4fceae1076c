from __future__ import annotations

import os
import posixpath

from fsspec.core import split_protocol


def join_path(root: str, *args: str) -> str:
    if args:
        root = root.rstrip("/")
    parts = [root] + [p.lstrip("/") for p in args]
    return "/".join(parts)


def location_basename(location: str) -> str:
    """Last path component of ``location`` without its final extension.

    ``s3://bucket/extracts/monaco-latest.osm.pbf`` gives ``monaco-latest.osm``.
    """
    protocol, path = split_protocol(location)
    if protocol is None:
        name = os.path.basename(path)
    else:
        name = posixpath.basename(path)
    return os.path.splitext(name)[0]


def parent_location(location: str) -> str:
    """Location of the directory holding ``location``, keeping its scheme."""
    protocol, path = split_protocol(location)
    if protocol is None:
        return os.path.dirname(path) or "."
    return f"{protocol}://{posixpath.dirname(path)}"
