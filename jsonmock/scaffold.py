from __future__ import annotations

from pathlib import Path

__all__ = ["SAMPLE_CONFIG", "write_sample"]

SAMPLE_CONFIG = """\
services:
  - name: users
    basePath: /api/users
    endpoints:
      - path: ""
        method: GET
        responseFile: responses/users.json
      - path: /:id
        method: GET
        responseFile: responses/user.json
      - path: ""
        method: POST
        responseFile: responses/user_created.json
  - name: health
    basePath: /api
    endpoints:
      - path: /ping
        method: GET
        responseFile: responses/ping.json
"""

_RESPONSES = {
    "users.json": b'[\n  {"id": 1, "name": "Ada"},\n  {"id": 2, "name": "Grace"}\n]\n',
    "user.json": b'{\n  "id": 1,\n  "name": "Ada"\n}\n',
    "user_created.json": b'{\n  "id": 3,\n  "created": true\n}\n',
    "ping.json": b'{"ok": true}\n',
}

FILES = [(Path("config.yaml"), SAMPLE_CONFIG.encode("utf-8"))] + [
    (Path("responses") / name, data) for name, data in _RESPONSES.items()
]


def write_sample(root: Path) -> list[str]:
    """Write the sample declaration and its response files under `root`.

    Existing files are left alone. Returns the paths created, relative to root.
    """
    created: list[str] = []
    for rel, data in FILES:
        path = root / rel
        if path.exists():
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        created.append(rel.as_posix())
    return created
