from pathlib import Path

import pytest
from pydantic import ValidationError

from conftest import ping_services, write_declaration
from jsonmock.domain.declaration import load_declaration
from jsonmock.domain.errors import DeclarationFileError, DeclarationParseError


def test_load_parses_services_in_order(workdir: Path):
    path = write_declaration(
        workdir / "config.yaml",
        [
            {"name": "a", "basePath": "/a", "endpoints": [
                {"path": "/x", "method": "get", "responseFile": "x.json"},
                {"path": "/y", "method": "POST", "responseFile": "y.json"},
            ]},
            {"name": "b", "endpoints": []},
        ],
    )
    decl = load_declaration(path)
    assert [s.name for s in decl.services] == ["a", "b"]
    assert decl.services[0].endpoints[0].method == "GET"  # normalised
    assert decl.services[0].endpoints[1].response_file == "y.json"
    assert decl.services[1].base_path == ""
    assert decl.source == path


def test_each_load_returns_an_independent_frozen_value(config_file: Path):
    first = load_declaration(config_file)
    second = load_declaration(config_file)
    assert first == second
    assert first is not second
    assert first.services[0] is not second.services[0]
    with pytest.raises(ValidationError):
        first.services[0].name = "changed"
    assert isinstance(first.services, tuple)


def test_missing_file_is_file_error(workdir: Path):
    with pytest.raises(DeclarationFileError) as exc:
        load_declaration(workdir / "nope.yaml")
    assert exc.value.code == "file_error"


@pytest.mark.parametrize(
    "content",
    [
        "services: [unclosed",
        "",
        "- just\n- a list\n",
        "services:\n  - basePath: /api\n",  # missing name
        "services:\n  - name: a\n    endpoints:\n      - path: /x\n        method: GET\n",  # no responseFile
        "services:\n  - name: a\n    endpoints:\n      - path: /x\n        method: 7\n        responseFile: x.json\n",
        "services:\n  - name: a\n    basePath: api\n    endpoints:\n      - path: /x\n        method: GET\n        responseFile: x.json\n",
    ],
)
def test_malformed_declarations_are_parse_errors(workdir: Path, content: str):
    path = workdir / "config.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(DeclarationParseError) as exc:
        load_declaration(path)
    assert exc.value.code == "parse_error"


def test_unknown_method_is_not_a_parse_error(workdir: Path):
    path = write_declaration(workdir / "config.yaml", ping_services(method="TRACE"))
    decl = load_declaration(path)
    assert decl.services[0].endpoints[0].method == "TRACE"


def test_nul_in_response_file_is_parse_error(workdir: Path):
    path = workdir / "config.yaml"
    path.write_text(
        'services:\n  - name: a\n    basePath: /api\n    endpoints:\n'
        '      - path: /x\n        method: GET\n        responseFile: "a\\0b.json"\n',
        encoding="utf-8",
    )
    with pytest.raises(DeclarationParseError, match="NUL"):
        load_declaration(path)


@pytest.mark.parametrize(
    "content",
    [
        "services:\n",
        "services:\n  - name: a\n    basePath: /api\n    endpoints:\n",
        "services:\n  - name: a\n    basePath:\n    endpoints: []\n",
    ],
)
def test_null_optional_fields_take_their_defaults(workdir: Path, content: str):
    path = workdir / "config.yaml"
    path.write_text(content, encoding="utf-8")
    decl = load_declaration(path)
    for service in decl.services:
        assert service.endpoints == ()
        assert service.base_path in ("", "/api")
