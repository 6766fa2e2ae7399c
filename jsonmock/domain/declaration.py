from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import DeclarationFileError, DeclarationParseError
from .patterns import parse_pattern

__all__ = [
    "Endpoint",
    "Service",
    "Declaration",
    "load_declaration",
]


# ------------------------
# Schema
# ------------------------
class _Frozen(BaseModel):
    # Declarations are shared with concurrent readers of the previous table, so
    # nothing in them may be mutable.
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Endpoint(_Frozen):
    """One canned response: a method, a path below the service base path and a file."""

    path: str
    method: str
    response_file: str = Field(..., alias="responseFile")

    @field_validator("method")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("response_file")
    @classmethod
    def _no_nul(cls, v: str) -> str:
        if "\x00" in v:
            raise ValueError("responseFile must not contain a NUL character")
        return v


class Service(_Frozen):
    name: str
    base_path: str = Field("", alias="basePath")
    endpoints: tuple[Endpoint, ...] = ()

    @field_validator("base_path", mode="before")
    @classmethod
    def _null_base_path(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("endpoints", mode="before")
    @classmethod
    def _null_endpoints(cls, v: object) -> object:
        return () if v is None else v

    @model_validator(mode="after")
    def _patterns_are_valid(self) -> "Service":
        for ep in self.endpoints:
            try:
                parse_pattern(self.base_path + ep.path)
            except ValueError as e:
                raise ValueError(f"service {self.name!r}: {e}") from e
        return self


class Declaration(_Frozen):
    """Parsed declaration file: services in declared order."""

    services: tuple[Service, ...]
    source: Optional[Path] = None  # absolute path of the file it was loaded from

    @field_validator("services", mode="before")
    @classmethod
    def _null_services(cls, v: object) -> object:
        # a bare `services:` key decodes to None
        return () if v is None else v


# ------------------------
# Loading
# ------------------------

def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise DeclarationFileError(path, e.strerror or str(e)) from e


def parse_declaration(raw: bytes, *, source: Path) -> Declaration:
    """Parse YAML bytes into a Declaration; pure apart from raising.

    Raises:
        DeclarationParseError: malformed YAML, a non-mapping document, a
            missing or mistyped field, or an invalid route pattern.
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise DeclarationParseError(source, f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise DeclarationParseError(source, "top level must be a mapping with a 'services' key")

    try:
        declaration = Declaration.model_validate(data)
    except ValidationError as e:
        raise DeclarationParseError(source, f"schema invalid: {e}") from e

    return declaration.model_copy(update={"source": source})


def load_declaration(path: str | os.PathLike[str]) -> Declaration:
    """Read and parse the declaration file at `path`.

    Every call builds a brand new value; nothing is cached between calls.

    Raises:
        DeclarationFileError: the file cannot be read.
        DeclarationParseError: see `parse_declaration`.
    """
    source = Path(os.path.abspath(path))
    return parse_declaration(_read(source), source=source)
