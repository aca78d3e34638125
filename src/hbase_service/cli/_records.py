"""JSONL write-record loading for ``hbsvc put``."""

from __future__ import annotations

import base64
import binascii
import json
import os
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

from hbase_service.types import WriteRequest


class WriteRecord(BaseModel):
    """One line of put input: ``{"row", "family", "qualifier", "value"}``."""

    row: str
    family: str
    qualifier: str
    value: str
    value_encoding: Literal["utf-8", "base64"] = "utf-8"

    @field_validator("row", "family")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("family")
    @classmethod
    def _no_colon(cls, v: str) -> str:
        if ":" in v:
            raise ValueError("family must not contain ':'")
        return v

    def to_write_request(self) -> WriteRequest:
        if self.value_encoding == "base64":
            try:
                value = base64.b64decode(self.value, validate=True)
            except binascii.Error as e:
                raise ValueError(f"value is not valid base64: {e}") from e
        else:
            value = self.value.encode("utf-8")
        return WriteRequest(row=self.row, family=self.family, qualifier=self.qualifier, value=value)


def read_write_requests(path: str) -> list[WriteRequest]:
    """Load and validate a JSONL file (or a directory of ``*.jsonl`` files)."""
    if os.path.isdir(path):
        files = [os.path.join(path, f) for f in sorted(os.listdir(path)) if f.endswith(".jsonl")]
    elif os.path.isfile(path):
        files = [path]
    else:
        raise FileNotFoundError(f"Input path not found: {path}")

    requests: list[WriteRequest] = []
    for filepath in files:
        with open(filepath) as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = WriteRecord.model_validate(json.loads(line))
                    requests.append(record.to_write_request())
                except json.JSONDecodeError as e:
                    raise ValueError(f"{filepath}:{line_num}: Invalid JSON: {e}") from e
                except (ValidationError, ValueError) as e:
                    raise ValueError(f"{filepath}:{line_num}: {e}") from e
    return requests
