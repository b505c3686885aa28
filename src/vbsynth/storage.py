"""Storage utilities for symbol dumps (JSONL) and config (JSON)."""

import json
from pathlib import Path
from typing import Generator
from pydantic import BaseModel


def read_jsonl(path: Path) -> Generator[dict, None, None]:
    """Read records from a JSONL file.

    Blank lines are skipped. A line that is not valid JSON raises
    ValueError naming the file and line number.

    Args:
        path: Path to the JSONL file.

    Yields:
        Parsed JSON objects from each line.
    """
    if not path.exists():
        return

    with open(path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{line_number}: invalid JSON ({e.msg})") from e
            if not isinstance(record, dict):
                raise ValueError(f"{path}:{line_number}: expected a JSON object")
            yield record


def write_jsonl(path: Path, records: list[dict | BaseModel]) -> None:
    """Write records to a JSONL file (overwrites existing).

    Args:
        path: Path to the JSONL file.
        records: List of dicts or Pydantic models to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        for record in records:
            if isinstance(record, BaseModel):
                f.write(record.model_dump_json() + '\n')
            else:
                f.write(json.dumps(record) + '\n')


def read_json(path: Path) -> dict:
    """Read a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed JSON object.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json(path: Path, data: dict) -> None:
    """Write a JSON file.

    Args:
        path: Path to the JSON file.
        data: Dict to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
