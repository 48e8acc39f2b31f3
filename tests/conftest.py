"""Pytest fixtures for linkstash migration tests"""
import json
from pathlib import Path

import pytest


def write_json(path: Path, data) -> Path:
    """Write `data` as compact JSON and return the path."""
    path.write_text(json.dumps(data, separators=(",", ":")), encoding="utf-8")
    return path


@pytest.fixture
def v1_articles():
    """Three articles as saved by the first release."""
    return [
        {"title": "Rust ownership", "url": "https://example.com/rust", "tags": ["rust", "memory"]},
        {"title": "Zen of Python", "url": "https://example.com/zen", "tags": ["python", "culture", "Zen"]},
        {"title": "Untagged", "url": "https://example.com/none", "tags": []},
    ]


@pytest.fixture
def v1_document(v1_articles):
    return {"version": 1, "articles": v1_articles}


@pytest.fixture
def v4_document():
    return {
        "version": 4,
        "articles": {
            "list": [
                {
                    "title": "Zen of Python",
                    "tags": ["culture", "python"],
                    "created": "2020-01-01T00:00:00.000Z",
                    "updated": "2020-01-01T00:00:00.000Z",
                    "likes": 3,
                    "isDeleted": False,
                }
            ]
        },
    }


@pytest.fixture
def data_file(tmp_path):
    """Location of the article document inside a temp directory (not created)."""
    return tmp_path / "articles.json"
