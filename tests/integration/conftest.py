from __future__ import annotations

import json
from pathlib import Path

import pytest

MANDATE = {
    "mandate_id": "M-7",
    "title": "Head of Infrastructure Credit",
    "client_firm": "Northbridge Capital",
    "sector": "Infrastructure",
    "sectors": ["Infrastructure Debt"],
    "functions": ["Origination"],
    "geographies": ["London"],
}

CANDIDATES = [
    {
        "candidate": {
            "candidate_id": "C-1",
            "name": "Expert Candidate",
            "sectors": ["Infrastructure Credit"],
            "functions": ["Deal Origination"],
            "location": "London",
        },
        "evidence": [
            {"id": "n1", "kind": "notes", "terms": ["Origination"], "text": "Led infrastructure debt deals."}
        ],
        "reliability_history": {"notes-n1": [True, True, True, True, True]},
    },
    {
        "candidate": {
            "candidate_id": "C-2",
            "name": "Connected Candidate",
            "current_firm": "Goldman Sachs",
            "education": [{"institution": "Harvard"}],
            "networks": ["London Finance Club"],
        },
        "evidence": [
            {
                "id": "n2",
                "kind": "notes",
                "text": "Former colleague of the hiring manager, referred by the client.",
            }
        ],
    },
]


@pytest.fixture
def mandate_path(tmp_path: Path) -> Path:
    path = tmp_path / "mandate.json"
    path.write_text(json.dumps(MANDATE), encoding="utf-8")
    return path


@pytest.fixture
def candidates_path(tmp_path: Path) -> Path:
    path = tmp_path / "candidates.jsonl"
    path.write_text(
        "\n".join(json.dumps(item) for item in CANDIDATES) + "\n\n",
        encoding="utf-8",
    )
    return path
