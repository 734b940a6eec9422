from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/syntax_hl/adapters/__init__.py",
        "src/syntax_hl/adapters/base.py",
        "src/syntax_hl/adapters/factory.py",
        "src/syntax_hl/logging/__init__.py",
        "src/syntax_hl/config.py",
        "src/syntax_hl/session.py",
        "src/syntax_hl/runtime.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
