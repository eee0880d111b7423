"""Pytest configuration for agentdesk tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def pytest_configure() -> None:
    """Ensure the src directory is importable during tests."""
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


ANDROID_DOC = """---
name: flutter-android-integration
description: Android integration for Flutter apps, Gradle builds and Kotlin platform channels.
model: sonnet
color: green
---
You are an Android specialist.
"""

IOS_DOC = """---
name: flutter-ios-integration
description: iOS integration for Flutter apps, Xcode and Swift platform channels.
model: inherit
---
You are an iOS specialist.
"""

BACKEND_DOC = """---
name: flutter-aws-firebase-backend
description: Wire Flutter apps to Firebase or AWS Amplify authentication and storage.
---
You connect apps to cloud backends.
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in list(os.environ):
        if key.startswith("AGENTDESK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def agents_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "agents"
    directory.mkdir()
    (directory / "android.md").write_text(ANDROID_DOC, encoding="utf-8")
    (directory / "ios.md").write_text(IOS_DOC, encoding="utf-8")
    (directory / "backend.md").write_text(BACKEND_DOC, encoding="utf-8")
    return directory
