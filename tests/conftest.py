from __future__ import annotations

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
for extra in (TESTS_DIR, TESTS_DIR.parent / "src"):
    if str(extra) not in sys.path:
        sys.path.insert(0, str(extra))

from fixtures import (  # noqa: E402
    ChatClientFactory,
    RecordingPdfWriter,
    WorkspaceBuilder,
)

from docshift.convert.capabilities import (  # noqa: E402
    Capabilities,
    default_capabilities,
)


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point the workspace at tmp and drop ambient credentials/config."""

    monkeypatch.setenv("DOCSHIFT_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("DOCSHIFT_CONVERT_CONFIG", raising=False)
    for name in (
        "OUTPUT_DIR",
        "COLLISION",
        "MAX_INPUT_MB",
        "MODEL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"DOCSHIFT_CONVERT_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def pdf_writer() -> RecordingPdfWriter:
    return RecordingPdfWriter()


@pytest.fixture
def capabilities(pdf_writer: RecordingPdfWriter) -> Capabilities:
    """Real codecs for every family except PDF output."""

    return default_capabilities().with_overrides(pdf=pdf_writer)


@pytest.fixture
def chat() -> ChatClientFactory:
    return ChatClientFactory()
