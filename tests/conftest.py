# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from tlaqa.core.models import SpecFiles


@pytest.fixture
def spec_files(tmp_path: Path) -> SpecFiles:
    """Return an existing module/model pair inside ``tmp_path``."""

    module = tmp_path / "Spec.tla"
    module.write_text("---- MODULE Spec ----\nVARIABLE x\n====\n", encoding="utf-8")
    model = tmp_path / "Spec.cfg"
    model.write_text("INIT Init\nNEXT Next\n", encoding="utf-8")
    return SpecFiles.from_path(module)


@pytest.fixture
def archive(tmp_path: Path) -> Path:
    """Return a placeholder tools archive that satisfies existence checks."""

    path = tmp_path / "tools" / "tla2tools.jar"
    path.parent.mkdir()
    path.write_bytes(b"PK")
    return path
