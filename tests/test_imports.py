# tests/test_imports.py

"""
Import Order Tests - every package entry point imports on a cold interpreter
"""

import importlib
import sys
from unittest.mock import patch

import pytest


ENTRY_POINTS = [
    "competency_engine.repositories",
    "competency_engine.repositories.assessment_repository",
    "competency_engine.services",
    "competency_engine.services.lifecycle",
    "competency_engine.services.scoring_systems",
    "competency_engine.repositories.scoring_config_repository",
    "competency_engine.core.dependencies",
    "competency_engine.main",
]


def _drop_loaded_package_modules():
    for name in [m for m in sys.modules if m == "competency_engine" or m.startswith("competency_engine.")]:
        del sys.modules[name]


@pytest.mark.parametrize("module_name", ENTRY_POINTS)
def test_cold_import(module_name):
    # patch.dict restores the already loaded modules on exit
    with patch.dict(sys.modules):
        _drop_loaded_package_modules()
        module = importlib.import_module(module_name)
        assert module.__name__ == module_name


def test_lifecycle_getter_resolves_lazily():
    from competency_engine.services import get_assessment_lifecycle

    with patch("competency_engine.core.dependencies.get_lifecycle") as mock_get:
        assert get_assessment_lifecycle() is mock_get.return_value
