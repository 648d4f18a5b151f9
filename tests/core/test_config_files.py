from __future__ import annotations

from pathlib import Path

import pytest

from talentmatch.config import PACKAGE_CONFIG_DIR, ConfigFileError, ConfigManager


def test_bundled_skill_catalog_is_available() -> None:
    manager = ConfigManager()

    catalog = manager.load("skill_catalog")

    assert manager.resource("skill_catalog") == PACKAGE_CONFIG_DIR / "skill_catalog.yaml"
    assert "react" in catalog["synonyms"]
    assert "tech_stacks" in catalog


def test_empty_document_loads_as_empty_mapping(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert ConfigManager().load_path(path) == {}


def test_manager_reads_resources_from_custom_base(tmp_path: Path) -> None:
    (tmp_path / "overrides.yaml").write_text("core:\n  pool_limit: 10\n", encoding="utf-8")

    assert ConfigManager(tmp_path).load("overrides") == {"core": {"pool_limit": 10}}


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- a\n- b\n", "must be a mapping"),
        ("core: [unclosed\n", "invalid YAML"),
    ],
)
def test_malformed_documents_raise(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigFileError, match=message):
        ConfigManager().load_path(path)
