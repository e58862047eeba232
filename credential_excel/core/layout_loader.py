"""Workbook Layout Loader — loads and validates YAML layout files."""

import logging
from pathlib import Path
from typing import Optional

import yaml

from credential_excel.core.config import settings
from credential_excel.core.layout import WorkbookLayout

logger = logging.getLogger(__name__)


def _layouts_dir() -> Path:
    layouts_dir = Path(settings.layouts_dir)
    if not layouts_dir.is_absolute():
        layouts_dir = settings.project_root / layouts_dir
    return layouts_dir


def load_layout(layout_name: Optional[str] = None) -> WorkbookLayout:
    """Load a workbook layout from the layouts directory.

    Looks for {layouts_dir}/{layout_name}.yaml. Fields missing from the file keep
    their EDCL template defaults.
    """
    layout_name = layout_name or settings.layout_name
    layout_path = _layouts_dir() / f"{layout_name}.yaml"

    if not layout_path.exists():
        raise FileNotFoundError(f"Workbook layout not found: {layout_path}")

    with open(layout_path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Invalid layout format in {layout_path}: expected a YAML mapping")

    data.setdefault("layout_name", layout_name)
    logger.info(f"Loaded workbook layout '{layout_name}' from {layout_path}")
    return WorkbookLayout(**data)


def list_layouts() -> list[str]:
    """List available layout names (without .yaml extension)."""
    layouts_dir = _layouts_dir()
    if not layouts_dir.exists():
        return []
    return sorted(p.stem for p in layouts_dir.glob("*.yaml") if not p.stem.startswith("_"))
