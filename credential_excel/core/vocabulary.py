"""Vocabulary mappings — workbook labels to controlled-vocabulary URIs.

The workbook uses human readable labels (e.g. learning opportunity type
"Course"); the credential model wants the corresponding URI. A mapping is any
object with resolve(label) -> uri. Two variants exist: a static table passed in
directly, and a YAML file of label: uri pairs. Which one is used is chosen by
configuration (settings.vocabulary_source).
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, runtime_checkable

import yaml

from credential_excel.core.config import settings
from credential_excel.core.errors import MappingNotFoundError

logger = logging.getLogger(__name__)


@runtime_checkable
class VocabularyMapping(Protocol):
    def resolve(self, label: str) -> str:
        """URI for `label`; raises MappingNotFoundError if there is none."""
        ...


class StaticVocabularyMapping:
    """Mapping backed by an injected dict. Labels must match exactly."""

    def __init__(self, mapping: Mapping[str, str], name: Optional[str] = None):
        self._mapping = dict(mapping)
        self.name = name

    def resolve(self, label: str) -> str:
        uri = self._mapping.get(label)
        if uri is None:
            raise MappingNotFoundError(label, self.name)
        return uri

    @property
    def labels(self) -> list[str]:
        return list(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)


class YamlVocabularyMapping(StaticVocabularyMapping):
    """Mapping read from a YAML file containing a single label -> URI mapping."""

    @classmethod
    def from_file(cls, path: Path, name: Optional[str] = None) -> "YamlVocabularyMapping":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Vocabulary file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid vocabulary format in {path}: expected a YAML mapping")

        mapping = {str(label): str(uri) for label, uri in data.items()}
        logger.info(f"Loaded {len(mapping)} labels for vocabulary '{name or path.stem}' from {path}")
        return cls(mapping, name=name or path.stem)


# ---------------------------------------------------------------------------
# Built-in tables (labels used by the EDCL template)
# ---------------------------------------------------------------------------

LEARNING_SETTINGS = {
    "formal": "http://data.europa.eu/snb/learning-setting/6fcec5c5af",
    "non-formal": "http://data.europa.eu/snb/learning-setting/4ccd5d5c95",
}

LEARNING_OPPORTUNITY_TYPES = {
    "Course": "http://data.europa.eu/snb/learning-opportunity/05053c1cbe",
    "Module": "http://data.europa.eu/snb/learning-opportunity/2a2b2c8b9c",
    "Programme": "http://data.europa.eu/snb/learning-opportunity/1b1de8bd40",
}

LEARNING_ACTIVITY_TYPES = {
    "Lecture": "http://data.europa.eu/snb/learning-activity/1c5ccb6d2c",
    "Laboratory Work": "http://data.europa.eu/snb/learning-activity/2a0e5ef2b6",
    "Self-study": "http://data.europa.eu/snb/learning-activity/4a5e1b3c8e",
}

MODES_OF_LEARNING = {
    "Online": "http://data.europa.eu/snb/learning-assessment/920fbb3cbe",
    "Face-to-face": "http://data.europa.eu/snb/learning-assessment/d2d95d7a2c",
    "Blended": "http://data.europa.eu/snb/learning-assessment/a86f3b1a1e",
}


@dataclass(frozen=True)
class Vocabularies:
    """The controlled vocabularies read by the assembler."""
    learning_setting: VocabularyMapping
    learning_opportunity_type: VocabularyMapping
    activity_type: VocabularyMapping
    mode_of_learning: VocabularyMapping


VOCABULARY_FILES = {
    "learning_setting": "learning_setting.yaml",
    "learning_opportunity_type": "learning_opportunity_type.yaml",
    "activity_type": "activity_type.yaml",
    "mode_of_learning": "mode_of_learning.yaml",
}


def static_vocabularies() -> Vocabularies:
    return Vocabularies(
        learning_setting=StaticVocabularyMapping(LEARNING_SETTINGS, "learning_setting"),
        learning_opportunity_type=StaticVocabularyMapping(
            LEARNING_OPPORTUNITY_TYPES, "learning_opportunity_type"
        ),
        activity_type=StaticVocabularyMapping(LEARNING_ACTIVITY_TYPES, "activity_type"),
        mode_of_learning=StaticVocabularyMapping(MODES_OF_LEARNING, "mode_of_learning"),
    )


def yaml_vocabularies(directory: Path) -> Vocabularies:
    mappings = {
        field: YamlVocabularyMapping.from_file(Path(directory) / filename, name=field)
        for field, filename in VOCABULARY_FILES.items()
    }
    return Vocabularies(**mappings)


def load_vocabularies(source: Optional[str] = None, directory: Optional[str] = None) -> Vocabularies:
    """Build the vocabularies selected by configuration.

    source is "static" (built-in tables) or "yaml" (one file per vocabulary in
    directory); both default to the application settings.
    """
    source = source or settings.vocabulary_source
    if source == "static":
        return static_vocabularies()
    if source == "yaml":
        vocab_dir = Path(directory or settings.vocabularies_dir)
        if not vocab_dir.is_absolute():
            vocab_dir = settings.project_root / vocab_dir
        return yaml_vocabularies(vocab_dir)
    raise ValueError(f"Unknown vocabulary source '{source}'. Must be 'static' or 'yaml'")
