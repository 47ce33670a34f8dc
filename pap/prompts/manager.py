"""Versioned prompt templates for the AI analysis calls.

Usage:
    manager = PromptManager()
    prompt = manager.render("claim_analysis", claim_text="...", language="English")
    metadata = manager.get_metadata("claim_analysis", version="v1")
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class PromptManager:
    """Load and render prompt templates.

    Templates live in ``templates/{prompt_name}/v{N}.txt`` with an optional
    ``metadata.json`` beside them keyed by version. Placeholders use
    ``$name`` syntax so JSON examples in a prompt need no escaping.

    Examples:
        >>> manager = PromptManager()
        >>> manager.list_versions("claim_analysis")
        ['v1']
    """

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            base_dir = Path(__file__).parent / "templates"
        self.base_dir = base_dir

        if not self.base_dir.exists():
            raise FileNotFoundError(f"Prompt templates directory not found: {self.base_dir}")

        logger.debug("PromptManager initialized with base_dir=%s", self.base_dir)

    @lru_cache(maxsize=32)
    def get(self, prompt_name: str, version: str = "latest") -> str:
        """Load a raw template.

        Raises:
            FileNotFoundError: If the prompt or version doesn't exist
        """
        if version == "latest":
            version = self._get_latest_version(prompt_name)

        prompt_path = self.base_dir / prompt_name / f"{version}.txt"
        if not prompt_path.exists():
            raise FileNotFoundError(
                f"Prompt '{prompt_name}' version '{version}' not found at {prompt_path}"
            )

        prompt_text = prompt_path.read_text(encoding="utf-8").strip()
        logger.debug("Loaded prompt %s:%s (%d chars)", prompt_name, version, len(prompt_text))
        return prompt_text

    def render(self, prompt_name: str, version: str = "latest", **variables) -> str:
        """Fill a template's ``$placeholders``.

        Raises:
            KeyError: If a placeholder has no value
        """
        return Template(self.get(prompt_name, version)).substitute(variables)

    def get_metadata(self, prompt_name: str, version: str = "latest") -> Dict:
        """Metadata for one version, or ``{}`` if none is recorded."""
        if version == "latest":
            version = self._get_latest_version(prompt_name)

        meta_path = self.base_dir / prompt_name / "metadata.json"
        if not meta_path.exists():
            logger.warning("No metadata.json found for prompt '%s'", prompt_name)
            return {}

        try:
            metadata = json.loads(meta_path.read_text(encoding="utf-8"))
            return metadata.get(version, {})
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON in %s: %s", meta_path, exc)
            return {}

    def list_versions(self, prompt_name: str) -> List[str]:
        prompt_dir = self.base_dir / prompt_name
        if not prompt_dir.exists():
            return []

        versions = [p.stem for p in prompt_dir.glob("v*.txt")]
        versions.sort(key=self._version_sort_key)
        return versions

    def _get_latest_version(self, prompt_name: str) -> str:
        versions = self.list_versions(prompt_name)
        if not versions:
            raise FileNotFoundError(
                f"No versions found for prompt '{prompt_name}' in {self.base_dir / prompt_name}"
            )
        return versions[-1]

    @staticmethod
    def _version_sort_key(version: str) -> int:
        """"v10" -> 10, "v2a" -> 2."""
        numeric = "".join(filter(str.isdigit, version))
        return int(numeric) if numeric else 0
