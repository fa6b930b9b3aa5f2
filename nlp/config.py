"""
NLP Configuration
=================
Settings for the spaCy sentence detector, overridable through
NLP_SPACY_* environment variables.
"""

import os
from typing import Optional
from dataclasses import dataclass, field


@dataclass
class SpacyConfig:
    """spaCy pipeline selection."""
    enabled: bool = True
    model: str = "en_core_web_sm"
    fallback_models: list = field(default_factory=lambda: ["en_core_web_md", "en_core_web_lg"])
    # Rule-based sentencizer on a blank pipeline when no model is installed
    use_blank_fallback: bool = True
    language: str = "en"

    @classmethod
    def from_env(cls) -> 'SpacyConfig':
        settings = cls()
        if 'NLP_SPACY_ENABLED' in os.environ:
            settings.enabled = _parse_bool(os.environ['NLP_SPACY_ENABLED'])
        if 'NLP_SPACY_MODEL' in os.environ:
            settings.model = os.environ['NLP_SPACY_MODEL']
        if 'NLP_SPACY_FALLBACK_MODELS' in os.environ:
            settings.fallback_models = [
                m.strip() for m in os.environ['NLP_SPACY_FALLBACK_MODELS'].split(',') if m.strip()
            ]
        if 'NLP_SPACY_BLANK_FALLBACK' in os.environ:
            settings.use_blank_fallback = _parse_bool(os.environ['NLP_SPACY_BLANK_FALLBACK'])
        if 'NLP_SPACY_LANGUAGE' in os.environ:
            settings.language = os.environ['NLP_SPACY_LANGUAGE']
        return settings


@dataclass
class NLPConfig:
    spacy: SpacyConfig = field(default_factory=SpacyConfig.from_env)


_config: Optional[NLPConfig] = None


def get_config() -> NLPConfig:
    """Get or create the NLP configuration."""
    global _config
    if _config is None:
        _config = NLPConfig()
    return _config


def reset_config():
    """Reset the NLP configuration (for testing)."""
    global _config
    _config = None


def _parse_bool(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes', 'on')
