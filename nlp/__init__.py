"""
SegmentDiff NLP Integration Package
===================================
Sentence boundary detection backed by spaCy (see nlp.spacy).

spaCy itself is only imported when the detector is first used.
"""

from typing import Any, Dict

__version__ = "1.0.0"


def get_status(load: bool = False) -> Dict[str, Any]:
    """
    Status of the sentence detector for health reporting.

    Args:
        load: Load the spaCy pipeline if it has not been loaded yet;
              otherwise an unloaded pipeline is reported as such

    Returns:
        {enabled, loaded, available, model, version, error}
    """
    from . import config
    from . import spacy as spacy_detector

    status = {
        'enabled': config.get_config().spacy.enabled,
        'loaded': spacy_detector.is_loaded(),
        'available': None,
        'model': None,
        'version': None,
        'error': None,
    }
    if status['enabled'] and (load or status['loaded']):
        details = spacy_detector.get_status()
        status.update({key: details.get(key) for key in ('available', 'model', 'version', 'error')})
        status['loaded'] = True
    return status
