"""
spaCy Analyzer for SegmentDiff
==============================
Sentence boundary detection using spaCy.

Features:
- Lazy model loading
- Offline compatible (installed models, or a blank pipeline with the
  rule-based sentencizer when no model is installed)
- Sentence boundary detection with character offsets

Requires: pip install spacy
"""

from typing import List, Dict, Tuple, Optional, Any

from config_logging import get_logger

from .. import config as nlp_config

logger = get_logger('nlp.spacy')


class SpacyAnalyzer:
    """
    spaCy-based sentence segmentation for SegmentDiff.

    Designed for offline operation with local models.
    """

    # Components that are expensive and irrelevant for sentence boundaries
    DISABLED_COMPONENTS = ["ner", "lemmatizer", "textcat"]

    def __init__(self, model_name: Optional[str] = None):
        """
        Initialize SpacyAnalyzer with specified or configured model.

        Args:
            model_name: spaCy model to load (e.g., 'en_core_web_sm')
        """
        self._available = False
        self._error: Optional[str] = None
        settings = nlp_config.get_config().spacy
        self.model_name = model_name or settings.model
        self.fallback_models = list(settings.fallback_models)
        self.use_blank_fallback = settings.use_blank_fallback
        self.language = settings.language
        self._nlp = None
        self._spacy = None
        if settings.enabled:
            self._load_model()
        else:
            self._error = "spaCy integration disabled"

    def _load_model(self):
        """Load spaCy model with fallback support."""
        try:
            import spacy
            self._spacy = spacy
        except ImportError:
            self._error = "spaCy not installed. Run: pip install spacy"
            logger.warning(self._error)
            return

        models_to_try = [self.model_name] + [
            m for m in self.fallback_models if m != self.model_name
        ]

        for model in models_to_try:
            try:
                self._nlp = self._spacy.load(model, exclude=self.DISABLED_COMPONENTS)
                self.model_name = model
                break
            except OSError:
                continue

        if self._nlp is None and self.use_blank_fallback:
            self._nlp = self._spacy.blank(self.language)
            self.model_name = f"blank:{self.language}"

        if self._nlp is None:
            self._error = (
                "No spaCy model found. Install with: "
                "python -m spacy download en_core_web_sm"
            )
            logger.warning(self._error)
            return

        # Pipelines without a parser or senter have no sentence boundaries
        if not any(name in self._nlp.pipe_names for name in ('parser', 'senter', 'sentencizer')):
            self._nlp.add_pipe('sentencizer')

        self._available = True
        logger.debug(f"spaCy pipeline ready: {self.model_name}",
                     pipeline=list(self._nlp.pipe_names))

    @property
    def error(self) -> Optional[str]:
        """Load error, if any."""
        return self._error

    @property
    def is_available(self) -> bool:
        """Check if spaCy is available and a pipeline is loaded."""
        return self._available and self._nlp is not None

    def get_status(self) -> Dict[str, Any]:
        """Get detailed status of the spaCy integration."""
        status = {
            'available': self.is_available,
            'model': self.model_name if self.is_available else None,
            'version': self._spacy.__version__ if self._spacy else None,
            'error': self._error,
        }

        if self.is_available:
            status['pipeline'] = list(self._nlp.pipe_names)

        return status

    def sentence_spans(self, text: str) -> List[Tuple[str, int, int]]:
        """
        Detect sentence boundaries.

        Returns:
            List of (sentence_text, start_char, end_char); empty when
            spaCy is unavailable.
        """
        if not self.is_available or not text:
            return []

        doc = self._nlp(text)
        return [(sent.text, sent.start_char, sent.end_char) for sent in doc.sents]

    def split_sentences(self, text: str) -> List[str]:
        """Sentence texts in document order."""
        return [span[0] for span in self.sentence_spans(text)]
