"""
SegmentDiff - Main Flask Application
Serves the segment matching engine over a small JSON API
"""
from typing import Optional

from flask import Flask, jsonify

import nlp
from config_logging import APP_NAME, VERSION, AppConfig, get_config, get_logger
from segment_diff import SegmentDiffer, sd_blueprint
from segment_diff.routes import EXTENSION_KEY

logger = get_logger('app')


def create_app(config: Optional[AppConfig] = None, differ: Optional[SegmentDiffer] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Application config; the environment-derived config when None
        differ: Differ to serve; built lazily from the default registry when None
    """
    config = config or get_config()
    is_valid, errors = config.validate()
    if not is_valid:
        for error in errors:
            logger.warning(f"Configuration problem: {error}")

    app = Flask(__name__)
    app.config['DEBUG'] = config.debug
    # Two texts plus JSON overhead
    app.config['MAX_CONTENT_LENGTH'] = config.max_text_length * 8 + 64 * 1024

    if differ is not None:
        app.extensions[EXTENSION_KEY] = differ

    app.register_blueprint(sd_blueprint, url_prefix='/api/diff')

    @app.route('/api/health')
    def health():
        """Liveness check with version and sentence detector info"""
        detector = {'name': get_config().sentence_detector}
        if detector['name'] == 'spacy':
            detector.update(nlp.get_status())
        return jsonify({'status': 'ok', 'app': APP_NAME, 'version': VERSION,
                        'sentence_detector': detector})

    logger.info(f"{APP_NAME} {VERSION} application created",
                sentence_detector=config.sentence_detector)
    return app


if __name__ == '__main__':
    config = get_config()
    print("=" * 60)
    print(f"  {APP_NAME} {VERSION}")
    print(f"  Starting server at http://{config.host}:{config.port}")
    print("=" * 60)
    create_app(config).run(host=config.host, port=config.port, debug=config.debug)
