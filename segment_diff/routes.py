"""
Segment Diff Flask Routes
=========================
API endpoints for algorithm listing and text comparison.
"""

import time
from functools import wraps

from flask import Blueprint, current_app, g, jsonify, request

from config_logging import (
    get_config, get_logger, DiffEngineError, StructuredLogger, ValidationError
)

from .differ import SegmentDiffer

logger = get_logger('segment_diff.routes')

# Create blueprint
sd_blueprint = Blueprint('segment_diff', __name__)

EXTENSION_KEY = 'segment_diff'


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def handle_sd_errors(f):
    """
    Decorator for standardized API error handling in Segment Diff routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            # Log slow operations
            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow SD API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except DiffEngineError as e:
            if e.status_code >= 500:
                logger.error(f"{e.code} in {f.__name__}: {e.message}")
            else:
                logger.warning(f"{e.code} in {f.__name__}: {e.message}")
            body = e.to_dict()
            body['error']['correlation_id'] = getattr(g, 'correlation_id', 'unknown')
            return jsonify(body), e.status_code
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            return jsonify({
                'success': False,
                'error': {
                    'code': 'INTERNAL_ERROR',
                    'message': 'An unexpected error occurred',
                    'correlation_id': getattr(g, 'correlation_id', 'unknown')
                }
            }), 500

    return decorated


@sd_blueprint.before_request
def assign_correlation_id():
    """Tag every request with a correlation ID for the structured logs."""
    g.correlation_id = request.headers.get('X-Correlation-ID') or StructuredLogger.new_correlation_id()
    StructuredLogger.set_correlation_id(g.correlation_id)


def get_differ() -> SegmentDiffer:
    """Differ stored on the application, created on first use."""
    differ = current_app.extensions.get(EXTENSION_KEY)
    if differ is None:
        differ = SegmentDiffer()
        current_app.extensions[EXTENSION_KEY] = differ
    return differ


# =============================================================================
# API ENDPOINTS
# =============================================================================

@sd_blueprint.route('/algorithms', methods=['GET'])
@handle_sd_errors
def list_algorithms():
    """
    List registered algorithms for both categories.

    Returns:
        {
            success: true,
            algorithms: {
                paragraph: { count, algorithms: [metadata...] },
                sentence: { count, algorithms: [metadata...] }
            }
        }
    """
    return jsonify({
        'success': True,
        'algorithms': get_differ().list_algorithms()
    })


@sd_blueprint.route('/algorithms/<category>', methods=['GET'])
@handle_sd_errors
def list_category_algorithms(category: str):
    """List registered algorithms for one category, in display order."""
    listing = get_differ().list_algorithms(category)
    return jsonify({
        'success': True,
        'category': category,
        'algorithms': listing[category]['algorithms']
    })


@sd_blueprint.route('/compare', methods=['POST'])
@handle_sd_errors
def compare():
    """
    Compare two texts.

    Request body:
        {
            left: str, right: str,
            category: 'paragraph' | 'sentence' (default paragraph),
            algorithm: str (default thomas),
            options: { fuzziness, min_match, max_match, ... }
        }

    Returns:
        { success: true, result: DiffResult }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    left = data.get('left')
    right = data.get('right')
    if not isinstance(left, str) or not isinstance(right, str):
        raise ValidationError("Both 'left' and 'right' must be strings", field='left/right')

    max_length = get_config().max_text_length
    for side, text in (('left', left), ('right', right)):
        if len(text) > max_length:
            raise ValidationError(
                f"'{side}' text exceeds {max_length} characters", field=side
            )

    category = data.get('category') or 'paragraph'
    name = data.get('algorithm') or 'thomas'
    options = data.get('options') or {}

    logger.info(f"Compare requested: {category}:{name}",
                left_length=len(left), right_length=len(right))
    result = get_differ().compare(category, name, left, right, options)

    return jsonify({
        'success': True,
        'result': result.to_dict()
    })
