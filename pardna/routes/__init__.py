from flask import jsonify


def handle_service_error(error):
    """Turn a PardnaError into a JSON error response."""
    response = jsonify({
        'error': type(error).__name__,
        'message': str(error),
    })
    response.status_code = error.status_code
    return response
