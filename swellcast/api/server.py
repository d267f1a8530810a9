"""
Flask API server for personalized surf predictions.

Exposes endpoints:
- GET /health - Health check
- GET /predict - Wave size and quality prediction for one forecast hour
- GET/POST/PUT/DELETE /ratings - A surfer's rated hours

Every prediction retrains two decision trees on the requesting user's
ratings, so a user needs at least one rated hour before /predict answers.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException
import numpy as np

from swellcast.config import production
from swellcast.surf_model import predictor, storage
from swellcast.surf_model.config import FEATURE_FIELDS, OPTIONAL_FEATURE_FIELDS
from swellcast.surf_model.errors import (
    InsufficientTrainingData,
    UnknownLabel,
    RatingValidationError,
    DuplicateRating,
    RatingNotFound,
)

is_production = production.is_production

# Configure logging
if is_production:
    # Production logging - log to file
    os.makedirs(production.LOGS_DIR, exist_ok=True)

    # Use RotatingFileHandler for log rotation (max 10MB, keep 5 backups)
    file_handler = RotatingFileHandler(
        production.LOG_FILE,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5
    )
    file_handler.setLevel(production.LOG_LEVEL)
    file_handler.setFormatter(logging.Formatter(production.LOG_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(production.LOG_LEVEL)
    console_handler.setFormatter(logging.Formatter(production.LOG_FORMAT))

    logging.basicConfig(
        level=production.LOG_LEVEL,
        handlers=[file_handler, console_handler]
    )
else:
    # Development logging
    logging.basicConfig(level=production.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['DEBUG'] = production.DEBUG


# Enable CORS for frontend
@app.after_request
def after_request(response):
    origin = request.headers.get('Origin')
    if '*' in production.ALLOWED_ORIGINS:
        response.headers.add('Access-Control-Allow-Origin', '*')
    elif origin in production.ALLOWED_ORIGINS:
        response.headers.add('Access-Control-Allow-Origin', origin)

    response.headers.add('Access-Control-Allow-Headers', 'Content-Type,Authorization')
    response.headers.add('Access-Control-Allow-Methods', 'GET,PUT,POST,DELETE,OPTIONS')
    return response


def error_response(message, status):
    return jsonify({
        'error': message,
        'timestamp': datetime.now().isoformat()
    }), status


def parse_query_features(args):
    """
    Parse the conditions of the hour to predict from query parameters.

    Parameters:
    -----------
    args : MultiDict
        Request query arguments

    Returns:
    --------
    query : dict
        Field name -> float for every feature field supplied

    Raises:
    -------
    ValueError
        If a required field is missing or not a finite number
    """
    query = {}
    for field in FEATURE_FIELDS:
        value = args.get(field)
        if value is None:
            if field in OPTIONAL_FEATURE_FIELDS:
                continue
            raise ValueError(f"Missing query parameter: {field}")
        try:
            number = float(value)
        except ValueError:
            raise ValueError(f"Invalid numeric value for {field}") from None
        if not np.isfinite(number):
            raise ValueError(f"Invalid numeric value for {field}")
        query[field] = number
    return query


@app.route('/health', methods=['GET'])
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now().isoformat()
    })


@app.route('/predict', methods=['GET'])
def get_prediction():
    """
    Predict wave size and quality for one forecast hour.

    Query parameters:
    - userId: Surfer whose ratings train the model
    - waveSize, wavePeriod, ... windDirection: Conditions for the hour
    - seaLevel: Optional

    Returns:
    --------
    JSON with predicted labels and the number of ratings used
    """
    user_id = request.args.get('userId')
    if not user_id:
        return error_response('userId is required', 400)

    try:
        query = parse_query_features(request.args)
    except ValueError as e:
        return error_response(str(e), 400)

    try:
        result = predictor.predict_for_user(user_id, query)
    except InsufficientTrainingData as e:
        logger.info(f"No ratings yet for user {user_id}")
        return error_response(str(e), 400)
    except UnknownLabel as e:
        logger.error(f"Corrupted rating data for user {user_id}: {e}", exc_info=True)
        return error_response('Stored rating data is invalid', 500)

    return jsonify({
        'predicted': {
            'waveSize': result['waveSize'],
            'quality': result['quality']
        },
        'samplesUsed': int(result['samplesUsed'])
    })


@app.route('/ratings', methods=['GET'])
def list_ratings():
    """
    Get a user's ratings, or one rating when time is given.

    Query parameters:
    - userId: Surfer identifier
    - time: Optional forecast hour (ISO string)
    """
    user_id = request.args.get('userId')
    if not user_id:
        return error_response('userId is required', 400)

    time = request.args.get('time')
    if time:
        try:
            return jsonify(storage.get_rating(user_id, time)), 200
        except RatingNotFound as e:
            return error_response(str(e), 404)

    return jsonify(storage.load_user_history(user_id)), 200


@app.route('/ratings', methods=['POST'])
def add_rating():
    """
    Rate one forecast hour.

    Request body (JSON):
    {
        "userId": "abc123",
        "time": "2025-12-05T12:00",
        "waveSize": 1.2, "wavePeriod": 8.0, ...,
        "rating": {"waveSize": "small", "quality": "clean"}
    }

    A flat wave size always stores quality "zero".
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response('No JSON data provided', 400)

    try:
        created = storage.create_rating(data.get('userId'), data)
    except RatingValidationError as e:
        return error_response(str(e), 400)
    except DuplicateRating as e:
        return error_response(str(e), 409)

    return jsonify(created), 201


@app.route('/ratings', methods=['PUT'])
def replace_rating():
    """Update an existing rating; same body as POST."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response('No JSON data provided', 400)

    try:
        updated = storage.update_rating(data.get('userId'), data)
    except RatingValidationError as e:
        return error_response(str(e), 400)
    except RatingNotFound as e:
        return error_response(str(e), 404)

    return jsonify(updated), 200


@app.route('/ratings', methods=['DELETE'])
def remove_rating():
    """
    Delete one rating.

    Query parameters:
    - userId: Surfer identifier
    - time: Forecast hour to delete
    """
    user_id = request.args.get('userId')
    time = request.args.get('time')
    if not user_id:
        return error_response('userId is required', 400)
    if not time:
        return error_response('time is required', 400)

    try:
        storage.delete_rating(user_id, time)
    except RatingNotFound as e:
        return error_response(str(e), 404)

    return '', 204


# Production error handlers
@app.errorhandler(404)
def not_found(error):
    """Handle 404 errors."""
    logger.warning(f"404 error: {request.url}")
    return jsonify({
        'error': 'Not found',
        'message': 'The requested resource was not found.',
        'timestamp': datetime.now().isoformat()
    }), 404


@app.errorhandler(405)
def method_not_allowed(error):
    """Handle 405 errors."""
    return jsonify({
        'error': 'Method Not Allowed',
        'timestamp': datetime.now().isoformat()
    }), 405


@app.errorhandler(Exception)
def handle_exception(e):
    """Handle all unhandled exceptions."""
    if isinstance(e, HTTPException):
        return e
    logger.error(f"Unhandled exception: {e}", exc_info=True)
    if is_production:
        # Don't expose error details in production
        return jsonify({
            'error': 'Internal server error',
            'message': 'An unexpected error occurred.',
            'timestamp': datetime.now().isoformat()
        }), 500
    else:
        return jsonify({
            'error': str(e),
            'timestamp': datetime.now().isoformat()
        }), 500


def main():
    """Run the development server."""
    port = int(os.environ.get('PORT', '5002'))
    print(f"* API will be available at: http://localhost:{port}")
    print(f"* Endpoints:")
    print(f"  - GET http://localhost:{port}/health")
    print(f"  - GET http://localhost:{port}/predict")
    print(f"  - GET/POST/PUT/DELETE http://localhost:{port}/ratings")
    print("")

    # Development server only
    app.run(debug=not is_production, use_reloader=False, host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
