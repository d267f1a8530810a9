"""
Rating storage for personalized surf predictions.

Stores:
- One document per (userId, time): the conditions for that hour plus the
  surfer's wave size and quality rating
- Every user's ratings in their own file, so a history lookup reads exactly
  one file

Storage format: JSON files in data/ratings/<quoted userId>.json
"""

import json
import math
import os
import tempfile
import threading
from datetime import datetime, timezone
from urllib.parse import quote
import logging

from ..config import production
from .config import (
    FEATURE_FIELDS,
    OPTIONAL_FEATURE_FIELDS,
    WAVE_SIZE_CLASSES,
    QUALITY_CLASSES,
    FLAT_WAVE_SIZE,
    FLAT_QUALITY,
)
from .errors import RatingValidationError, DuplicateRating, RatingNotFound

logger = logging.getLogger(__name__)

RATINGS_DIR = production.RATINGS_DIR

# Serializes load-modify-save of rating files across request threads
_write_lock = threading.Lock()


def initialize_storage():
    """Create the ratings directory if it doesn't exist."""
    os.makedirs(RATINGS_DIR, exist_ok=True)
    logger.debug(f"Ensured directory exists: {RATINGS_DIR}")


def _get_user_file_path(user_id):
    """
    Get the ratings file path for a user.

    User ids are percent-encoded so any id maps to one safe file name.
    """
    return os.path.join(RATINGS_DIR, f"{quote(str(user_id), safe='')}.json")


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def enforce_quality_rule(wave_size, quality):
    """Flat wave size always yields zero quality."""
    return FLAT_QUALITY if wave_size == FLAT_WAVE_SIZE else quality


def _require_number(value, field):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise RatingValidationError(f'"{field}" must be a numeric value') from None
    if isinstance(value, bool) or not math.isfinite(number):
        raise RatingValidationError(f'"{field}" must be a numeric value')
    return number


def _conditions_from(source):
    conditions = {}
    for field in FEATURE_FIELDS:
        value = source.get(field)
        if value is None and field in OPTIONAL_FEATURE_FIELDS:
            continue
        if value is None:
            raise RatingValidationError(f'"{field}" is required')
        conditions[field] = _require_number(value, field)
    return conditions


def _check_time(time):
    if not time or not isinstance(time, str):
        raise RatingValidationError('time is required')
    return time


def build_rating_document(user_id, payload):
    """
    Validate a rating request body and turn it into a stored document.

    Parameters:
    -----------
    user_id : str
        Owner of the rating
    payload : dict
        {'time': str, <conditions fields>, 'rating': {'waveSize': str, 'quality': str}}

    Returns:
    --------
    document : dict
        Stored shape with 'userId', 'time', conditions, 'rating_waveSize'
        and 'rating_quality'

    Raises:
    -------
    RatingValidationError
        On missing or invalid fields
    """
    if user_id is None or str(user_id) == '':
        raise RatingValidationError('userId is required')
    if not isinstance(payload, dict):
        raise RatingValidationError('rating payload must be a JSON object')

    time = _check_time(payload.get('time'))

    rating = payload.get('rating')
    if not isinstance(rating, dict):
        raise RatingValidationError('rating is required')

    wave_size = rating.get('waveSize')
    quality = rating.get('quality')
    if wave_size not in WAVE_SIZE_CLASSES:
        raise RatingValidationError('Invalid waveSize')
    if quality not in QUALITY_CLASSES:
        raise RatingValidationError('Invalid quality')

    document = {'userId': str(user_id), 'time': time}
    document.update(_conditions_from(payload))
    document['rating_waveSize'] = wave_size
    document['rating_quality'] = enforce_quality_rule(wave_size, quality)
    return document


def normalize_stored_document(entry):
    """
    Validate a document already in stored shape (used by bulk seeding).

    Raises RatingValidationError on bad labels or values.
    """
    if not isinstance(entry, dict):
        raise RatingValidationError('rating entry must be a JSON object')
    return build_rating_document(entry.get('userId'), {
        **entry,
        'rating': {
            'waveSize': entry.get('rating_waveSize'),
            'quality': entry.get('rating_quality')
        }
    })


def _load_user_ratings(user_id):
    file_path = _get_user_file_path(user_id)
    if not os.path.exists(file_path):
        return []

    try:
        with open(file_path, 'r') as f:
            ratings = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.error(f"Failed to load ratings for user {user_id}: {e}")
        raise

    if not isinstance(ratings, list):
        raise ValueError(f"Ratings file {file_path} does not hold a list")
    return ratings


def _save_user_ratings(user_id, ratings):
    initialize_storage()

    ratings = sorted(ratings, key=lambda r: r['time'])
    file_path = _get_user_file_path(user_id)

    # Unique temp file in the target directory so os.replace stays atomic
    fd, tmp_path = tempfile.mkstemp(dir=RATINGS_DIR, suffix='.tmp')
    try:
        with os.fdopen(fd, 'w') as f:
            json.dump(ratings, f, indent=2)
        os.replace(tmp_path, file_path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)

    logger.debug(f"Saved {len(ratings)} ratings for user {user_id}")


def _find_index(ratings, time):
    for i, rating in enumerate(ratings):
        if rating.get('time') == time:
            return i
    return None


def load_user_history(user_id):
    """
    Load every rating a user has stored.

    Parameters:
    -----------
    user_id : str
        User identifier

    Returns:
    --------
    history : list of dict
        Rating documents sorted by time (empty if the user has none)
    """
    history = _load_user_ratings(user_id)
    history.sort(key=lambda r: r.get('time', ''))
    return history


def get_rating(user_id, time):
    """Return the user's rating for time, raising RatingNotFound if absent."""
    ratings = _load_user_ratings(user_id)
    index = _find_index(ratings, time)
    if index is None:
        raise RatingNotFound('Rating not found')
    return ratings[index]


def create_rating(user_id, payload):
    """
    Store a new rating.

    Raises DuplicateRating if the user already rated this hour.
    """
    document = build_rating_document(user_id, payload)

    with _write_lock:
        ratings = _load_user_ratings(user_id)

        if _find_index(ratings, document['time']) is not None:
            raise DuplicateRating('A rating already exists for this time')

        now = _now_iso()
        document['createdAt'] = now
        document['updatedAt'] = now
        ratings.append(document)
        _save_user_ratings(user_id, ratings)

    logger.info(f"Stored rating for user {user_id} at {document['time']}")
    return document


def update_rating(user_id, payload):
    """
    Replace the conditions and labels of an existing rating.

    Raises RatingNotFound if the user never rated this hour.
    """
    document = build_rating_document(user_id, payload)

    with _write_lock:
        ratings = _load_user_ratings(user_id)

        index = _find_index(ratings, document['time'])
        if index is None:
            raise RatingNotFound('Rating not found')

        document['createdAt'] = ratings[index].get('createdAt', _now_iso())
        document['updatedAt'] = _now_iso()
        ratings[index] = document
        _save_user_ratings(user_id, ratings)

    logger.info(f"Updated rating for user {user_id} at {document['time']}")
    return document


def delete_rating(user_id, time):
    """Delete a rating, raising RatingNotFound if absent."""
    with _write_lock:
        ratings = _load_user_ratings(user_id)
        index = _find_index(ratings, time)
        if index is None:
            raise RatingNotFound('Rating not found')

        deleted = ratings.pop(index)
        _save_user_ratings(user_id, ratings)

    logger.info(f"Deleted rating for user {user_id} at {time}")
    return deleted


def upsert_ratings(entries):
    """
    Insert or replace many stored-shape rating documents.

    Parameters:
    -----------
    entries : list of dict
        Documents with 'userId', 'time', conditions and rating labels

    Returns:
    --------
    counts : dict
        {'upserted': int, 'modified': int}
    """
    documents = [normalize_stored_document(entry) for entry in entries]

    by_user = {}
    for document in documents:
        by_user.setdefault(document['userId'], []).append(document)

    upserted = 0
    modified = 0
    with _write_lock:
        for user_id, user_documents in by_user.items():
            ratings = _load_user_ratings(user_id)
            now = _now_iso()
            for document in user_documents:
                index = _find_index(ratings, document['time'])
                document['updatedAt'] = now
                if index is None:
                    document['createdAt'] = now
                    ratings.append(document)
                    upserted += 1
                else:
                    document['createdAt'] = ratings[index].get('createdAt', now)
                    ratings[index] = document
                    modified += 1
            _save_user_ratings(user_id, ratings)

    return {'upserted': upserted, 'modified': modified}
