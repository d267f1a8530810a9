"""
Personalized wave size and quality predictions.

Each user gets two decision trees (wave size, quality) grown from that
user's own rating history. Trees are never cached or persisted: every
call retrains from the full history, which is small enough that a fit
costs a few milliseconds.
"""

import logging

from . import storage
from .config import (
    FEATURE_FIELDS,
    WAVE_SIZE_CLASSES,
    QUALITY_CLASSES,
    TREE_MAX_DEPTH,
    TREE_MIN_SAMPLES_SPLIT,
)
from .errors import InsufficientTrainingData
from .features import encode_features, encode_history, decode_label
from .tree import DecisionTreeClassifier

logger = logging.getLogger(__name__)


def _new_tree(enumeration):
    return DecisionTreeClassifier(
        n_classes=len(enumeration),
        max_depth=TREE_MAX_DEPTH,
        min_samples_split=TREE_MIN_SAMPLES_SPLIT
    )


def fit_classifiers(history):
    """
    Fit the wave size and quality trees on a rating history.

    Parameters:
    -----------
    history : list of dict
        Rating samples (conditions plus 'rating_waveSize'/'rating_quality')

    Returns:
    --------
    wave_size_tree, quality_tree : DecisionTreeClassifier
    X : ndarray
        Training feature matrix
    wave_size_y, quality_y : ndarray of int
        Training class indices

    Raises:
    -------
    InsufficientTrainingData
        If history is empty
    UnknownLabel
        If a stored label is outside its enumeration (raised before fitting)
    """
    if not history:
        raise InsufficientTrainingData()

    X, wave_size_y, quality_y = encode_history(history, FEATURE_FIELDS)

    wave_size_tree = _new_tree(WAVE_SIZE_CLASSES).fit(X, wave_size_y)
    quality_tree = _new_tree(QUALITY_CLASSES).fit(X, quality_y)

    return wave_size_tree, quality_tree, X, wave_size_y, quality_y


def predict(history, query):
    """
    Predict wave size and quality for one conditions record.

    Parameters:
    -----------
    history : list of dict
        The user's rating samples, in a stable order
    query : dict
        Conditions for the hour to predict

    Returns:
    --------
    result : dict
        {'waveSize': str, 'quality': str, 'samplesUsed': int}
    """
    wave_size_tree, quality_tree, _, _, _ = fit_classifiers(history)

    x = encode_features(query, FEATURE_FIELDS)
    wave_size = decode_label(wave_size_tree.predict_one(x), WAVE_SIZE_CLASSES)
    quality = decode_label(quality_tree.predict_one(x), QUALITY_CLASSES)

    return {
        'waveSize': wave_size,
        'quality': quality,
        'samplesUsed': len(history)
    }


def train_and_report(history):
    """
    Fit both trees and report accuracy on the training rows.

    Diagnostic only: training accuracy says whether a user's ratings
    separate at all, not how well the trees generalize.

    Returns:
    --------
    report : dict
        {'waveSizeAccuracy': float, 'qualityAccuracy': float,
         'samplesUsed': int, 'treeSnapshot': {'waveSizeTree': dict,
         'qualityTree': dict}}
    """
    wave_size_tree, quality_tree, X, wave_size_y, quality_y = fit_classifiers(history)

    return {
        'waveSizeAccuracy': wave_size_tree.score(X, wave_size_y),
        'qualityAccuracy': quality_tree.score(X, quality_y),
        'samplesUsed': len(history),
        'treeSnapshot': {
            'waveSizeTree': wave_size_tree.to_dict(FEATURE_FIELDS, WAVE_SIZE_CLASSES),
            'qualityTree': quality_tree.to_dict(FEATURE_FIELDS, QUALITY_CLASSES)
        }
    }


def predict_for_user(user_id, query):
    """Load a user's history from the rating store and predict for query."""
    history = storage.load_user_history(user_id)
    if not history:
        raise InsufficientTrainingData(user_id)

    result = predict(history, query)
    logger.info(
        f"Predicted {result['waveSize']}/{result['quality']} for user {user_id} "
        f"from {result['samplesUsed']} samples"
    )
    return result


def train_and_report_for_user(user_id):
    """Load a user's history from the rating store and build a training report."""
    history = storage.load_user_history(user_id)
    if not history:
        raise InsufficientTrainingData(user_id)
    return train_and_report(history)
