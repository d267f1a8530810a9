"""
Feature encoding for the personalized surf classifiers.

Turns raw conditions records into fixed-order numeric vectors and rating
labels into class indices (and back).
"""

import logging
import math

import numpy as np

from .config import FEATURE_FIELDS, WAVE_SIZE_CLASSES, QUALITY_CLASSES
from .errors import UnknownLabel

logger = logging.getLogger(__name__)


def _to_finite_float(value):
    """Coerce a raw measurement to float, 0.0 when absent or non-finite."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def encode_features(record, fields=FEATURE_FIELDS):
    """
    Encode a conditions record as a feature vector.

    Parameters:
    -----------
    record : dict
        Conditions keyed by field name (extra keys are ignored)
    fields : sequence of str
        Field order of the vector

    Returns:
    --------
    vector : ndarray of float, shape (len(fields),)
        Measurements in field order; missing or non-finite values are 0.0
    """
    return np.array([_to_finite_float(record.get(field)) for field in fields], dtype=float)


def encode_label(label, enumeration):
    """
    Return the zero-based index of label within enumeration.

    Raises UnknownLabel if the label is not a member.
    """
    try:
        return list(enumeration).index(label)
    except ValueError:
        raise UnknownLabel(label, enumeration) from None


def decode_label(index, enumeration):
    """
    Return the label at index, falling back to the first member when the
    index is out of range.
    """
    try:
        index = int(index)
    except (TypeError, ValueError):
        index = -1
    if 0 <= index < len(enumeration):
        return enumeration[index]
    logger.warning(f"Class index {index} out of range for {enumeration}, using {enumeration[0]!r}")
    return enumeration[0]


def encode_history(history, fields=FEATURE_FIELDS):
    """
    Encode a user's rating history for training.

    Labels are encoded first so a corrupted row fails before any
    feature work or tree fitting happens.

    Parameters:
    -----------
    history : list of dict
        Rating samples with conditions fields plus 'rating_waveSize'
        and 'rating_quality'
    fields : sequence of str
        Feature field order

    Returns:
    --------
    X : ndarray, shape (n_samples, n_features)
        Feature matrix, one row per sample in history order
    wave_size_y : ndarray of int
        WaveSizeClass indices, same row order as X
    quality_y : ndarray of int
        QualityClass indices, same row order as X
    """
    wave_size_y = np.array(
        [encode_label(sample.get('rating_waveSize'), WAVE_SIZE_CLASSES) for sample in history],
        dtype=int
    )
    quality_y = np.array(
        [encode_label(sample.get('rating_quality'), QUALITY_CLASSES) for sample in history],
        dtype=int
    )

    if history:
        X = np.vstack([encode_features(sample, fields) for sample in history])
    else:
        X = np.empty((0, len(fields)), dtype=float)

    return X, wave_size_y, quality_y
