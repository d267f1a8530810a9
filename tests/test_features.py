import logging

import numpy as np
import pytest

from swellcast.surf_model.config import FEATURE_FIELDS, WAVE_SIZE_CLASSES, QUALITY_CLASSES
from swellcast.surf_model.errors import UnknownLabel
from swellcast.surf_model.features import (
    encode_features,
    encode_label,
    decode_label,
    encode_history,
)


def test_encode_features_follows_field_order():
    record = {field: float(i) for i, field in enumerate(FEATURE_FIELDS)}
    vector = encode_features(record)

    assert vector.shape == (len(FEATURE_FIELDS),)
    assert vector.tolist() == [float(i) for i in range(len(FEATURE_FIELDS))]


def test_encode_features_coerces_bad_values_to_zero():
    record = {
        'waveSize': None,
        'wavePeriod': float('nan'),
        'waveDirection': float('inf'),
        'windWaveHeight': 'choppy',
        'windWavePeriod': '4.5',
        'windWaveDirection': True,
        'swellWaveHeight': -1.25,
    }
    vector = encode_features(record)

    assert vector[0] == 0.0
    assert vector[1] == 0.0
    assert vector[2] == 0.0
    assert vector[3] == 0.0
    assert vector[4] == 4.5
    assert vector[5] == 0.0
    assert vector[6] == -1.25
    # Everything not supplied, seaLevel included
    assert np.all(vector[7:] == 0.0)


def test_encode_features_ignores_extra_keys(make_conditions):
    record = make_conditions(2.0)
    with_extras = dict(record, userId='someone', time='2025-01-01T00:00', rating_waveSize='big')

    assert encode_features(record).tolist() == encode_features(with_extras).tolist()


def test_encode_label_returns_enumeration_index():
    assert encode_label('flat', WAVE_SIZE_CLASSES) == 0
    assert encode_label('big', WAVE_SIZE_CLASSES) == 3
    assert encode_label('zero', QUALITY_CLASSES) == 0
    assert encode_label('messy', QUALITY_CLASSES) == 4


def test_encode_label_rejects_unknown_label():
    with pytest.raises(UnknownLabel) as excinfo:
        encode_label('huge', WAVE_SIZE_CLASSES)

    assert excinfo.value.label == 'huge'
    assert excinfo.value.enumeration == WAVE_SIZE_CLASSES


def test_decode_label_inverts_encode():
    for label in QUALITY_CLASSES:
        assert decode_label(encode_label(label, QUALITY_CLASSES), QUALITY_CLASSES) == label


def test_decode_label_out_of_range_falls_back_to_first_member(caplog):
    # The fallback hides index bugs, so it must at least be visible in the logs
    with caplog.at_level(logging.WARNING):
        assert decode_label(9, WAVE_SIZE_CLASSES) == 'flat'
        assert decode_label(-1, QUALITY_CLASSES) == 'zero'

    assert 'out of range' in caplog.text


def test_encode_history_shares_row_order(make_sample):
    history = [
        make_sample(1.0, 'small', 'clean'),
        make_sample(2.0, 'big', 'messy'),
        make_sample(3.0, 'flat', 'zero'),
    ]
    X, wave_size_y, quality_y = encode_history(history)

    assert X.shape == (3, len(FEATURE_FIELDS))
    assert X[:, 0].tolist() == [1.0, 2.0, 3.0]
    assert wave_size_y.tolist() == [1, 3, 0]
    assert quality_y.tolist() == [1, 4, 0]


def test_encode_history_fails_on_corrupted_label(make_sample):
    history = [make_sample(1.0, 'small', 'clean'), make_sample(2.0, 'gigantic', 'clean')]

    with pytest.raises(UnknownLabel):
        encode_history(history)
