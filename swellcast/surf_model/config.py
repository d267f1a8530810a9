"""
Model configuration for personalized surf predictions.

Feature basis, rating label enumerations and decision tree settings.

The order of FEATURE_FIELDS is the column order of every feature matrix.
Training rows and prediction queries must be encoded against the same list,
otherwise the learned splits point at the wrong measurements.
"""

# Conditions measured for one forecast hour (Open-Meteo marine naming)
FEATURE_FIELDS = (
    'waveSize',                     # significant wave height (m)
    'wavePeriod',                   # s
    'waveDirection',                # degrees, coming-FROM
    'windWaveHeight',
    'windWavePeriod',
    'windWaveDirection',
    'swellWaveHeight',
    'swellWavePeriod',
    'swellWaveDirection',
    'secondarySwellWaveHeight',
    'secondarySwellWavePeriod',
    'secondarySwellWaveDirection',
    'windSpeed',                    # km/h at 10m
    'windDirection',
    'seaLevel',                     # optional, 0.0 when not recorded
)

# Fields a caller may leave out of a query or rating
OPTIONAL_FEATURE_FIELDS = ('seaLevel',)

# Rating labels (position in the tuple is the class index)
WAVE_SIZE_CLASSES = ('flat', 'small', 'medium', 'big')
QUALITY_CLASSES = ('zero', 'clean', 'fair', 'choppy', 'messy')

# Business rule: a flat day has no quality to speak of
FLAT_WAVE_SIZE = 'flat'
FLAT_QUALITY = 'zero'

# Decision tree settings, shared by both classifiers
TREE_MAX_DEPTH = 6
TREE_MIN_SAMPLES_SPLIT = 2
