"""
Categorical decision tree classifier.

A small CART-style tree grown on Gini impurity, used once per target
(wave size, quality) for every prediction request.

Splitting:
- Every feature (ascending index) and every distinct observed value among
  the node's samples (ascending) is a candidate threshold
- Samples with x <= threshold go left, the rest go right
- The candidate with the lowest weighted Gini impurity wins; ties keep the
  earliest feature, then the smallest threshold
- Growth stops at max_depth, below min_samples_split samples, on pure nodes,
  or when no candidate leaves both sides non-empty

Leaves predict the majority class (ties go to the lowest class index).
No randomness anywhere: the same data always yields the same tree.
"""

import numpy as np

from .config import TREE_MAX_DEPTH, TREE_MIN_SAMPLES_SPLIT

# Impurity differences below this are treated as ties
_TIE_TOLERANCE = 1e-12


def gini_impurity(counts):
    """
    Gini impurity from class counts.

    Parameters:
    -----------
    counts : array-like of int
        Number of samples per class

    Returns:
    --------
    gini : float
        1 - sum(p_k^2), 0.0 for an empty node
    """
    counts = np.asarray(counts, dtype=float)
    total = counts.sum()
    if total <= 0:
        return 0.0
    p = counts / total
    return float(1.0 - np.sum(p * p))


class TreeNode:
    """
    One node of a fitted tree.

    Internal nodes hold (feature, threshold, left, right); leaves hold
    only the prediction. Every node keeps its training class counts.
    """

    def __init__(self, counts, depth):
        self.counts = counts
        self.depth = depth
        self.prediction = int(np.argmax(counts))
        self.feature = None
        self.threshold = None
        self.left = None
        self.right = None

    @property
    def is_leaf(self):
        return self.left is None

    @property
    def n_samples(self):
        return int(self.counts.sum())


class DecisionTreeClassifier:
    """
    Multi-class decision tree over integer class indices 0..n_classes-1.

    Parameters:
    -----------
    n_classes : int
        Size of the label enumeration
    max_depth : int
        Maximum depth; the root is depth 0
    min_samples_split : int
        Nodes with fewer samples are not split
    """

    def __init__(self, n_classes, max_depth=TREE_MAX_DEPTH, min_samples_split=TREE_MIN_SAMPLES_SPLIT):
        if n_classes < 1:
            raise ValueError('n_classes must be at least 1')
        self.n_classes = int(n_classes)
        self.max_depth = int(max_depth)
        self.min_samples_split = int(min_samples_split)
        self.root = None
        self.n_features = None

    def fit(self, X, y):
        """
        Grow the tree.

        Parameters:
        -----------
        X : array-like, shape (n_samples, n_features)
            Feature matrix
        y : array-like of int, shape (n_samples,)
            Class indices in [0, n_classes)

        Returns:
        --------
        self
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y, dtype=int)

        if X.ndim != 2:
            raise ValueError(f'X must be 2-dimensional, got shape {X.shape}')
        if X.shape[0] == 0:
            raise ValueError('Cannot fit a tree on zero samples')
        if X.shape[0] != y.shape[0]:
            raise ValueError(f'X has {X.shape[0]} rows but y has {y.shape[0]} labels')
        if y.min() < 0 or y.max() >= self.n_classes:
            raise ValueError(f'Class indices must lie in [0, {self.n_classes})')

        self.n_features = X.shape[1]
        self.root = self._grow(X, y, depth=0)
        return self

    def _grow(self, X, y, depth):
        counts = np.bincount(y, minlength=self.n_classes)
        node = TreeNode(counts, depth)

        if depth >= self.max_depth:
            return node
        if y.shape[0] < self.min_samples_split:
            return node
        if np.count_nonzero(counts) <= 1:
            return node

        split = self._best_split(X, y)
        if split is None:
            return node

        feature, threshold = split
        goes_left = X[:, feature] <= threshold
        node.feature = feature
        node.threshold = threshold
        node.left = self._grow(X[goes_left], y[goes_left], depth + 1)
        node.right = self._grow(X[~goes_left], y[~goes_left], depth + 1)
        return node

    def _best_split(self, X, y):
        """
        Find the (feature, threshold) with the lowest weighted Gini.

        Returns None when no feature separates the samples.
        """
        n_samples = y.shape[0]
        one_hot = np.eye(self.n_classes, dtype=float)[y]
        total_counts = one_hot.sum(axis=0)

        best = None
        best_impurity = np.inf

        for feature in range(X.shape[1]):
            order = np.argsort(X[:, feature], kind='stable')
            values = X[order, feature]

            # Last position of each distinct value; the maximum value is not
            # a split since it would leave the right side empty
            boundaries = np.nonzero(values[:-1] != values[1:])[0]
            if boundaries.size == 0:
                continue

            left_counts = np.cumsum(one_hot[order], axis=0)[boundaries]
            right_counts = total_counts - left_counts
            n_left = (boundaries + 1).astype(float)
            n_right = n_samples - n_left

            gini_left = 1.0 - np.sum((left_counts / n_left[:, None]) ** 2, axis=1)
            gini_right = 1.0 - np.sum((right_counts / n_right[:, None]) ** 2, axis=1)
            weighted = (n_left * gini_left + n_right * gini_right) / n_samples

            # First threshold within tolerance of this feature's minimum
            candidate = int(np.nonzero(weighted <= weighted.min() + _TIE_TOLERANCE)[0][0])
            impurity = float(weighted[candidate])

            if impurity < best_impurity - _TIE_TOLERANCE:
                best_impurity = impurity
                best = (feature, float(values[boundaries[candidate]]))

        return best

    def _check_fitted(self):
        if self.root is None:
            raise RuntimeError('DecisionTreeClassifier is not fitted yet')

    def predict_one(self, x):
        """Return the class index for a single feature vector."""
        self._check_fitted()
        x = np.asarray(x, dtype=float)
        node = self.root
        while not node.is_leaf:
            if x[node.feature] <= node.threshold:
                node = node.left
            else:
                node = node.right
        return node.prediction

    def predict(self, X):
        """Return class indices for each row of X."""
        X = np.atleast_2d(np.asarray(X, dtype=float))
        return np.array([self.predict_one(row) for row in X], dtype=int)

    def score(self, X, y):
        """Fraction of rows whose predicted class equals y."""
        y = np.asarray(y, dtype=int)
        if y.size == 0:
            return 0.0
        return float(np.mean(self.predict(X) == y))

    def depth(self):
        """Depth of the deepest leaf."""
        self._check_fitted()

        def _depth(node):
            if node.is_leaf:
                return node.depth
            return max(_depth(node.left), _depth(node.right))

        return _depth(self.root)

    def to_dict(self, feature_names=None, class_names=None):
        """
        Export the tree as nested dicts for inspection.

        Parameters:
        -----------
        feature_names : sequence of str, optional
            Names for feature indices
        class_names : sequence of str, optional
            Names for class indices

        Returns:
        --------
        snapshot : dict
            Root node; internal nodes carry 'feature', 'threshold', 'left'
            and 'right', leaves carry 'prediction'
        """
        self._check_fitted()

        def _class_name(index):
            return class_names[index] if class_names is not None else index

        def _export(node):
            entry = {
                'depth': node.depth,
                'samples': node.n_samples,
                'gini': gini_impurity(node.counts),
                'distribution': {
                    str(_class_name(i)): int(count)
                    for i, count in enumerate(node.counts) if count > 0
                },
            }
            if node.is_leaf:
                entry['prediction'] = _class_name(node.prediction)
            else:
                entry['feature'] = node.feature
                if feature_names is not None:
                    entry['featureName'] = feature_names[node.feature]
                entry['threshold'] = node.threshold
                entry['left'] = _export(node.left)
                entry['right'] = _export(node.right)
            return entry

        return _export(self.root)
