import numpy as np
from scipy.spatial import cKDTree


def calculateSkeletonErrors(x, y):
    """
    Distances between corresponding points of warped and target skeletons.

    :param x: Warped skeleton points, shape (n, D).
    :param y: Target skeleton points, shape (n, D).
    :return: rms error, maximum error
    """
    d = np.linalg.norm(np.asarray(x, dtype=float) - np.asarray(y, dtype=float), axis=1)
    if d.size == 0:
        return 0.0, 0.0
    return float(np.sqrt((d * d).mean())), float(d.max())


def assignNearestSkeletonPoints(x, xi, indexBase=0):
    """
    Assign each query point to the neighbourhood of its nearest skeleton point.
    Only meaningful for a single unbranched skeleton path.

    :param x: Skeleton points, shape (n, D).
    :param xi: Query points, shape (N, D).
    :param indexBase: 0 or 1, base of returned skeleton indexes.
    :return: Integer array of N skeleton indexes, suitable as IDX.
    """
    assert indexBase in (0, 1), "assignNearestSkeletonPoints:  Invalid index base"
    x = np.asarray(x, dtype=float)
    xi = np.asarray(xi, dtype=float)
    if xi.shape[0] == 0:
        return np.zeros(0, dtype=int)
    assert (x.ndim == 2) and (xi.ndim == 2) and (x.shape[1] == xi.shape[1]), \
        "assignNearestSkeletonPoints:  Skeleton and query points must be 2-D arrays of the same dimension"
    tree = cKDTree(x)
    idx = tree.query(xi)[1]
    return np.asarray(idx, dtype=int) + indexBase
