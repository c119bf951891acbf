import numpy as np

from .utils import normaliseVector, rotationBetweenVectors, rotationHalfTurn


def rigidAlignNoScale(p, q, tolerance=1.0E-12):
    """
    Best-fit rigid transformation (rotation and translation, no scaling or
    reflection) taking points p onto corresponding points q, minimising the
    sum of squared distances. Points are rows: p.R + c ~= q.

    With 3 or more points the rotation is found from the SVD of the
    cross-covariance matrix. A pair of points leaves the rotation about the
    line joining them undetermined, so the minimal rotation turning the
    direction of p onto the direction of q is used. A single point gives a
    pure translation.

    :param p: Source points array of shape (n, D).
    :param q: Target points array of shape (n, D).
    :param tolerance: Length at or below which a pair direction is treated as zero.
    :return: rotation R (D x D), translation c (D)
    """
    p = np.asarray(p, dtype=float)
    q = np.asarray(q, dtype=float)
    assert p.shape == q.shape, "rigidAlignNoScale:  Point arrays must have the same shape"
    N, dimension = p.shape
    assert N > 0, "rigidAlignNoScale:  No points to align"

    centroidP = p.mean(0)
    centroidQ = q.mean(0)

    if N > 2:
        H = np.dot((p - centroidP).T, q - centroidQ)
        U, S, Vt = np.linalg.svd(H)
        d = np.ones(dimension)
        if np.linalg.det(np.dot(U, Vt)) < 0.0:
            d[-1] = -1.0
        R = np.dot(U * d, Vt)

    elif N == 2:
        dp = normaliseVector(p[1] - p[0], tolerance)
        dq = normaliseVector(q[1] - q[0], tolerance)
        if (dp is None) or (dq is None):
            R = np.identity(dimension)
        elif normaliseVector(dq - np.dot(dp, dq) * dp, tolerance) is None and np.dot(dp, dq) < 0.0:
            R = rotationHalfTurn(dp)
        else:
            R = rotationBetweenVectors(dp, dq, tolerance)

    else:
        R = np.identity(dimension)

    c = centroidQ - np.dot(centroidP, R)
    return R, c
