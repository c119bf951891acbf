import numpy as np
from scipy.spatial.transform import Rotation


def normaliseVector(v, tolerance=0.0):
    """
    Scale a vector to unit length.

    :param v: Vector of any dimension.
    :param tolerance: Magnitude at or below which the vector is treated as zero.
    :return: Unit vector, or None if magnitude of v is not greater than tolerance.
    """
    v = np.asarray(v, dtype=float)
    magnitude = np.linalg.norm(v)
    if not (magnitude > tolerance):
        return None
    return v / magnitude


def transformRigid(x, R, c):
    """
    Performs a rigid transformation to a list of points stored as rows.
    Rotates first then translates: x.R + c.

    :param x: Points array of shape (n, D).
    :param R: D x D rotation matrix for post-multiplying row points.
    :param c: Translation of D components.
    :return: Transformed points array of shape (n, D).
    """
    return np.dot(x, R) + c


def rotationFromAxisAngle(axis, angle):
    """
    Get 3-D rotation matrix for angle about axis, suitable for pre-multiplying
    column vectors. Post-multiplying row points by it rotates them by -angle
    about axis.

    :param axis: 3 component rotation axis. Zero axis gives the identity.
    :param angle: Angle in radians.
    :return: 3 x 3 rotation matrix.
    """
    axis = np.asarray(axis, dtype=float)
    assert axis.shape == (3,), "rotationFromAxisAngle:  Axis must have 3 components"
    unitAxis = normaliseVector(axis)
    if unitAxis is None:
        return np.identity(3)
    return Rotation.from_rotvec(unitAxis * angle).as_matrix()


def rotationBetweenVectors(u, v, tolerance=1.0E-12):
    """
    Get rotation in the plane of unit vectors u and v which turns u onto v,
    leaving the orthogonal complement of the plane unchanged. Works in any
    dimension >= 2. In 3-D equals rotationFromAxisAngle(cross(v, u), angle).

    :param u: Unit vector to rotate from.
    :param v: Unit vector to rotate to.
    :param tolerance: If the component of v normal to u is not greater than this
    the vectors are parallel or antiparallel and the identity is returned.
    :return: D x D rotation matrix for post-multiplying row points.
    """
    u = np.asarray(u, dtype=float)
    v = np.asarray(v, dtype=float)
    dimension = u.shape[0]
    cosTheta = np.clip(np.dot(u, v), -1.0, 1.0)
    w = normaliseVector(v - cosTheta * u, tolerance)
    if w is None:
        return np.identity(dimension)
    sinTheta = np.sqrt(1.0 - cosTheta * cosTheta)
    return np.identity(dimension) + sinTheta * (np.outer(u, w) - np.outer(w, u)) + \
        (cosTheta - 1.0) * (np.outer(u, u) + np.outer(w, w))


def rotationHalfTurn(u):
    """
    Get rotation by pi in a plane containing unit vector u, turning u onto -u.

    :param u: Unit vector of dimension >= 2.
    :return: D x D rotation matrix for post-multiplying row points.
    """
    u = np.asarray(u, dtype=float)
    dimension = u.shape[0]
    # perpendicular from the coordinate axis least aligned with u
    e = np.zeros(dimension)
    e[np.argmin(np.abs(u))] = 1.0
    w = normaliseVector(e - np.dot(e, u) * u)
    return np.identity(dimension) - 2.0 * (np.outer(u, u) + np.outer(w, w))
