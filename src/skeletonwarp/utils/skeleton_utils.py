import numpy as np
from skeletonwarp.exceptions import CardinalityMismatch, DimensionMismatch, DegenerateSegment


def _getSkeletonArray(x):
    x = np.asarray(x, dtype=float)
    if x.ndim != 2:
        raise DimensionMismatch("Skeleton must be a 2-D array with one point per row")
    if x.shape[0] < 2:
        raise CardinalityMismatch("Skeleton must have at least 2 points")
    return x


def getSkeletonArcLengths(x):
    """
    :param x: Skeleton points in path order, shape (n, D).
    :return: Array of n cumulative distances along the skeleton, starting at 0.
    """
    x = _getSkeletonArray(x)
    segmentLengths = np.linalg.norm(np.diff(x, axis=0), axis=1)
    return np.concatenate(([0.0], np.cumsum(segmentLengths)))


def createStraightSkeleton(x, direction=None, origin=None):
    """
    Make a straight skeleton with the same link lengths as x, for use as the
    target of a straightening warp.

    :param x: Bent skeleton points in path order, shape (n, D).
    :param direction: Direction of straight skeleton. Default is the first link of x.
    :param origin: Position of first straight skeleton point. Default is x[0].
    :return: Straight skeleton points, same shape as x.
    """
    x = _getSkeletonArray(x)
    dimension = x.shape[1]
    defaultDirection = direction is None
    if defaultDirection:
        direction = x[1] - x[0]
    direction = np.asarray(direction, dtype=float)
    if direction.shape != (dimension,):
        raise DimensionMismatch("Direction must have " + str(dimension) + " components")
    magnitude = np.linalg.norm(direction)
    if magnitude == 0.0:
        if defaultDirection:
            raise DegenerateSegment(1, "X")
        raise ValueError("Straight skeleton direction must not be zero")
    origin = x[0] if origin is None else np.asarray(origin, dtype=float)
    if origin.shape != (dimension,):
        raise DimensionMismatch("Origin must have " + str(dimension) + " components")
    arcLengths = getSkeletonArcLengths(x)
    return origin + np.outer(arcLengths, direction / magnitude)
