"""
Exceptions raised by skeletonwarp.
"""


class SkeletonWarpException(Exception):
    """
    Base exception for all exceptions in skeletonwarp.
    """
    pass


class DimensionMismatch(SkeletonWarpException, ValueError):
    """
    Raised when skeleton and query points do not share the same spatial dimension.
    """
    pass


class CardinalityMismatch(SkeletonWarpException, ValueError):
    """
    Raised when X and Y differ in number of points, or IDX has not one entry per query point.
    """
    pass


class AssignmentOutOfRange(CardinalityMismatch):
    """
    Raised when a neighbourhood assignment does not name a skeleton point.
    """
    pass


class DegenerateSegment(SkeletonWarpException, ArithmeticError):

    def __init__(self, index, skeletonName):
        self.index = index
        self.skeletonName = skeletonName
        super().__init__("Skeleton " + skeletonName + " has coincident points at index " + str(index - 1) +
                         " and " + str(index) + ": link direction is undefined")
