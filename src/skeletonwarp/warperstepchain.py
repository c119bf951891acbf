"""
Warper step chaining rigid transformations along the skeleton links.
"""

import math
import numpy as np
from skeletonwarp.exceptions import DegenerateSegment
from skeletonwarp.optimization.rigid import rigidAlignNoScale
from skeletonwarp.optimization.utils import normaliseVector, rotationBetweenVectors, rotationFromAxisAngle, transformRigid
from skeletonwarp.warper import Warper, WarperStep, WarpState


class WarperStepChain(WarperStep):

    _jsonTypeId = "_WarperStepChain"

    DEGENERATE_POLICY_IDENTITY = "identity"
    DEGENERATE_POLICY_ERROR = "error"

    def __init__(self, warper : Warper):
        super(WarperStepChain, self).__init__(warper)
        self._degeneratePolicy = self.DEGENERATE_POLICY_IDENTITY
        self._degenerateTolerance = 1.0E-12
        self._degenerateLinks = []

    def decodeSettingsJSONDict(self, dct : dict):
        """
        Decode definition of step from JSON dict.
        """
        assert self._jsonTypeId in dct
        self.setDegeneratePolicy(dct["degeneratePolicy"])
        self.setDegenerateTolerance(dct["degenerateTolerance"])

    def encodeSettingsJSONDict(self) -> dict:
        """
        Encode definition of step in dict.
        :return: Settings in a dict ready for passing to json.dump.
        """
        return {
            self._jsonTypeId : True,
            "degeneratePolicy" : self._degeneratePolicy,
            "degenerateTolerance" : self._degenerateTolerance
            }

    def getDegeneratePolicy(self):
        return self._degeneratePolicy

    def setDegeneratePolicy(self, degeneratePolicy):
        """
        :param degeneratePolicy: Action for links with coincident consecutive skeleton points:
        DEGENERATE_POLICY_IDENTITY to not rotate for that link, DEGENERATE_POLICY_ERROR to raise DegenerateSegment.
        """
        assert degeneratePolicy in (self.DEGENERATE_POLICY_IDENTITY, self.DEGENERATE_POLICY_ERROR), \
            "WarperStepChain:  Invalid degenerate policy " + str(degeneratePolicy)
        self._degeneratePolicy = degeneratePolicy

    def getDegenerateTolerance(self):
        return self._degenerateTolerance

    def setDegenerateTolerance(self, tolerance):
        """
        :param tolerance: Lengths of link directions and rotation axes at or below this are treated as zero.
        """
        assert tolerance > 0.0
        self._degenerateTolerance = tolerance

    def getDegenerateLinks(self):
        """
        :return: Skeleton indexes (0-based) of links found degenerate in the last run.
        """
        return self._degenerateLinks

    def _calculateLinkRotation(self, x, y, index):
        """
        Get rotation turning the bent skeleton link ending at index onto the
        straight skeleton link. Only the in-plane rotation is used since the
        best-fit rotation of a point pair is free to twist about the link.
        :return: Rotation matrix for post-multiplying row points.
        """
        dimension = x.shape[1]
        vx = normaliseVector(x[index] - x[index - 1], self._degenerateTolerance)
        vy = normaliseVector(y[index] - y[index - 1], self._degenerateTolerance)
        if (vx is None) or (vy is None):
            skeletonName = "X" if vx is None else "Y"
            if self._degeneratePolicy == self.DEGENERATE_POLICY_ERROR:
                raise DegenerateSegment(index + self._warper.getIndexBase(), skeletonName)
            self._degenerateLinks.append(index)
            if self.getDiagnosticLevel() > 0:
                print("Chain:  Warning: Coincident points in skeleton " + skeletonName + " at link " +
                      str(index + self._warper.getIndexBase()) + ". Not rotating.")
            return np.identity(dimension)
        if dimension != 3:
            return rotationBetweenVectors(vx, vy, self._degenerateTolerance)
        theta = math.acos(np.clip(np.dot(vy, vx), -1.0, 1.0))
        # order of vy, vx gives rotation of row points from vx to vy
        axis = normaliseVector(np.cross(vy, vx), self._degenerateTolerance)
        if axis is None:
            axis = np.zeros(3)
        if self.getDiagnosticLevel() > 1:
            print("Chain:  Link " + str(index + self._warper.getIndexBase()) + " angle " + str(theta) +
                  " axis " + str(axis.tolist()))
        return rotationFromAxisAngle(axis, theta)

    def run(self, state : WarpState):
        """
        For each remaining skeleton link in order, rotate the bent link parallel
        to the straight link, moving pending query points and the unprocessed
        skeleton with it, then finalise query points of the link's end point.
        """
        assert state.index >= 1, "Chain:  Skeleton not aligned. Run align step first"
        y = self._warper.getTargetSkeleton()
        n = y.shape[0]
        self._degenerateLinks = []
        for index in range(state.index + 1, n):
            # translation of the best-fit pair alignment is kept, its rotation is not
            translation = rigidAlignNoScale(state.x[index - 1:index + 1], y[index - 1:index + 1],
                                            self._degenerateTolerance)[1]
            rotation = self._calculateLinkRotation(state.x, y, index)
            state.yi[state.todo] = transformRigid(state.yi[state.todo], rotation, translation)
            state.x[index:] = transformRigid(state.x[index:], rotation, translation)
            state.todo[state.idx == index] = False
            state.index = index
            if self.getDiagnosticLevel() > 1:
                print("Chain:  Link " + str(index + self._warper.getIndexBase()) + " done, " +
                      str(state.getPendingCount()) + " query points pending")
        if self.getDiagnosticLevel() > 0:
            print("Chain:  Processed " + str(max(0, n - 2)) + " links, " + str(len(self._degenerateLinks)) + " degenerate")
        self.setHasRun(True)
