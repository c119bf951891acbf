"""
Main class for warping points with a locally rigid skeleton transformation.
"""

import json
import numpy as np
from skeletonwarp.exceptions import AssignmentOutOfRange, CardinalityMismatch, DimensionMismatch
from skeletonwarp.optimization.alignment_fitting import calculateSkeletonErrors


class WarpState:
    """
    Working arrays for a single transform call, threaded through the warper steps.
    """

    def __init__(self, x, yi, idx):
        """
        :param x: Working copy of skeleton points, shape (n, D). Updated as links are processed.
        :param yi: Working copy of query points, shape (N, D). Updated until each point is finalised.
        :param idx: 0-based skeleton index of the neighbourhood of each query point.
        """
        self.x = x
        self.yi = yi
        self.idx = idx
        # True for query points still to be transformed by later links
        self.todo = np.ones(idx.shape[0], dtype=bool)
        # last skeleton index whose link has been processed, -1 before alignment
        self.index = -1

    def getPendingCount(self):
        return int(np.count_nonzero(self.todo))


class Warper:

    def __init__(self, x, y):
        """
        :param x: Bent skeleton points, shape (n, D), ordered along the skeleton path.
        :param y: Straight skeleton points, same shape as x. Warp maps x[i] -> y[i].
        """
        x = np.array(x, dtype=float)
        y = np.array(y, dtype=float)
        if (x.ndim != 2) or (y.ndim != 2):
            raise DimensionMismatch("X and Y must be 2-D arrays with one point per row")
        if x.shape[1] != y.shape[1]:
            raise DimensionMismatch("Points in X and Y must have the same dimension (number of columns): " +
                                    str(x.shape[1]) + " != " + str(y.shape[1]))
        if x.shape[1] < 2:
            raise DimensionMismatch("Points must have at least 2 dimensions")
        if x.shape[0] != y.shape[0]:
            raise CardinalityMismatch("X and Y must have the same number of points (rows): " +
                                      str(x.shape[0]) + " != " + str(y.shape[0]))
        if x.shape[0] < 2:
            raise CardinalityMismatch("X and Y must have at least 2 points")
        self._x = x
        self._y = y
        self._indexBase = 0
        self._diagnosticLevel = 0
        self._warperSteps = []
        self._warpedSkeleton = None

    def decodeSettingsJSON(self, s : str, decoder):
        """
        Define Warper settings from JSON serialisation output by encodeSettingsJSON.
        :param s: String of JSON encoded Warper settings.
        :param decoder: decodeJSONWarperSteps(warper, dct) for decoding WarperSteps.
        """
        self._warperSteps.clear()
        dct = json.loads(s, object_hook=lambda dct: decoder(self, dct))
        self.setIndexBase(dct["indexBase"])
        self.setDiagnosticLevel(dct["diagnosticLevel"])
        # self._warperSteps will already be populated by decoder

    def encodeSettingsJSON(self) -> str:
        """
        :return: String JSON encoding of Warper settings.
        """
        dct = {
            "indexBase" : self._indexBase,
            "diagnosticLevel" : self._diagnosticLevel,
            "warperSteps" : [ warperStep.encodeSettingsJSONDict() for warperStep in self._warperSteps ]
            }
        return json.dumps(dct, sort_keys=False, indent=4)

    def _addWarperStep(self, warperStep):
        self._warperSteps.append(warperStep)

    def _removeWarperStep(self, warperStep):
        self._warperSteps.remove(warperStep)

    def getWarperSteps(self):
        return self._warperSteps

    def getSkeleton(self):
        """
        :return: Copy of the bent skeleton points X.
        """
        return self._x.copy()

    def getTargetSkeleton(self):
        """
        :return: Copy of the straight skeleton points Y.
        """
        return self._y.copy()

    def getNumberOfSkeletonPoints(self):
        return self._x.shape[0]

    def getDimension(self):
        return self._x.shape[1]

    def getIndexBase(self):
        return self._indexBase

    def setIndexBase(self, indexBase):
        """
        :param indexBase: 0 if neighbourhood assignments number skeleton points from 0, 1 if from 1.
        """
        assert indexBase in (0, 1), "Warper:  Invalid index base " + str(indexBase)
        self._indexBase = indexBase

    def getDiagnosticLevel(self):
        return self._diagnosticLevel

    def setDiagnosticLevel(self, diagnosticLevel):
        """
        :param diagnosticLevel: 0 = no diagnostic messages. 1 = Information and warning messages. 2 = Also per-link reports.
        """
        assert diagnosticLevel >= 0
        self._diagnosticLevel = diagnosticLevel

    def getWarpedSkeleton(self):
        """
        :return: Skeleton points X as moved by the last transform, or None if not run.
        """
        return self._warpedSkeleton

    def _validateQueryPoints(self, xi, idx):
        """
        Check query points and neighbourhood assignments against the skeleton.
        :return: xi as float array of shape (N, D), idx as 0-based integer array.
        """
        dimension = self.getDimension()
        xi = np.array(xi, dtype=float)
        if (xi.ndim == 1) and (xi.size == 0):
            xi = xi.reshape((0, dimension))
        if xi.ndim != 2:
            raise DimensionMismatch("XI must be a 2-D array with one point per row")
        if xi.shape[1] != dimension:
            raise DimensionMismatch("Points in X, Y and XI must have the same dimension (number of columns): " +
                                    str(xi.shape[1]) + " != " + str(dimension))
        idx = np.asarray(idx)
        if idx.size == 0:
            idx = idx.reshape((0,))
        if idx.ndim != 1:
            raise CardinalityMismatch("IDX must be a vector")
        if idx.shape[0] != xi.shape[0]:
            raise CardinalityMismatch("IDX must have one element per point in XI (per row): " +
                                      str(idx.shape[0]) + " != " + str(xi.shape[0]))
        if idx.dtype.kind == 'f':
            if not np.all(np.isfinite(idx) & (idx == np.round(idx))):
                raise AssignmentOutOfRange("IDX must contain whole numbers")
        elif (idx.dtype.kind not in 'iu') and (idx.size > 0):
            raise AssignmentOutOfRange("IDX must contain integer skeleton indexes")
        idx = idx.astype(int) - self._indexBase
        outOfRange = (idx < 0) | (idx >= self.getNumberOfSkeletonPoints())
        if np.any(outOfRange):
            first = int(np.flatnonzero(outOfRange)[0])
            raise AssignmentOutOfRange("IDX[" + str(first) + "] = " + str(idx[first] + self._indexBase) +
                                       " is not a skeleton point index in [" + str(self._indexBase) + ", " +
                                       str(self.getNumberOfSkeletonPoints() - 1 + self._indexBase) + "]")
        return xi, idx

    def transform(self, xi, idx, outputErrors=False):
        """
        Warp query points by running all warper steps in order.
        :param xi: Query points, shape (N, D).
        :param idx: Skeleton index of the neighbourhood of each query point, using the index base.
        :param outputErrors: Set to True to also return errors of the warped skeleton against Y.
        :return: yi with the same shape as xi, or (yi, (rmsError, maxError)) if outputErrors.
        """
        xi, idx = self._validateQueryPoints(xi, idx)
        assert self._warperSteps, "Warper:  No warper steps to run"
        state = WarpState(self._x.copy(), xi.copy(), idx)
        for warperStep in self._warperSteps:
            warperStep.run(state)
        pendingCount = state.getPendingCount()
        if (pendingCount > 0) and (self._diagnosticLevel > 0):
            print("Warning: " + str(pendingCount) + " of " + str(idx.shape[0]) +
                  " query points were not finalised by any warper step")
        self._warpedSkeleton = state.x
        if outputErrors or (self._diagnosticLevel > 0):
            errors = calculateSkeletonErrors(state.x, self._y)
            if self._diagnosticLevel > 0:
                print("Transform:  Warped skeleton RMS error " + str(errors[0]) + ", max error " + str(errors[1]))
            if outputErrors:
                return state.yi, errors
        return state.yi


class WarperStep:
    """
    Base class for warper steps.
    """

    _jsonTypeId = "_WarperStep"

    def __init__(self, warper : Warper):
        """
        Construct and add to Warper.
        """
        self._warper = warper
        warper._addWarperStep(self)
        self._hasRun = False

    @classmethod
    def getJsonTypeId(cls):
        return cls._jsonTypeId

    def decodeSettingsJSONDict(self, dct : dict):
        """
        Decode definition of step from JSON dict.
        """
        assert self._jsonTypeId in dct

    def encodeSettingsJSONDict(self) -> dict:
        """
        Encode definition of step in dict.
        :return: Settings in a dict ready for passing to json.dump.
        """
        return { self._jsonTypeId : True }

    def destroy(self):
        """
        Remove from Warper.
        """
        self._warper._removeWarperStep(self)
        self._warper = None

    def getWarper(self):
        return self._warper

    def hasRun(self):
        return self._hasRun

    def setHasRun(self, hasRun):
        self._hasRun = hasRun

    def getDiagnosticLevel(self):
        return self._warper.getDiagnosticLevel()

    def run(self, state : WarpState):
        """
        Override to perform action of derived WarperStep on state.
        """
        pass
