"""
Warper step for initial rigid alignment of the first skeleton link.
"""

import numpy as np
from skeletonwarp.optimization.rigid import rigidAlignNoScale
from skeletonwarp.optimization.utils import transformRigid
from skeletonwarp.warper import Warper, WarperStep, WarpState


class WarperStepAlign(WarperStep):

    _jsonTypeId = "_WarperStepAlign"

    def __init__(self, warper : Warper):
        super(WarperStepAlign, self).__init__(warper)
        dimension = warper.getDimension()
        self._rotation = np.identity(dimension)
        self._translation = np.zeros(dimension)

    def getRotation(self):
        """
        :return: Rotation matrix from the last run, for post-multiplying row points.
        """
        return self._rotation

    def getTranslation(self):
        return self._translation

    def run(self, state : WarpState):
        """
        Rigidly align the first 2 skeleton points onto the straight skeleton,
        moving all skeleton and query points with them. Query points in the
        neighbourhoods of the first 2 skeleton points are then final.
        """
        y = self._warper.getTargetSkeleton()
        self._rotation, self._translation = rigidAlignNoScale(state.x[0:2], y[0:2])
        state.yi = transformRigid(state.yi, self._rotation, self._translation)
        state.x = transformRigid(state.x, self._rotation, self._translation)
        state.todo = ~((state.idx == 0) | (state.idx == 1))
        state.index = 1
        if self.getDiagnosticLevel() > 0:
            print("Align:  Aligned first skeleton link. Translation " + str(self._translation.tolist()) +
                  ", " + str(state.getPendingCount()) + " of " + str(state.idx.shape[0]) + " query points pending")
        self.setHasRun(True)
