"""
Locally rigid warp of points along a skeleton, e.g. to straighten a bent artery.

The warp is not diffeomorphic and in general folds (warped points may overlap),
but distances within each skeleton neighbourhood are kept, and it does not
suffer from the collinearity limitations of spline or affine warps.
"""

from skeletonwarp.warper import Warper
from skeletonwarp.warperstepalign import WarperStepAlign
from skeletonwarp.warperstepchain import WarperStepChain


def decodeJSONWarperSteps(warper, dct):
    """
    Function for passing as decoder to json.loads object_hook.
    Constructs warper steps from their json object encoding.
    :param warper: Owning Warper object.
    :param dct: Dictionary to decode.
    :return: WarperStep object, or dct if not a warper step.
    """
    for WarperStepType in [ WarperStepAlign, WarperStepChain ]:
        if WarperStepType.getJsonTypeId() in dct:
            warperStep = WarperStepType(warper)
            warperStep.decodeSettingsJSONDict(dct)
            return warperStep
    return dct


def createLocalRigidWarper(x, y, indexBase=0, degeneratePolicy=WarperStepChain.DEGENERATE_POLICY_IDENTITY,
                           diagnosticLevel=0):
    """
    Create Warper with align and chain steps mapping skeleton x onto y.
    :param x: Bent skeleton points, one per row.
    :param y: Straight skeleton points, same shape as x.
    :param indexBase: 0 or 1, numbering of skeleton points in neighbourhood assignments.
    :param degeneratePolicy: See WarperStepChain.setDegeneratePolicy.
    :param diagnosticLevel: See Warper.setDiagnosticLevel.
    :return: Warper
    """
    warper = Warper(x, y)
    warper.setIndexBase(indexBase)
    warper.setDiagnosticLevel(diagnosticLevel)
    WarperStepAlign(warper)
    chain = WarperStepChain(warper)
    chain.setDegeneratePolicy(degeneratePolicy)
    return warper


def localRigidTransform(x, y, xi, idx, indexBase=0, degeneratePolicy=WarperStepChain.DEGENERATE_POLICY_IDENTITY):
    """
    Non-rigid transformation that is locally rigid between two sets of points
    with known correspondence.

    :param x: Bent skeleton points, shape (n, D); the warp maps x[i] -> y[i].
    :param y: Straight skeleton points, same shape as x.
    :param xi: Points to transform, shape (N, D).
    :param idx: One skeleton index per point in xi, defining local neighbourhoods:
    idx[3] == 7 means xi[3] belongs to the neighbourhood of x[7] (with indexBase 0).
    :param indexBase: 0 or 1, numbering of skeleton points in idx.
    :param degeneratePolicy: See WarperStepChain.setDegeneratePolicy.
    :return: Transformed points yi, same shape as xi.
    """
    warper = createLocalRigidWarper(x, y, indexBase, degeneratePolicy)
    return warper.transform(xi, idx)
