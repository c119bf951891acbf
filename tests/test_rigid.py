import math
import unittest
import numpy as np
from scipy.spatial.transform import Rotation
from skeletonwarp.exceptions import CardinalityMismatch, DegenerateSegment, DimensionMismatch
from skeletonwarp.optimization.alignment_fitting import assignNearestSkeletonPoints, calculateSkeletonErrors
from skeletonwarp.optimization.rigid import rigidAlignNoScale
from skeletonwarp.optimization.utils import normaliseVector, rotationBetweenVectors, rotationFromAxisAngle, \
    rotationHalfTurn, transformRigid
from skeletonwarp.utils.skeleton_utils import createStraightSkeleton, getSkeletonArcLengths


def assertAlmostEqualList(testcase, actualList, expectedList, delta):
    assert len(actualList) == len(expectedList)
    for actual, expected in zip(actualList, expectedList):
        testcase.assertAlmostEqual(actual, expected, delta=delta)


class RigidAlignTestCase(unittest.TestCase):

    def setUp(self):
        rng = np.random.default_rng(3)
        self.p = rng.uniform(-1.0, 1.0, (8, 3))

    def test_recoverKnownTransformation(self):
        rotation = Rotation.from_euler("zyx", [ math.pi/4.0, math.pi/8.0, math.pi/2.0 ]).as_matrix()
        translation = np.array([ 0.1, -0.2, 0.3 ])
        q = transformRigid(self.p, rotation, translation)
        R, c = rigidAlignNoScale(self.p, q)
        self.assertTrue(np.allclose(R, rotation, atol=1.0E-10))
        assertAlmostEqualList(self, list(c), list(translation), delta=1.0E-10)

    def test_noReflection(self):
        q = self.p * [ -1.0, 1.0, 1.0 ]
        R, c = rigidAlignNoScale(self.p, q)
        self.assertAlmostEqual(np.linalg.det(R), 1.0, delta=1.0E-10)
        self.assertTrue(np.allclose(np.dot(R.T, R), np.identity(3), atol=1.0E-10))

    def test_noScaling(self):
        q = 2.0 * self.p
        R, c = rigidAlignNoScale(self.p, q)
        self.assertTrue(np.allclose(R, np.identity(3), atol=1.0E-10))
        self.assertTrue(np.allclose(c, 2.0 * self.p.mean(0) - self.p.mean(0), atol=1.0E-10))

    def test_pointPair(self):
        p = [[ 0.0, 0.0, 0.0 ], [ 0.0, 2.0, 0.0 ]]
        q = [[ 1.0, 1.0, 1.0 ], [ 1.0, 1.0, 3.0 ]]
        R, c = rigidAlignNoScale(p, q)
        assertAlmostEqualList(self, list(transformRigid(p, R, c)[1]), [ 1.0, 1.0, 3.0 ], delta=1.0E-12)
        # minimal rotation leaves the normal to both directions unchanged
        assertAlmostEqualList(self, list(np.dot([ 1.0, 0.0, 0.0 ], R)), [ 1.0, 0.0, 0.0 ], delta=1.0E-12)

    def test_pointPairCentred(self):
        """
        Pair of different lengths is centred on the target pair.
        """
        p = [[ 0.0, 0.0 ], [ 4.0, 0.0 ]]
        q = [[ 0.0, 0.0 ], [ 0.0, 2.0 ]]
        R, c = rigidAlignNoScale(p, q)
        assertAlmostEqualList(self, list(transformRigid(p, R, c).mean(0)), [ 0.0, 1.0 ], delta=1.0E-12)
        assertAlmostEqualList(self, list(transformRigid(p, R, c)[0]), [ 0.0, -1.0 ], delta=1.0E-12)

    def test_pointPairAntiparallel(self):
        p = [[ 0.0, 0.0 ], [ 1.0, 0.0 ]]
        q = [[ 0.0, 0.0 ], [ -1.0, 0.0 ]]
        R, c = rigidAlignNoScale(p, q)
        self.assertAlmostEqual(np.linalg.det(R), 1.0, delta=1.0E-12)
        self.assertTrue(np.allclose(transformRigid(p, R, c), q, atol=1.0E-12))

    def test_pointPairCoincident(self):
        p = [[ 1.0, 1.0, 1.0 ], [ 1.0, 1.0, 1.0 ]]
        q = [[ 0.0, 0.0, 0.0 ], [ 2.0, 0.0, 0.0 ]]
        R, c = rigidAlignNoScale(p, q)
        self.assertTrue(np.array_equal(R, np.identity(3)))
        assertAlmostEqualList(self, list(c), [ 0.0, -1.0, -1.0 ], delta=1.0E-12)

    def test_singlePoint(self):
        R, c = rigidAlignNoScale([[ 1.0, 2.0, 3.0 ]], [[ 0.0, 0.0, 1.0 ]])
        self.assertTrue(np.array_equal(R, np.identity(3)))
        assertAlmostEqualList(self, list(c), [ -1.0, -2.0, -2.0 ], delta=1.0E-12)

    def test_shapeMismatch(self):
        with self.assertRaises(AssertionError):
            rigidAlignNoScale(self.p, self.p[:3])


class RotationTestCase(unittest.TestCase):

    def test_axisAngle(self):
        R = rotationFromAxisAngle([ 0.0, 0.0, 2.0 ], 0.5*math.pi)
        self.assertTrue(np.allclose(R, [[ 0.0, -1.0, 0.0 ], [ 1.0, 0.0, 0.0 ], [ 0.0, 0.0, 1.0 ]], atol=1.0E-12))

    def test_axisAngleZeroAxis(self):
        self.assertTrue(np.array_equal(rotationFromAxisAngle([ 0.0, 0.0, 0.0 ], 1.0), np.identity(3)))
        with self.assertRaises(AssertionError):
            rotationFromAxisAngle([ 0.0, 1.0 ], 1.0)

    def test_betweenVectorsMatchesAxisAngle(self):
        u = normaliseVector([ 1.0, 2.0, 0.5 ])
        v = normaliseVector([ -0.3, 0.4, 1.0 ])
        theta = math.acos(np.dot(v, u))
        R = rotationBetweenVectors(u, v)
        self.assertTrue(np.allclose(R, rotationFromAxisAngle(np.cross(v, u), theta), atol=1.0E-12))
        assertAlmostEqualList(self, list(np.dot(u, R)), list(v), delta=1.0E-12)

    def test_betweenVectorsHigherDimension(self):
        u = normaliseVector([ 1.0, 0.0, 1.0, 0.0 ])
        v = normaliseVector([ 0.0, 1.0, 0.0, 1.0 ])
        R = rotationBetweenVectors(u, v)
        assertAlmostEqualList(self, list(np.dot(u, R)), list(v), delta=1.0E-12)
        self.assertTrue(np.allclose(np.dot(R, R.T), np.identity(4), atol=1.0E-12))
        self.assertAlmostEqual(np.linalg.det(R), 1.0, delta=1.0E-12)
        # normal to the plane of u and v is unchanged
        n = normaliseVector([ 1.0, 0.0, -1.0, 0.0 ])
        assertAlmostEqualList(self, list(np.dot(n, R)), list(n), delta=1.0E-12)

    def test_betweenParallelVectors(self):
        u = normaliseVector([ 1.0, 1.0, 0.0 ])
        self.assertTrue(np.array_equal(rotationBetweenVectors(u, u), np.identity(3)))
        self.assertTrue(np.array_equal(rotationBetweenVectors(u, -u), np.identity(3)))

    def test_halfTurn(self):
        for u in ([ 1.0, 0.0 ], [ 0.0, 0.6, 0.8 ], [ 0.5, 0.5, 0.5, 0.5 ]):
            u = np.array(u)
            R = rotationHalfTurn(u)
            assertAlmostEqualList(self, list(np.dot(u, R)), list(-u), delta=1.0E-12)
            self.assertAlmostEqual(np.linalg.det(R), 1.0, delta=1.0E-12)

    def test_normaliseVector(self):
        assertAlmostEqualList(self, list(normaliseVector([ 3.0, 4.0 ])), [ 0.6, 0.8 ], delta=1.0E-12)
        self.assertIsNone(normaliseVector([ 0.0, 0.0 ]))
        self.assertIsNone(normaliseVector([ 1.0E-14, 0.0 ], 1.0E-12))


class SkeletonUtilsTestCase(unittest.TestCase):

    def test_arcLengths(self):
        assertAlmostEqualList(self, list(getSkeletonArcLengths([[ 0.0, 0.0 ], [ 3.0, 4.0 ], [ 3.0, 5.0 ]])),
                              [ 0.0, 5.0, 6.0 ], delta=1.0E-12)
        with self.assertRaises(CardinalityMismatch):
            getSkeletonArcLengths([[ 0.0, 0.0 ]])
        with self.assertRaises(DimensionMismatch):
            getSkeletonArcLengths([ 0.0, 1.0 ])

    def test_straightSkeleton(self):
        x = [[ 1.0, 1.0, 0.0 ], [ 1.0, 3.0, 0.0 ], [ 2.0, 3.0, 0.0 ]]
        y = createStraightSkeleton(x)
        self.assertTrue(np.allclose(y, [[ 1.0, 1.0, 0.0 ], [ 1.0, 3.0, 0.0 ], [ 1.0, 4.0, 0.0 ]], atol=1.0E-12))
        y = createStraightSkeleton(x, direction=[ 0.0, 0.0, -2.0 ], origin=[ 0.0, 0.0, 0.0 ])
        self.assertTrue(np.allclose(y, [[ 0.0, 0.0, 0.0 ], [ 0.0, 0.0, -2.0 ], [ 0.0, 0.0, -3.0 ]], atol=1.0E-12))
        with self.assertRaises(DimensionMismatch):
            createStraightSkeleton(x, direction=[ 1.0, 0.0 ])
        with self.assertRaises(DegenerateSegment):
            createStraightSkeleton([[ 0.0, 0.0 ], [ 0.0, 0.0 ], [ 1.0, 0.0 ]])
        with self.assertRaises(ValueError) as context:
            createStraightSkeleton(x, direction=[ 0.0, 0.0, 0.0 ])
        self.assertNotIsInstance(context.exception, DegenerateSegment)

    def test_assignNearest(self):
        x = [[ 0.0, 0.0 ], [ 1.0, 0.0 ], [ 2.0, 0.0 ]]
        xi = [[ 1.9, 0.5 ], [ -0.3, 0.1 ], [ 0.9, -0.2 ]]
        self.assertEqual(list(assignNearestSkeletonPoints(x, xi)), [ 2, 0, 1 ])
        self.assertEqual(list(assignNearestSkeletonPoints(x, xi, indexBase=1)), [ 3, 1, 2 ])
        self.assertEqual(assignNearestSkeletonPoints(x, np.zeros((0, 2))).shape, (0,))

    def test_skeletonErrors(self):
        rms, maxError = calculateSkeletonErrors([[ 0.0, 0.0 ], [ 1.0, 0.0 ]], [[ 0.0, 0.0 ], [ 1.0, 2.0 ]])
        self.assertAlmostEqual(rms, math.sqrt(2.0), delta=1.0E-12)
        self.assertAlmostEqual(maxError, 2.0, delta=1.0E-12)


if __name__ == "__main__":
    unittest.main()
