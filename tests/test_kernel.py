"""Tests for kernel module."""

import warnings

import numpy as np

from thinplatesplines import basis, cross_kernel, kernel_matrix


class TestBasis:
    def test_basis_zero_is_exactly_zero(self):
        assert basis(0.0) == 0.0

    def test_basis_zero_raises_no_warning(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            out = basis(np.array([0.0, 0.0, 1.0]))

        np.testing.assert_array_equal(out, [0.0, 0.0, 0.0])

    def test_basis_below_epsilon_is_zero(self):
        tiny = np.finfo(np.float64).eps / 2
        assert basis(tiny) == 0.0

    def test_basis_values(self):
        r = np.array([0.5, 1.0, 2.0, 3.0])
        expected = r**2 * np.log(r)

        np.testing.assert_allclose(basis(r), expected)

    def test_basis_preserves_shape(self):
        r = np.abs(np.random.default_rng(1).normal(size=(4, 5)))

        assert basis(r).shape == (4, 5)

    def test_basis_integer_input(self):
        np.testing.assert_allclose(basis([0, 2]), [0.0, 4.0 * np.log(2.0)])


class TestKernelMatrix:
    def test_kernel_matrix_triangle(self):
        points = np.array([[0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])
        phi = kernel_matrix(points)

        # |x0 - x1| = sqrt(2), U(sqrt(2)) = ln(2); other pairs are unit distance
        expected = np.array(
            [[0.0, np.log(2.0), 0.0], [np.log(2.0), 0.0, 0.0], [0.0, 0.0, 0.0]]
        )
        np.testing.assert_allclose(phi, expected, atol=1e-12)

    def test_kernel_matrix_symmetric_zero_diagonal(self):
        points = np.random.default_rng(2).normal(size=(12, 3))
        phi = kernel_matrix(points)

        assert phi.shape == (12, 12)
        np.testing.assert_array_equal(phi, phi.T)
        np.testing.assert_array_equal(np.diag(phi), np.zeros(12))

    def test_kernel_matrix_repeated_point(self):
        points = np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 1.0]])
        phi = kernel_matrix(points)

        assert np.all(np.isfinite(phi))
        assert phi[0, 1] == 0.0


class TestCrossKernel:
    def test_cross_kernel_shape(self):
        rng = np.random.default_rng(3)
        query = rng.normal(size=(7, 2))
        points = rng.normal(size=(4, 2))

        assert cross_kernel(query, points).shape == (7, 4)

    def test_cross_kernel_matches_kernel_matrix(self):
        points = np.random.default_rng(4).normal(size=(6, 4))

        np.testing.assert_allclose(cross_kernel(points, points), kernel_matrix(points))

    def test_cross_kernel_values(self):
        query = np.array([[0.0, 0.0]])
        points = np.array([[3.0, 4.0], [0.0, 0.0]])

        np.testing.assert_allclose(
            cross_kernel(query, points), [[25.0 * np.log(5.0), 0.0]]
        )
