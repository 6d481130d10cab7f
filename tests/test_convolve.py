import pytest

from pngkernel.convolve import apply_convolution, apply_kernel_steps
from pngkernel.image import Kernel


def _uniform(value, height=5, width=5):
    return [bytes([value] * width) for _ in range(height)]


def _vertical_edge(height=5, width=6):
    half = width // 2
    return [bytes([0] * half + [255] * (width - half)) for _ in range(height)]


def _gradient(height=5, width=5):
    return [bytes((x * 20 + y * 7) % 256 for x in range(width)) for y in range(height)]


def _border(plane):
    top = list(plane[0])
    bottom = list(plane[-1])
    left = [row[0] for row in plane]
    right = [row[-1] for row in plane]
    return top, bottom, left, right


@pytest.mark.parametrize("kernel", list(Kernel))
def test_borders_are_copied_from_input(kernel):
    plane = _gradient()
    result = apply_convolution(plane, kernel)
    assert _border(result) == _border(plane)


@pytest.mark.parametrize("kernel", list(Kernel))
def test_output_has_input_shape(kernel):
    plane = _gradient(4, 7)
    result = apply_convolution(plane, kernel)
    assert [len(row) for row in result] == [7, 7, 7, 7]


def test_none_kernel_copies_input():
    plane = _gradient()
    result = apply_convolution(plane, Kernel.NONE)
    assert [bytes(row) for row in result] == plane


def test_unknown_kernel_value_copies_input():
    plane = _gradient()
    result = apply_convolution(plane, 42)
    assert [bytes(row) for row in result] == plane


def test_input_is_not_mutated():
    plane = [bytearray(row) for row in _gradient()]
    before = [bytes(row) for row in plane]
    apply_convolution(plane, Kernel.SHARPEN)
    assert [bytes(row) for row in plane] == before


@pytest.mark.parametrize(
    "kernel", [Kernel.SOBEL_X, Kernel.SOBEL_Y, Kernel.SOBEL_COMBINED, Kernel.LAPLACIAN]
)
def test_edge_kernels_give_zero_on_flat_image(kernel):
    result = apply_convolution(_uniform(120), kernel)
    interior = [row[1:-1] for row in result[1:-1]]
    assert all(value == 0 for row in interior for value in row)


@pytest.mark.parametrize("kernel", [Kernel.GAUSSIAN, Kernel.SHARPEN])
def test_smoothing_and_sharpen_keep_flat_image(kernel):
    plane = _uniform(120)
    result = apply_convolution(plane, kernel)
    assert [bytes(row) for row in result] == plane


def test_blur_stays_within_input_range():
    plane = _gradient()
    low = min(min(row) for row in plane)
    high = max(max(row) for row in plane)
    result = apply_convolution(plane, Kernel.BLUR)
    assert all(low <= value <= high for row in result for value in row)


def test_sobel_x_clamps_rising_edge_to_white():
    result = apply_convolution(_vertical_edge(), Kernel.SOBEL_X)
    assert result[2][2] == 255
    assert result[2][3] == 255


def test_sobel_x_clamps_falling_edge_to_black():
    plane = [bytes(reversed(row)) for row in _vertical_edge()]
    result = apply_convolution(plane, Kernel.SOBEL_X)
    assert result[2][2] == 0
    assert result[2][3] == 0


def test_sobel_combined_detects_edge_in_either_direction():
    plane = _vertical_edge()
    mirrored = [bytes(reversed(row)) for row in plane]
    forward = apply_convolution(plane, Kernel.SOBEL_COMBINED)
    backward = apply_convolution(mirrored, Kernel.SOBEL_COMBINED)
    assert forward[2][2] == 255
    assert backward[2][3] == 255


def test_sobel_y_is_sobel_x_of_transposed_image():
    plane = _gradient(6, 6)
    transposed = [bytes(col) for col in zip(*plane)]
    by_y = apply_convolution(plane, Kernel.SOBEL_Y)
    by_x = apply_convolution(transposed, Kernel.SOBEL_X)
    assert [bytes(col) for col in zip(*by_x)] == [bytes(row) for row in by_y]


@pytest.mark.parametrize("kernel", list(Kernel))
def test_tiny_images_are_unchanged(kernel):
    plane = [bytes([10, 200]), bytes([30, 40])]
    result = apply_convolution(plane, kernel)
    assert [bytes(row) for row in result] == plane


def test_empty_plane_gives_empty_result():
    assert apply_convolution([], Kernel.BLUR) == []


def test_ragged_plane_is_rejected():
    with pytest.raises(ValueError):
        apply_convolution([b"\x00\x01\x02", b"\x00\x01"], Kernel.BLUR)


def test_steps_match_repeated_convolution():
    plane = _gradient(6, 6)
    twice = apply_convolution(apply_convolution(plane, Kernel.GAUSSIAN), Kernel.GAUSSIAN)
    assert apply_kernel_steps(plane, Kernel.GAUSSIAN, 2) == twice


def test_single_step_matches_one_convolution():
    plane = _gradient()
    assert apply_kernel_steps(plane, Kernel.LAPLACIAN, 1) == apply_convolution(
        plane, Kernel.LAPLACIAN
    )


def test_zero_steps_copy_input():
    plane = _gradient()
    result = apply_kernel_steps(plane, Kernel.BLUR, 0)
    assert [bytes(row) for row in result] == plane


def test_negative_steps_are_rejected():
    with pytest.raises(ValueError):
        apply_kernel_steps(_gradient(), Kernel.BLUR, -1)


def test_more_blur_steps_reduce_spread():
    plane = _vertical_edge(7, 8)
    once = apply_kernel_steps(plane, Kernel.BLUR, 1)
    many = apply_kernel_steps(plane, Kernel.BLUR, 4)
    spread_once = max(once[3][1:-1]) - min(once[3][1:-1])
    spread_many = max(many[3][1:-1]) - min(many[3][1:-1])
    assert spread_many <= spread_once