import numpy as np
import pytest

from convlayout.im2col import im2col_nchw, im2col_nhwc


def _image(c=2, h=4, w=4):
    return np.arange(1, c * h * w + 1, dtype=np.float32).reshape(c, h, w)


def test_nchw_shape():
    col = im2col_nchw(_image(), 3, 3, 0, 1, 2, 2)
    assert col.shape == (18, 4)
    assert col.dtype == np.float32


def test_nhwc_shape():
    hwc = _image().transpose(1, 2, 0)
    col = im2col_nhwc(hwc, 3, 3, 0, 1, 2, 2)
    assert col.shape == (4, 18)


def test_nchw_first_row_is_top_left_of_each_window():
    img = _image()
    col = im2col_nchw(img, 3, 3, 0, 1, 2, 2)
    assert col[0].tolist() == [img[0, 0, 0], img[0, 0, 1], img[0, 1, 0], img[0, 1, 1]]


def test_nchw_spot_values_match_source_positions():
    img = _image()
    col = im2col_nchw(img, 3, 3, 0, 1, 2, 2)
    # row index = c*9 + kh*3 + kw, column index = oh*2 + ow
    assert col[1 * 9 + 2 * 3 + 1, 1 * 2 + 0] == img[1, 1 + 2, 0 + 1]
    assert col[0 * 9 + 1 * 3 + 2, 0 * 2 + 1] == img[0, 0 + 1, 1 + 2]


@pytest.mark.parametrize("padding,stride", [(0, 1), (1, 1), (1, 2), (2, 3)])
def test_layouts_agree(padding, stride):
    img = np.random.default_rng(3).standard_normal((3, 5, 6)).astype(np.float32)
    kn = 3
    out_h = (5 - kn + 2 * padding) // stride + 1
    out_w = (6 - kn + 2 * padding) // stride + 1
    nchw = im2col_nchw(img, kn, kn, padding, stride, out_h, out_w)
    nhwc = im2col_nhwc(img.transpose(1, 2, 0), kn, kn, padding, stride, out_h, out_w)
    reordered = nchw.reshape(3, kn, kn, out_h * out_w).transpose(3, 1, 2, 0).reshape(out_h * out_w, -1)
    np.testing.assert_array_equal(nhwc, reordered)


def test_kernel_covering_whole_image_gives_flat_column():
    img = _image(3, 4, 5)
    np.testing.assert_array_equal(im2col_nchw(img, 4, 5, 0, 1, 1, 1), img.reshape(-1, 1))
    hwc = img.transpose(1, 2, 0)
    np.testing.assert_array_equal(im2col_nhwc(hwc, 4, 5, 0, 1, 1, 1), hwc.reshape(1, -1))


def test_one_by_one_kernel_is_identity_reshape():
    img = _image(2, 3, 4)
    np.testing.assert_array_equal(im2col_nchw(img, 1, 1, 0, 1, 3, 4), img.reshape(2, 12))
    hwc = img.transpose(1, 2, 0)
    np.testing.assert_array_equal(im2col_nhwc(hwc, 1, 1, 0, 1, 3, 4), hwc.reshape(12, 2))


def test_one_by_one_kernel_with_stride_subsamples():
    img = _image(2, 6, 6)
    col = im2col_nchw(img, 1, 1, 0, 2, 3, 3)
    np.testing.assert_array_equal(col, img[:, ::2, ::2].reshape(2, 9))


def test_padding_produces_zero_border():
    img = _image()
    col = im2col_nchw(img, 3, 3, 1, 1, 4, 4)
    # kernel top-left tap at output (0, 0) reads position (-1, -1)
    assert col[0, 0] == 0.0
    # kernel centre tap reproduces the image itself
    np.testing.assert_array_equal(col[4], img[0].reshape(-1))


def test_positions_beyond_image_read_zero():
    img = _image()
    # stride 2 with the unstrided output size walks past the bottom edge
    col = im2col_nchw(img, 3, 3, 0, 2, 2, 2)
    cube = col.reshape(2, 3, 3, 2, 2)
    assert not cube[:, 2, :, 1, :].any()
    assert cube[0, 0, 0, 1, 1] == img[0, 2, 2]


def test_nhwc_padding_zeroes_whole_channel_block():
    hwc = _image().transpose(1, 2, 0)
    col = im2col_nhwc(hwc, 3, 3, 1, 1, 4, 4)
    assert not col[0, :2].any()
    np.testing.assert_array_equal(col[0, 8:10], hwc[0, 0])


def test_zero_output_size_gives_empty_matrix():
    assert im2col_nchw(_image(), 3, 3, 0, 1, 0, 0).shape == (18, 0)


@pytest.mark.parametrize(
    "args",
    [(0, 3, 0, 1, 2, 2), (3, 3, 0, 0, 2, 2), (3, 3, -1, 1, 2, 2), (3, 3, 0, 1, -1, 2)],
)
def test_invalid_parameters(args):
    with pytest.raises(ValueError):
        im2col_nchw(_image(), *args)
    with pytest.raises(ValueError):
        im2col_nhwc(_image(), *args)


def test_rejects_non_3d_image():
    with pytest.raises(ValueError):
        im2col_nchw(np.zeros((4, 4)), 3, 3, 0, 1, 2, 2)
    with pytest.raises(ValueError):
        im2col_nhwc(np.zeros((1, 4, 4, 2)), 3, 3, 0, 1, 2, 2)