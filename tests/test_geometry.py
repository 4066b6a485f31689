import pytest

from emotionapi.domain.geometry import (
    CoordinateMapper,
    compute_bounding_region,
    placeholder_region,
)
from emotionapi.domain.models import BoundingRegion, Landmark


@pytest.fixture
def region():
    return BoundingRegion(left=100, top=50, right=300, bottom=250)


def test_mirrored_region_at_half_scale(region):
    mapped = CoordinateMapper().map(region, [], 640, 480, 320, 240)

    assert mapped.region == BoundingRegion(left=170.0, top=25.0, right=270.0, bottom=125.0)
    assert mapped.points == []
    assert (mapped.target_width, mapped.target_height) == (320, 240)


def test_unmirrored_region(region):
    mapped = CoordinateMapper(mirror=False).map(region, [], 640, 480, 320, 240)

    assert mapped.region == BoundingRegion(left=50.0, top=25.0, right=150.0, bottom=125.0)


def test_landmarks_are_mirrored_in_x_only(region):
    landmarks = [Landmark(0.25, 0.5, 0.1), Landmark(1.0, 0.0), Landmark(0.0, 1.0)]

    mapped = CoordinateMapper().map(region, landmarks, 640, 480, 320, 240)

    assert mapped.points == [(240.0, 120.0), (0.0, 0.0), (320.0, 240.0)]


def test_landmarks_ignore_source_size(region):
    # Landmarks are normalized, only the target size matters
    landmarks = [Landmark(0.5, 0.5)]

    small = CoordinateMapper().map(region, landmarks, 640, 480, 100, 200)
    large = CoordinateMapper().map(region, landmarks, 1920, 1080, 100, 200)

    assert small.points == large.points == [(50.0, 100.0)]


def test_no_region_renders_nothing():
    assert CoordinateMapper().map(None, [Landmark(0.5, 0.5)], 640, 480, 320, 240) is None


@pytest.mark.parametrize("dims", [
    (0, 480, 320, 240),
    (640, 0, 320, 240),
    (640, 480, 0, 240),
    (640, 480, 320, -1),
])
def test_degenerate_dimensions_render_nothing(region, dims):
    assert CoordinateMapper().map(region, [], *dims) is None


def test_bounding_region_is_padded():
    landmarks = [Landmark(0.25, 0.25), Landmark(0.75, 0.75), Landmark(0.5, 0.4)]

    region = compute_bounding_region(landmarks, 400, 200)

    # extent x 100..300 (pad 20), y 50..150 (pad 10)
    assert region.left == pytest.approx(80.0)
    assert region.right == pytest.approx(320.0)
    assert region.top == pytest.approx(40.0)
    assert region.bottom == pytest.approx(160.0)


def test_bounding_region_is_clamped_to_image():
    landmarks = [Landmark(0.0, 0.05), Landmark(1.0, 0.98)]

    region = compute_bounding_region(landmarks, 100, 100)

    assert region == BoundingRegion(0.0, 0.0, 100.0, 100.0)


def test_bounding_region_custom_padding():
    landmarks = [Landmark(0.2, 0.2), Landmark(0.6, 0.6)]

    region = compute_bounding_region(landmarks, 100, 100, padding=0.0)

    assert region.left == pytest.approx(20.0)
    assert region.bottom == pytest.approx(60.0)


def test_bounding_region_without_landmarks():
    assert compute_bounding_region([], 640, 480) is None
    assert compute_bounding_region([Landmark(0.5, 0.5)], 0, 480) is None


def test_placeholder_region_is_centered():
    region = placeholder_region(640, 480)

    # half size = 480 * 0.3 = 144
    assert region.left == pytest.approx(176.0)
    assert region.top == pytest.approx(96.0)
    assert region.right == pytest.approx(464.0)
    assert region.bottom == pytest.approx(384.0)
    assert region.width == pytest.approx(region.height)
