import pytest

from mea_dashboard.domain.reports import ChartPoint
from mea_dashboard.utils.radar import DEFAULT_STOPS, gradient_color, make_domain_radar, series_frame


def sample_series() -> list[ChartPoint]:
    return [ChartPoint("MEA01", 3.0), ChartPoint("MEA02", 1.5), ChartPoint("MEA03", 4.5)]


def test_polygon_is_closed_and_axis_fixed():
    fig = make_domain_radar(sample_series())
    polygon, markers = fig.data
    assert list(polygon.r) == [3.0, 1.5, 4.5, 3.0]
    assert list(polygon.theta) == ["MEA01", "MEA02", "MEA03", "MEA01"]
    assert list(markers.text) == ["3.0", "1.5", "4.5"]
    assert tuple(fig.layout.polar.radialaxis.range) == (0, 5.0)


def test_default_title_names_lowest_domain():
    fig = make_domain_radar(sample_series())
    assert fig.layout.title.text.startswith("MEA02 is the lowest")


def test_accepts_plain_dicts_and_clips_values():
    fig = make_domain_radar(
        [{"label": "A", "value": 7, "max": 5}, {"label": "B", "value": -1, "max": 5}],
        title="Custom",
    )
    assert list(fig.data[1].r) == [5.0, 0.0]
    assert fig.layout.title.text == "Custom"


def test_missing_fields_raise_value_error():
    with pytest.raises(ValueError):
        series_frame([{"label": "A", "value": 1.0}])


def test_non_numeric_values_raise_type_error():
    with pytest.raises(TypeError):
        make_domain_radar([{"label": "A", "value": "high", "max": 5}])


def test_empty_series_gives_empty_figure():
    fig = make_domain_radar([])
    assert len(fig.data) == 0


def test_gradient_color_endpoints():
    assert gradient_color(-2) == DEFAULT_STOPS[0][1]
    assert gradient_color(0) == DEFAULT_STOPS[0][1]
    assert gradient_color(5) == DEFAULT_STOPS[-1][1]
    assert gradient_color(9) == DEFAULT_STOPS[-1][1]
    assert gradient_color(2.5).startswith("#")
