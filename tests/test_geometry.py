import pytest

from conftest import EIFFEL_KML
from voice_rig_agent.cluster.geometry import (
    DEFAULT_RANGE,
    MAX_RANGE,
    MIN_RANGE,
    Coordinate,
    build_look_at,
    calculate_center,
    calculate_range,
    extract_coordinates,
    parse_tuple,
)


def test_center_is_bounding_box_midpoint():
    coords = [Coordinate(10, 10), Coordinate(20, 20), Coordinate(11, 19)]
    assert calculate_center(coords) == Coordinate(15, 15)


def test_center_of_nothing():
    assert calculate_center([]) == Coordinate(0.0, 0.0)


def test_range_uses_largest_span():
    coords = [Coordinate(10, 10), Coordinate(20, 12)]
    assert calculate_range(coords) == pytest.approx(10 * 111320 * 1.8)


def test_range_clamps():
    assert calculate_range([Coordinate(0, 0), Coordinate(0.001, 0.001)]) == MIN_RANGE
    assert calculate_range([Coordinate(-80, -170), Coordinate(80, 170)]) == MAX_RANGE


def test_single_point_uses_default_range():
    coords = extract_coordinates(EIFFEL_KML)
    assert coords == [Coordinate(48.8584, 2.2945)]
    assert calculate_range(coords) == DEFAULT_RANGE == 500000


def test_points_take_precedence_over_lines():
    document = """<kml><Document>
      <Placemark><LineString><coordinates>0,0 1,1 2,2</coordinates></LineString></Placemark>
      <Placemark><Point><coordinates>10,20</coordinates></Point></Placemark>
      <Placemark><Point><coordinates>30,40,100 31,41</coordinates></Point></Placemark>
    </Document></kml>"""
    assert extract_coordinates(document) == [Coordinate(20, 10), Coordinate(40, 30)]


def test_line_coordinates_used_when_no_points():
    document = "<kml><LineString><coordinates>\n 0,0 \n 1,1,5 bad 200,0\n</coordinates></LineString></kml>"
    assert extract_coordinates(document) == [Coordinate(0, 0), Coordinate(1, 1)]


def test_parse_tuple():
    assert parse_tuple("2.5,48.1,30") == Coordinate(48.1, 2.5)
    assert parse_tuple("2.5") is None
    assert parse_tuple("a,b") is None
    assert parse_tuple("0,95") is None


def test_build_look_at():
    view = build_look_at(48.0, 2.0, 1000, tilt=45, heading=10, altitude_mode="absolute")
    assert view.startswith("<LookAt><longitude>2.0</longitude><latitude>48.0</latitude>")
    assert "<range>1000</range><tilt>45</tilt><heading>10</heading>" in view
    assert view.endswith("<altitudeMode>absolute</altitudeMode></LookAt>")
