import numpy as np

from partseed.core.emission import EmissionPoints
from partseed.core.exporter import NpzSink, PlySink


def test_npz_sink_writes_optional_arrays(tmp_path) -> None:
    path = tmp_path / "points.npz"
    sink = NpzSink(str(path))
    pts = EmissionPoints(
        positions=np.array([[0.0, 1.0], [2.0, 3.0]]),
        normals=np.array([[1.0, 0.0], [0.0, 1.0]]),
        colors=np.array([[1, 2, 3, 4], [5, 6, 7, 8]], dtype=np.uint8),
    )
    sink.write(pts)
    sink.close()

    with np.load(path) as data:
        np.testing.assert_allclose(data["positions"], pts.positions)
        np.testing.assert_allclose(data["normals"], pts.normals)
        np.testing.assert_array_equal(data["colors"], pts.colors)
        assert "requested" not in data.files


def test_npz_sink_records_requested_count(tmp_path) -> None:
    path = tmp_path / "volume.npz"
    sink = NpzSink(str(path))
    sink.write(EmissionPoints(positions=np.zeros((3, 3)), requested=5))
    sink.close()
    with np.load(path) as data:
        assert int(data["requested"]) == 5
        assert "normals" not in data.files


def test_ply_sink_pads_2d_points_and_writes_colors(tmp_path) -> None:
    path = tmp_path / "points.ply"
    sink = PlySink(str(path))
    sink.write(EmissionPoints(
        positions=np.array([[1.0, 2.0], [3.0, 4.0]]),
        colors=np.array([[10, 20, 30, 255], [0, 0, 0, 200]], dtype=np.uint8),
    ))
    sink.close()

    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f.readlines()]
    assert lines[0] == "ply"
    assert "element vertex 2" in lines
    assert "property uchar alpha" in lines
    assert "property float nx" not in lines
    body = lines[lines.index("end_header") + 1:]
    first = body[0].split()
    assert [float(v) for v in first[:3]] == [1.0, 2.0, 0.0]
    assert [int(v) for v in first[3:]] == [10, 20, 30, 255]


def test_ply_sink_writes_normals(tmp_path) -> None:
    path = tmp_path / "surface.ply"
    sink = PlySink(str(path))
    sink.write(EmissionPoints(positions=np.zeros((1, 3)), normals=np.array([[0.0, 0.0, 1.0]])))
    sink.close()
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f.readlines()]
    assert "property float nz" in lines
    values = [float(v) for v in lines[-1].split()]
    assert values == [0.0, 0.0, 0.0, 0.0, 0.0, 1.0]


def test_ply_sink_pads_2d_normals(tmp_path) -> None:
    path = tmp_path / "mask.ply"
    pts = EmissionPoints(positions=np.array([[4.0, 5.0]]), normals=np.array([[0.0, -1.0]]))
    assert pts.dimensions == 2
    sink = PlySink(str(path))
    sink.write(pts)
    sink.close()
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.strip() for line in f.readlines()]
    values = [float(v) for v in lines[-1].split()]
    assert values == [4.0, 5.0, 0.0, 0.0, -1.0, 0.0]


def test_sink_without_points_writes_nothing(tmp_path) -> None:
    path = tmp_path / "nothing.npz"
    sink = NpzSink(str(path))
    sink.close()
    assert not path.exists()
