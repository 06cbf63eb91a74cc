import pytest
import numpy as np
import trimesh
from rops.data.cloud_source import FileCloudSource, SyntheticCloudSource, make_cloud_source


def test_synthetic_sphere():
    cloud = SyntheticCloudSource(shape='sphere', radius=0.05, resolution=20).try_get_latest()

    assert cloud.ndim == 2 and cloud.shape[1] == 3
    assert cloud.dtype == np.float64
    assert np.allclose(np.linalg.norm(cloud, axis=1), 0.05, atol=1e-6)


@pytest.mark.parametrize('shape', ['cube', 'cylinder'])
def test_synthetic_shapes(shape):
    cloud = SyntheticCloudSource(shape=shape, radius=0.1, resolution=16).try_get_latest()

    assert len(cloud) > 0
    assert np.all(np.isfinite(cloud))


def test_synthetic_noise_is_seeded():
    first = SyntheticCloudSource(noise=1e-3, seed=7).try_get_latest()
    second = SyntheticCloudSource(noise=1e-3, seed=7).try_get_latest()
    clean = SyntheticCloudSource(noise=0.0).try_get_latest()

    assert np.array_equal(first, second)
    assert not np.allclose(first, clean)


def test_unknown_shape():
    with pytest.raises(ValueError):
        SyntheticCloudSource(shape='torus')


def write_ascii_pcd(path, points):
    header = "\n".join([
        "# .PCD v0.7 - Point Cloud Data file format",
        "VERSION 0.7",
        "FIELDS x y z",
        "SIZE 4 4 4",
        "TYPE F F F",
        "COUNT 1 1 1",
        f"WIDTH {len(points)}",
        "HEIGHT 1",
        "VIEWPOINT 0 0 0 1 0 0 0",
        f"POINTS {len(points)}",
        "DATA ascii",
    ])
    body = "\n".join(" ".join(f"{v:.6f}" for v in p) for p in points)
    path.write_text(header + "\n" + body + "\n")


def test_file_source_reads_pcd(tmp_path):
    pytest.importorskip("open3d")
    points = np.random.default_rng(2).random((5, 3))
    cloud_path = tmp_path / 'frame.pcd'
    write_ascii_pcd(cloud_path, points)

    cloud = FileCloudSource(cloud_path).try_get_latest()

    assert cloud.shape == (5, 3)
    assert cloud.dtype == np.float64
    assert np.allclose(cloud, points, atol=1e-5)


def test_file_source_reads_ply(tmp_path):
    pytest.importorskip("open3d")
    points = np.random.default_rng(0).random((40, 3))
    cloud_path = tmp_path / 'frame.ply'
    trimesh.PointCloud(points).export(str(cloud_path))

    cloud = FileCloudSource(cloud_path).try_get_latest()

    assert cloud.shape == (40, 3)
    assert np.allclose(cloud, points, atol=1e-5)


def test_file_source_unsupported_format(tmp_path):
    pytest.importorskip("open3d")
    cloud_path = tmp_path / 'frame.unknown'
    cloud_path.write_text("not a point cloud\n")

    assert FileCloudSource(cloud_path).try_get_latest() is None


def test_file_source_empty_pcd(tmp_path):
    pytest.importorskip("open3d")
    cloud_path = tmp_path / 'empty.pcd'
    write_ascii_pcd(cloud_path, np.zeros((0, 3)))

    assert FileCloudSource(cloud_path).try_get_latest() is None


def test_file_source_missing_frame(tmp_path):
    assert FileCloudSource(tmp_path / 'missing.ply').try_get_latest() is None


def test_make_cloud_source(tmp_path):
    assert isinstance(make_cloud_source({'type': 'synthetic', 'shape': 'cube'}), SyntheticCloudSource)
    assert isinstance(make_cloud_source({'type': 'file', 'path': str(tmp_path / 'a.ply')}), FileCloudSource)

    with pytest.raises(ValueError):
        make_cloud_source({'type': 'file'})
    with pytest.raises(ValueError):
        make_cloud_source({'type': 'kinect'})
