import numpy as np
import pytest

from anonymisers.mask import build_mask
from detectors.contours import MESH_CONTOURS, mesh_to_contours, mesh_to_face
from detectors.face import ContourKind


@pytest.fixture
def mesh():
    rng = np.random.default_rng(7)
    return rng.uniform(50, 150, size=(468, 2)).astype(np.float32)


def test_every_kind_has_a_loop():
    assert set(MESH_CONTOURS) == set(ContourKind)
    for kind, idxs in MESH_CONTOURS.items():
        assert len(idxs) == len(set(idxs)), kind
        assert max(idxs) < 468


def test_mesh_to_contours_keeps_index_order(mesh):
    contours = mesh_to_contours(mesh)
    face = contours[ContourKind.FACE]
    idxs = MESH_CONTOURS[ContourKind.FACE]
    assert len(face) == len(idxs)
    assert (face[0].x, face[0].y) == pytest.approx(tuple(mesh[idxs[0]]))
    assert (face[-1].x, face[-1].y) == pytest.approx(tuple(mesh[idxs[-1]]))


def test_short_mesh_drops_kinds_out_of_range(mesh):
    assert mesh_to_contours(mesh[:300]).keys() == {
        k for k, idxs in MESH_CONTOURS.items() if max(idxs) < 300
    }


def test_mesh_to_face_bounds_and_mask(mesh):
    face = mesh_to_face(mesh)
    assert face.bounds.to_box() == pytest.approx([
        mesh[:, 0].min(), mesh[:, 1].min(), mesh[:, 0].max(), mesh[:, 1].max()
    ])
    assert not face.is_coarse
    assert mesh_to_face(mesh, with_contours=False).is_coarse


def test_oval_of_a_real_face_shape_masks_its_centre():
    # points on an ellipse in FACE_OVAL order give a simple closed outline
    mesh = np.zeros((468, 2), dtype=np.float32)
    idxs = MESH_CONTOURS[ContourKind.FACE]
    t = np.linspace(-np.pi / 2, 3 * np.pi / 2, len(idxs), endpoint=False)
    mesh[idxs, 0] = 100 + 40 * np.cos(t)
    mesh[idxs, 1] = 100 + 55 * np.sin(t)
    face = mesh_to_face(mesh)
    cov = build_mask(face, contour_kinds=[ContourKind.FACE]).rasterize((200, 200))
    assert cov[100, 100] == pytest.approx(1.0)
    assert cov[10, 10] == 0.0
