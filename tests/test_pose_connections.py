from __future__ import annotations

from pose_core.pose_connections import SKELETON_CONNECTIONS, resolve_edges
from pose_core.types import Keypoint


def keypoints_for(ids) -> tuple[Keypoint, ...]:
    return tuple(Keypoint(id=i, x=float(i), y=float(i), confidence=1.0) for i in ids)


def test_table_is_the_seventeen_point_layout():
    assert len(SKELETON_CONNECTIONS) == 16
    assert len(set(SKELETON_CONNECTIONS)) == 16
    assert all(0 <= a < 17 and 0 <= b < 17 for a, b in SKELETON_CONNECTIONS)
    assert (11, 13) in SKELETON_CONNECTIONS
    assert (14, 16) in SKELETON_CONNECTIONS


def test_full_frame_resolves_every_edge_to_itself():
    kps = keypoints_for(range(17))
    assert resolve_edges(kps) == SKELETON_CONNECTIONS
    assert resolve_edges(kps, by_id=False) == SKELETON_CONNECTIONS


def test_edges_follow_joint_identity_after_a_drop():
    present = [i for i in range(17) if i != 1]
    kps = keypoints_for(present)

    edges = resolve_edges(kps)

    linked = {(kps[a].id, kps[b].id) for a, b in edges}
    assert linked == {e for e in SKELETON_CONNECTIONS if 1 not in e}


def test_positional_mode_reproduces_sequence_indexing():
    # 只剩 5 个点：旧行为只看下标是否越界，不看关节 id
    kps = keypoints_for([5, 6, 11, 12, 13])

    assert resolve_edges(kps, by_id=False) == ((0, 1), (0, 2), (1, 3), (2, 4))
    assert resolve_edges(kps) == ((0, 1), (0, 2), (1, 3), (2, 3), (2, 4))


def test_empty_frame_has_no_edges():
    assert resolve_edges(()) == ()
    assert resolve_edges((), by_id=False) == ()
