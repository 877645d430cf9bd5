import dataclasses

import pytest

from mandelrender.zoompoints import (
    INTERESTING_POINTS,
    ZoomPoint,
    choose_zoom_point,
    get_zoom_point,
    make_rng,
    point_names,
)


def test_registry_is_well_formed():
    assert len(INTERESTING_POINTS) == 13
    names = point_names()
    assert len(set(names)) == len(names)
    for p in INTERESTING_POINTS:
        assert p.radius > 0
        assert p.max_iterations > 0


def test_lookup_by_name():
    p = get_zoom_point("seahorse-valley")
    assert (p.center_real, p.center_imag, p.radius, p.max_iterations) == (-0.747, 0.1, 0.001, 800)
    with pytest.raises(KeyError):
        get_zoom_point("nowhere")


@pytest.mark.parametrize("radius,iters", [(0.0, 10), (-1.0, 10), (1.0, 0), (1.0, -5)])
def test_invariants_enforced(radius, iters):
    with pytest.raises(ValueError):
        ZoomPoint("bad", 0.0, 0.0, radius, iters)


def test_zoom_point_is_immutable():
    p = get_zoom_point("overview")
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.radius = 1.0


def test_seeded_selection_is_reproducible():
    a = [choose_zoom_point(make_rng(7)) for _ in range(3)]
    b = [choose_zoom_point(make_rng(7)) for _ in range(3)]
    assert a == b


def test_selection_covers_registry():
    rng = make_rng(1234)
    seen = {choose_zoom_point(rng).name for _ in range(500)}
    assert seen == set(point_names())


def test_unseeded_selection_returns_member():
    assert choose_zoom_point() in INTERESTING_POINTS


def test_empty_registry():
    with pytest.raises(ValueError):
        choose_zoom_point(make_rng(0), points=())
