import pytest

from kaleidoscope.config import GROUP_ROTATION_SPEED, MIRROR_OPACITY
from kaleidoscope.controller.assembler import RenderAssembler
from kaleidoscope.model.geometry_primitives import Point
from kaleidoscope.model.params import DrawingParams, MaterialType, StrokeStyle, SymmetryMode
from kaleidoscope.model.registry import StrokeRegistry

STROKE = [Point(1.0, 0.0, 0.0), Point(1.5, 0.5, 0.0), Point(2.0, 0.0, 0.5)]


def _commit(registry: StrokeRegistry, points, params: DrawingParams):
    registry.begin(points[0])
    for p in points[1:]:
        registry.append_point(p)
    return registry.commit(params)


@pytest.fixture
def params() -> DrawingParams:
    return DrawingParams()


@pytest.fixture
def registry() -> StrokeRegistry:
    return StrokeRegistry()


def test_six_fold_stroke_gives_six_meshes(registry, params):
    stroke = _commit(registry, STROKE, params)
    items = RenderAssembler(registry).assemble(False, params)

    assert len(items) == 6
    assert [item.key for item in items] == [f"{stroke.id}-{i}" for i in range(6)]
    assert items[0].opacity == 1.0
    assert all(item.opacity == MIRROR_OPACITY for item in items[1:])
    assert all(item.color == params.color for item in items)
    assert all(item.shading.opacity == item.opacity for item in items)


@pytest.mark.parametrize("mode, expected", [
    (SymmetryMode.NONE, 1),
    (SymmetryMode.FOUR_FOLD, 4),
    (SymmetryMode.EIGHT_FOLD, 8),
    (SymmetryMode.MANDALA, 12),
])
def test_item_count_follows_symmetry(registry, params, mode, expected):
    _commit(registry, STROKE, params)
    params.set_symmetry(mode)
    assert len(RenderAssembler(registry).assemble(False, params)) == expected


def test_item_count_is_strokes_times_copies(registry, params):
    _commit(registry, STROKE, params)
    _commit(registry, [Point(0.0, 1.0, 0.0), Point(0.0, 2.0, 1.0)], params)
    params.set_symmetry(SymmetryMode.FOUR_FOLD)
    assert len(RenderAssembler(registry).assemble(False, params)) == 8


def test_degenerate_stroke_is_skipped(registry, params):
    params.set_style(StrokeStyle.DOTTED)
    _commit(registry, [Point(0.0, 0.0, 0.0), Point(1.0, 0.0, 0.0)], params)
    assert RenderAssembler(registry).assemble(False, params) == ()


def test_draw_list_is_memoized(registry, params):
    _commit(registry, STROKE, params)
    assembler = RenderAssembler(registry)

    first = assembler.assemble(False, params)
    assert assembler.assemble(False, params) is first
    assert assembler.build_count == 1

    params.set_scale(2.0)
    assembler.assemble(False, params)
    assert assembler.build_count == 1

    params.set_style(StrokeStyle.SPIRAL)
    assert assembler.assemble(False, params) is not first
    assert assembler.build_count == 2


def test_new_stroke_triggers_rebuild(registry, params):
    assembler = RenderAssembler(registry)
    assert assembler.assemble(False, params) == ()
    _commit(registry, STROKE, params)
    assert len(assembler.assemble(False, params)) == 6
    assert assembler.build_count == 2


def test_in_progress_stroke_is_drawn_while_drawing(registry, params):
    params.set_symmetry(SymmetryMode.NONE)
    registry.begin(STROKE[0])
    registry.append_point(STROKE[1])

    assembler = RenderAssembler(registry)
    assert [item.key for item in assembler.assemble(True, params)] == ["current-0"]
    assert assembler.assemble(False, params) == ()


def test_rotation_advances_with_symmetry(registry, params):
    assembler = RenderAssembler(registry)
    assembler.advance(2.0, params)
    transform = assembler.advance(1.0, params)
    assert transform.rotation_y == pytest.approx(3.0 * GROUP_ROTATION_SPEED)


def test_no_symmetry_shows_the_pattern_unrotated(registry, params):
    assembler = RenderAssembler(registry)
    assembler.advance(2.0, params)

    params.set_symmetry(SymmetryMode.NONE)
    assert assembler.advance(5.0, params).rotation_y == 0.0

    params.set_symmetry(SymmetryMode.FOUR_FOLD)
    assert assembler.advance(1.0, params).rotation_y == pytest.approx(GROUP_ROTATION_SPEED)


def test_frame_carries_scale(registry, params):
    params.set_scale(1.5)
    frame = RenderAssembler(registry).frame(0.016, False, params)
    assert frame.transform.scale == pytest.approx(1.5)
    assert frame.items == ()


# --- Per-stroke mesh cache ---

def _mandala_scene(registry, params, n_strokes=3):
    params.set_symmetry(SymmetryMode.MANDALA)
    for k in range(n_strokes):
        _commit(registry, [Point(1.0 + k, 0.0, 0.0), Point(1.5 + k, 0.5, 0.0), Point(2.0 + k, 0.0, 0.5)], params)


def test_append_only_resweeps_the_current_stroke(registry, params):
    _mandala_scene(registry, params)
    assembler = RenderAssembler(registry)
    committed = assembler.assemble(True, params)
    assert assembler.mesh_build_count == 36

    registry.begin(Point(0.0, 3.0, 0.0))
    registry.append_point(Point(1.0, 3.0, 0.0))
    items = assembler.assemble(True, params)

    assert len(items) == 48
    assert all(new is old for new, old in zip(items[:36], committed))
    assert [item.key for item in items[36:]] == [f"current-{i}" for i in range(12)]
    assert assembler.mesh_build_count == 48

    registry.append_point(Point(2.0, 3.5, 0.0))
    items = assembler.assemble(True, params)
    assert all(new.mesh is old.mesh for new, old in zip(items[:36], committed))
    assert assembler.mesh_build_count == 60


def test_symmetry_change_resweeps_committed_strokes(registry, params):
    _commit(registry, STROKE, params)
    assembler = RenderAssembler(registry)
    six = assembler.assemble(False, params)

    params.set_symmetry(SymmetryMode.FOUR_FOLD)
    four = assembler.assemble(False, params)
    assert len(four) == 4
    assert four[0] is not six[0]
    assert assembler.mesh_build_count == 10


def test_brush_change_keeps_committed_meshes(registry, params):
    _commit(registry, STROKE, params)
    assembler = RenderAssembler(registry)
    first = assembler.assemble(False, params)

    params.set_color("#ffffff")
    params.set_material(MaterialType.GLASS)
    again = assembler.assemble(False, params)

    assert again is not first
    assert all(a is b for a, b in zip(again, first))
    assert again[0].material == MaterialType.STANDARD


def test_erased_stroke_leaves_the_cache(registry, params):
    stroke = _commit(registry, STROKE, params)
    assembler = RenderAssembler(registry)
    first = assembler.assemble(False, params)

    registry.erase_near(stroke.points[0], 0.5)
    assert assembler.assemble(False, params) == ()

    redrawn = _commit(registry, STROKE, params)
    items = assembler.assemble(False, params)
    assert items[0].key == f"{redrawn.id}-0"
    assert items[0] is not first[0]
