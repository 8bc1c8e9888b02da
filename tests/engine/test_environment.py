"""absint Abstract Environment Tests — ENV-001 through ENV-004."""

import pytest

from absint.ast_nodes import Var
from absint.environment import AbstractEnvironment
from absint.errors import EngineError, MemoryIndexError
from absint.lattice import BOTTOM, NEG, POS, TOP


class TestReadWrite:
    """ENV-001: total, functional map."""

    def test_fresh_environment_is_top(self):
        env = AbstractEnvironment()
        assert env.size == 100
        assert all(v == TOP for v in env)
        assert not env.is_bottom()

    def test_write_returns_new_environment(self):
        env = AbstractEnvironment()
        updated = env.write(Var(3), NEG)
        assert updated.read(Var(3)) == NEG
        assert env.read(Var(3)) == TOP
        assert [i for i, v in enumerate(updated) if v != TOP] == [3]

    @pytest.mark.parametrize("index", [-1, 100, 1000])
    def test_out_of_range(self, index):
        env = AbstractEnvironment()
        with pytest.raises(MemoryIndexError) as exc:
            env.read(Var(index))
        assert exc.value.errors[0].details["index"] == index
        with pytest.raises(MemoryIndexError):
            env.write(Var(index), POS)


class TestJoin:
    """ENV-002: pointwise join."""

    def test_pointwise(self):
        a = AbstractEnvironment(3).write(Var(0), POS).write(Var(1), NEG).write(Var(2), POS)
        b = AbstractEnvironment(3).write(Var(0), POS).write(Var(1), POS).write(Var(2), BOTTOM)
        joined = a.join(b)
        assert list(joined) == [POS, TOP, POS]

    def test_bottom_env_is_identity(self):
        a = AbstractEnvironment(4).write(Var(1), NEG)
        assert a.join(a.bottomize()) == a
        assert a.bottomize().join(a) == a

    def test_size_mismatch(self):
        with pytest.raises(EngineError):
            AbstractEnvironment(2).join(AbstractEnvironment(3))


class TestBottom:
    """ENV-003: unreachability."""

    def test_single_bottom_slot_poisons_environment(self):
        env = AbstractEnvironment().write(Var(42), BOTTOM)
        assert env.is_bottom()

    def test_bottomize(self):
        env = AbstractEnvironment(5).write(Var(0), POS).bottomize()
        assert list(env) == [BOTTOM] * 5
        assert env.is_bottom()
        assert env.format([Var(0)]) == "bot"


class TestOrder:
    """ENV-004: pointwise order checks every slot."""

    def test_less_or_equal(self):
        low = AbstractEnvironment(3).write(Var(0), POS).write(Var(1), NEG)
        high = AbstractEnvironment(3)
        assert low.is_less_or_equal(high)
        assert not high.is_less_or_equal(low)
        assert low.is_less_or_equal(low)

    def test_disagreement_in_last_slot_is_detected(self):
        a = AbstractEnvironment(50).write(Var(49), POS)
        b = AbstractEnvironment(50).write(Var(49), NEG)
        assert not a.is_less_or_equal(b)

    def test_disagreement_after_agreeing_first_slot(self):
        a = AbstractEnvironment(3).write(Var(0), POS).write(Var(2), TOP)
        b = AbstractEnvironment(3).write(Var(0), POS).write(Var(2), NEG)
        assert not a.is_less_or_equal(b)

    def test_bottom_below_everything(self):
        env = AbstractEnvironment(3).write(Var(1), NEG)
        assert env.bottomize().is_less_or_equal(env)


class TestReporting:
    """ENV-005: display helpers."""

    def test_format_and_dict(self):
        x, y = Var(0, "x"), Var(1, "y")
        env = AbstractEnvironment().write(x, POS).write(y, NEG)
        assert env.as_dict([x, y]) == {"x": "Pos", "y": "Neg"}
        assert env.format([x, y]) == "{x: Pos, y: Neg}"
