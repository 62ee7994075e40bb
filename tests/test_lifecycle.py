"""Unit tests for the component lifecycle transition table."""

import pytest

from ui_assembly.core.ir import ComponentState
from ui_assembly.core.ir import LifecycleState as S
from ui_assembly.core.lifecycle import LifecycleError, can_transition, transition

from conftest import make_instance


def _component(lifecycle):
    state = ComponentState.from_instance(make_instance("c1"), mounted_at=0.0)
    state.lifecycle = lifecycle
    return state


class TestAllowedEdges:

    @pytest.mark.parametrize("current,target", [
        (S.PENDING, S.MOUNTING),
        (S.MOUNTING, S.MOUNTED),
        (S.MOUNTED, S.UPDATING),
        (S.UPDATING, S.MOUNTED),
        (S.MOUNTED, S.UNMOUNTING),
        (S.UPDATING, S.UNMOUNTING),
        (S.UNMOUNTING, S.REMOVED),
    ])
    def test_legal(self, current, target):
        component = _component(current)
        transition(component, target)
        assert component.lifecycle is target

    @pytest.mark.parametrize("current,target", [
        (S.PENDING, S.MOUNTED),
        (S.MOUNTING, S.UNMOUNTING),
        (S.UNMOUNTING, S.MOUNTED),
        (S.REMOVED, S.MOUNTING),
        (S.MOUNTED, S.REMOVED),
    ])
    def test_illegal_raises(self, current, target):
        component = _component(current)
        with pytest.raises(LifecycleError) as excinfo:
            transition(component, target)
        assert component.lifecycle is current
        assert excinfo.value.component_id == "c1"

    def test_removed_is_terminal(self):
        assert not any(can_transition(S.REMOVED, target) for target in S)

    def test_new_state_starts_pending(self):
        assert ComponentState.from_instance(make_instance("x"), mounted_at=1.0).lifecycle is S.PENDING
