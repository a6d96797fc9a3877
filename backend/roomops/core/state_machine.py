"""
roomops/core/state_machine.py

状态机 - 每种实体的合法状态与转换表

与实体记录分离：记录只保存当前状态，服务在修改状态前调用
`StateMachine.validate` 校验转换是否合法。
"""
from typing import Dict, List, Any, Optional, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
import logging

from roomops.core.errors import InvalidTransition, InvalidState

logger = logging.getLogger(__name__)


def _value(state: Any) -> str:
    return state.value if isinstance(state, Enum) else str(state)


@dataclass(frozen=True)
class StateTransition:
    """
    状态转换定义

    Attributes:
        from_state: 源状态
        to_state: 目标状态
        trigger: 触发动作
        condition: 可选的转换条件
    """

    from_state: str
    to_state: str
    trigger: str
    condition: Optional[Callable[[Dict[str, Any]], bool]] = None

    def is_allowed(self, context: Dict[str, Any]) -> bool:
        """检查转换是否被允许"""
        if self.condition is None:
            return True
        try:
            return bool(self.condition(context))
        except Exception as e:
            logger.error(f"Error checking transition condition: {e}")
            return False


@dataclass
class StateMachineConfig:
    """
    状态机配置

    Attributes:
        name: 状态机名称（实体类型）
        states: 所有状态的列表
        transitions: 转换列表
        initial_state: 初始状态
        final_states: 终态，不允许再转出
    """

    name: str
    states: List[str]
    transitions: List[StateTransition]
    initial_state: str
    final_states: List[str] = field(default_factory=list)


class StateMachine:
    """
    无状态的转换校验器

    Example:
        >>> machine = StateMachine(StateMachineConfig(
        ...     name="StaffTask",
        ...     states=["todo", "in_progress", "done"],
        ...     transitions=[StateTransition("todo", "in_progress", "start")],
        ...     initial_state="todo",
        ... ))
        >>> machine.can_transition("todo", "in_progress")
        True
    """

    def __init__(self, config: StateMachineConfig):
        self._config = config
        # (from_state, to_state) -> transition
        self._edges: Dict[tuple, StateTransition] = {}
        # (from_state, trigger) -> transition
        self._triggers: Dict[tuple, StateTransition] = {}

        for t in config.transitions:
            if t.from_state not in config.states or t.to_state not in config.states:
                raise ValueError(
                    f"{config.name}: transition {t.from_state} -> {t.to_state} uses unknown state"
                )
            self._edges[(t.from_state, t.to_state)] = t
            self._triggers[(t.from_state, t.trigger)] = t

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def states(self) -> List[str]:
        return list(self._config.states)

    @property
    def initial_state(self) -> str:
        return self._config.initial_state

    @property
    def final_states(self) -> List[str]:
        return list(self._config.final_states)

    def is_final(self, state: Any) -> bool:
        return _value(state) in self._config.final_states

    def targets(self, current: Any) -> List[str]:
        """从当前状态可达的目标状态"""
        current = _value(current)
        return [to for (frm, to) in self._edges if frm == current]

    def can_transition(self, current: Any, target: Any,
                       context: Optional[Dict[str, Any]] = None) -> bool:
        """检查 current -> target 是否是合法的边"""
        transition = self._edges.get((_value(current), _value(target)))
        if transition is None:
            return False
        return transition.is_allowed(context or {})

    def validate(self, current: Any, target: Any,
                 context: Optional[Dict[str, Any]] = None) -> StateTransition:
        """
        校验状态转换

        Raises:
            InvalidTransition: 转换不在转换表中或条件不满足
        """
        current, target = _value(current), _value(target)
        if target not in self._config.states:
            raise InvalidTransition(
                f"{self.name} 没有状态 '{target}'",
                current=current, target=target, entity=self.name,
            )
        if not self.can_transition(current, target, context):
            logger.warning(f"Invalid transition: {self.name} {current} -> {target}")
            if (current, target) in self._edges:
                message = f"{self.name} 从 '{current}' 转换到 '{target}' 的条件不满足"
            else:
                message = f"{self.name} 不能从 '{current}' 转换到 '{target}'"
            raise InvalidTransition(
                message,
                current=current, target=target, entity=self.name,
            )
        return self._edges[(current, target)]

    def fire(self, current: Any, trigger: str,
             context: Optional[Dict[str, Any]] = None) -> str:
        """
        按触发动作求目标状态

        Raises:
            InvalidState: 当前状态不接受该动作
        """
        current = _value(current)
        transition = self._triggers.get((current, trigger))
        if transition is None or not transition.is_allowed(context or {}):
            raise InvalidState(
                f"{self.name} 状态为 '{current}'，不能执行 {trigger}",
                current=current, entity=self.name,
            )
        return transition.to_state


def build_state_machine(name: str, states: Iterable[Any],
                        edges: Iterable[tuple], initial_state: Any,
                        final_states: Iterable[Any] = ()) -> StateMachine:
    """用 (from, to, trigger[, condition]) 元组快速构建状态机"""
    return StateMachine(StateMachineConfig(
        name=name,
        states=[_value(s) for s in states],
        transitions=[StateTransition(_value(edge[0]), _value(edge[1]), *edge[2:]) for edge in edges],
        initial_state=_value(initial_state),
        final_states=[_value(s) for s in final_states],
    ))


__all__ = [
    "StateTransition",
    "StateMachineConfig",
    "StateMachine",
    "build_state_machine",
]
