"""
常量和枚举定义
"""
from enum import Enum


class ConditionOperator(str, Enum):
    """条件（或结束条件）组合方式"""
    AND = "AND"
    OR = "OR"


class DetectionType(str, Enum):
    """条件模板的查找范围"""
    EXACT = "exact"  # 仅在条件区域内
    WHOLE_SCREEN = "whole_screen"  # 整个画面


class ActionType(str, Enum):
    """处理模块自身解释的动作类型

    TOGGLE_EVENT 由处理模块直接执行；CLICK/SWIPE 在随机化时会抖动坐标。
    其余类型原样交给注入的动作执行器。
    """
    CLICK = "click"
    SWIPE = "swipe"
    TOGGLE_EVENT = "toggle_event"


class ToggleType(str, Enum):
    """事件开关方式"""
    ENABLE = "enable"
    DISABLE = "disable"
    TOGGLE = "toggle"


# 条件未配置时允许的差异百分比
DEFAULT_CONDITION_THRESHOLD = 4
# 检测质量范围（缩放后画面最长边，像素）
MIN_DETECTION_QUALITY = 400
MAX_DETECTION_QUALITY = 3216
# 随机化时点击/滑动坐标的最大抖动（像素）
RANDOMIZATION_POSITION_MAX_OFFSET_PX = 5
