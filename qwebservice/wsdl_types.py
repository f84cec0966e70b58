# -*- coding: utf-8 -*-
"""
WSDL 数据类型映射
把带命名空间前缀的 XSD 类型名 ("s:int", "tns:ArrayOfString") 映射到一组封闭的值类型
"""

from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple, Optional, Union


class ValueKind(Enum):
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    BOOL = "boolean"
    DATETIME = "dateTime"
    STRING = "string"
    CHAR = "char"


class ListOf(NamedTuple):
    """数组类型；item 为 None 表示元素类型未区分"""
    item: Optional[ValueKind] = None

    def __str__(self) -> str:
        return f"ArrayOf({self.item.value if self.item else 'any'})"


Kind = Union[ValueKind, ListOf]

ARRAY_PREFIX = "ArrayOf"

# XSD 本地类型名 -> 值类型 -> 默认值
# 默认值与原始 QVariant 行为一致：boolean 默认为 True
TYPE_MAPPINGS = {
    "int": {"kind": ValueKind.INT, "default": 0},
    "float": {"kind": ValueKind.FLOAT, "default": 0.0},
    "double": {"kind": ValueKind.DOUBLE, "default": 0.0},
    "boolean": {"kind": ValueKind.BOOL, "default": True},
    "dateTime": {"kind": ValueKind.DATETIME, "default": None},
    "string": {"kind": ValueKind.STRING, "default": ""},
    "char": {"kind": ValueKind.CHAR, "default": ""},
}


def strip_prefix(qualified_type: str) -> str:
    # 去掉第一个 ":" 及之前的命名空间前缀 ("s:int" => "int")
    return qualified_type.split(":", 1)[-1]


def map_type(qualified_type: str) -> Kind:
    """
    XSD 类型名映射为值类型

    Args:
        qualified_type: 带命名空间前缀的类型名，例如 "s:int"

    Returns:
        ValueKind 或 ListOf；无法识别的类型一律按字符串处理
    """
    type_name = strip_prefix(qualified_type)

    if type_name in TYPE_MAPPINGS:
        return TYPE_MAPPINGS[type_name]["kind"]

    if type_name.startswith(ARRAY_PREFIX):
        # 只区分 ArrayOfString，其余数组元素类型不区分
        if type_name[len(ARRAY_PREFIX):] == "String":
            return ListOf(ValueKind.STRING)
        return ListOf()

    return ValueKind.STRING


def default_value(kind: Kind) -> Any:
    """返回类型对应的默认值"""
    if isinstance(kind, ListOf):
        return []
    return TYPE_MAPPINGS[kind.value]["default"]


def coerce_value(kind: Kind, text: str) -> Any:
    """把命令行输入的字符串转换为对应类型的值，转换失败时抛出 ValueError"""
    if isinstance(kind, ListOf):
        return [item.strip() for item in text.split(",")] if text else []
    if kind == ValueKind.INT:
        return int(text)
    if kind in (ValueKind.FLOAT, ValueKind.DOUBLE):
        return float(text)
    if kind == ValueKind.BOOL:
        lowered = text.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ValueError(f"无效的布尔值: {text}")
    if kind == ValueKind.DATETIME:
        return datetime.fromisoformat(text)
    if kind == ValueKind.CHAR and len(text) > 1:
        raise ValueError(f"char 类型只能包含一个字符: {text}")
    return text
