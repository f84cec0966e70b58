# -*- coding: utf-8 -*-
# qwebservice/model.py
"""
服务模型
一次解析得到的命名空间、服务地址和方法表；构建后只读
"""

from typing import Any, Dict, List, NamedTuple, Optional, Tuple
from .wsdl_types import Kind, default_value


class Field(NamedTuple):
    name: str
    kind: Kind


class Method(NamedTuple):
    """远程方法定义（不可变）"""
    name: str
    target_namespace: str
    endpoint: str
    parameters: Tuple[Field, ...] = ()
    return_fields: Tuple[Field, ...] = ()

    def parameter_names(self) -> List[str]:
        return [f.name for f in self.parameters]

    def return_value_names(self) -> List[str]:
        return [f.name for f in self.return_fields]

    def parameter_defaults(self) -> Dict[str, Any]:
        """参数名 -> 类型默认值"""
        return {f.name: default_value(f.kind) for f in self.parameters}


class ServiceModel:
    """
    WSDL 解析结果

    方法表归模型所有，对外只返回副本。重新解析会生成新的模型，
    之前取得的 Method 不会随之更新。
    """

    def __init__(self, namespace: str, endpoint: str, name: str = "", source: str = "",
                 methods: Optional[Dict[str, Method]] = None):
        self._namespace = namespace
        self._endpoint = endpoint
        self._name = name
        self._source = source
        self._methods = dict(methods or {})

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> str:
        return self._source

    @property
    def methods(self) -> Dict[str, Method]:
        return dict(self._methods)

    def method_names(self) -> List[str]:
        return sorted(self._methods)

    def get_method(self, name: str) -> Optional[Method]:
        return self._methods.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._methods

    def __len__(self) -> int:
        return len(self._methods)

    def __repr__(self) -> str:
        return f"ServiceModel(name={self._name!r}, endpoint={self._endpoint!r}, methods={len(self._methods)})"
