# -*- coding: utf-8 -*-
# qwebservice/pairing.py
"""
方法配对
把 schema 中的请求元素和响应元素配对成一个远程方法
"""

from typing import List, NamedTuple, Sequence

RESPONSE_SUFFIX = "Response"
REQUEST_SUFFIX = "Request"


class MethodPair(NamedTuple):
    name: str
    request_index: int
    response_index: int


class PairingStrategy:
    """配对策略基类"""

    def pair(self, element_names: Sequence[str]) -> List[MethodPair]:
        """返回按文档顺序配对成功的方法；未配对的元素直接丢弃"""
        raise NotImplementedError


class TruncationPairing(PairingStrategy):
    """
    按固定长度截断名字来配对

    "xxxResponse" 去掉最后 8 个字符得到方法名，再查找 "xxx" 或 "xxxRequest"；
    其它名字查找 "nameResponse"，或去掉最后 7 个字符后加 "Response"。
    这里是截断而不是后缀判断，名字过短或不以 Response/Request 结尾时结果可能不符合直觉。
    """

    def pair(self, element_names: Sequence[str]) -> List[MethodPair]:
        consumed = [False] * len(element_names)
        pairs = []

        for i, name in enumerate(element_names):
            if consumed[i]:
                continue

            if RESPONSE_SUFFIX in name:
                consumed[i] = True
                base = name[:-len(RESPONSE_SUFFIX)]
                j = self._find(element_names, consumed, (base, base + REQUEST_SUFFIX))
                if j is not None:
                    consumed[j] = True
                    pairs.append(MethodPair(base, j, i))
            else:
                candidates = (name + RESPONSE_SUFFIX,
                              name[:-len(REQUEST_SUFFIX)] + RESPONSE_SUFFIX)
                j = self._find(element_names, consumed, candidates)
                if j is not None:
                    consumed[i] = True
                    consumed[j] = True
                    pairs.append(MethodPair(name, i, j))

        return pairs

    @staticmethod
    def _find(element_names, consumed, candidates):
        for j, other in enumerate(element_names):
            if not consumed[j] and other in candidates:
                return j
        return None
