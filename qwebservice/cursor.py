# -*- coding: utf-8 -*-
# qwebservice/cursor.py
"""
XML 游标
基于 ElementTree.iterparse 的只进式标记遍历，WSDL 读取器只做一次前向扫描，不回溯
"""

import xml.etree.ElementTree as ET
from typing import Dict, Iterator, NamedTuple, Optional
from .errors import DocumentError

START = "start"
END = "end"


class Token(NamedTuple):
    kind: str
    name: str
    attributes: Dict[str, str]
    attribute_count: int
    depth: int

    @property
    def is_start(self) -> bool:
        return self.kind == START

    @property
    def is_end(self) -> bool:
        return self.kind == END


def local_name(tag: str) -> str:
    """去掉命名空间 ("{http://...}element" => "element")"""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


class XmlCursor:
    """只进式 XML 标记遍历器"""

    def __init__(self, path: str):
        self.path = path
        try:
            self._file = open(path, "rb")
        except OSError as e:
            raise DocumentError(f"Error: cannot read WSDL file: {path}. Reason: {e.strerror or e}")
        self._events = ET.iterparse(self._file, events=(START, END))
        self.depth = 0
        self.at_end = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self) -> None:
        self._file.close()

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        if self.at_end:
            raise StopIteration
        try:
            event, elem = next(self._events)
        except StopIteration:
            self.at_end = True
            raise
        except ET.ParseError as e:
            self.at_end = True
            raise DocumentError(f"Error: malformed WSDL document {self.path}: {e}")

        if event == START:
            self.depth += 1
            attributes = {local_name(k): v for k, v in elem.attrib.items()}
            return Token(START, local_name(elem.tag), attributes, len(elem.attrib), self.depth)

        token = Token(END, local_name(elem.tag), {}, 0, self.depth)
        self.depth -= 1
        # 属性已在 start 事件读取，释放已遍历的子树
        elem.clear()
        return token

    def read_next(self) -> Optional[Token]:
        return next(self, None)

    def children(self, parent: Token) -> Iterator[Token]:
        """逐个返回 parent 的直接子元素；调用方未读完的子树会被跳过"""
        while True:
            token = self.read_next()
            if token is None or token.is_end:
                return
            yield token
            self.skip_to(parent.depth)

    def descendants(self, parent: Token) -> Iterator[Token]:
        """返回 parent 内部所有元素的 start 标记，到 parent 结束为止"""
        for token in self:
            if token.is_end and self.depth < parent.depth:
                return
            if token.is_start:
                yield token

    def skip_to(self, depth: int) -> None:
        while self.depth > depth:
            if self.read_next() is None:
                return
